"""
Reusable form components for the editor pages.
"""

from .settings_card import settings_card
from .value_input import value_input

__all__ = ["settings_card", "value_input"]
