"""
Page definitions for the editor GUI.

Pages:
    - editor: Tabbed configuration editor with GitHub publishing
"""

from __future__ import annotations

from . import editor

__all__ = ["editor"]
