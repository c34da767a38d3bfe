"""
Input bound to a store update.

The value is committed when the field loses focus or Enter is pressed; a
rejected value keeps the field marked with the store's message.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from nicegui import ui

from ...store import UpdateResult


def _display(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return "" if value is None else str(value)


def value_input(
    label: str,
    value: Any,
    commit: Callable[[str], UpdateResult],
    *,
    numeric: bool = True,
    width: str = "w-40",
) -> ui.input:
    """Create an input that sends its text to ``commit``.

    Args:
        label: Field label
        value: Current value from the configuration
        commit: Store operation taking the raw text
        numeric: Render as a number field
        width: Tailwind width class
    """
    field = ui.input(label=label, value=_display(value)).classes(width).props("outlined dense")
    if numeric:
        field.props('type="number" step="any"')

    def handle_commit() -> None:
        result = commit(field.value)
        if result.ok:
            field.props(remove="error error-message")
        else:
            message = result.message.replace('"', "'")
            field.props(f'error error-message="{message}"')

    field.on("blur", handle_commit)
    field.on("keydown.enter", handle_commit)
    return field
