"""
Settings card component for grouping related fields.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from nicegui import ui


@contextmanager
def settings_card(
    title: str,
    *,
    icon: str | None = None,
    description: str | None = None,
) -> Generator[ui.column, None, None]:
    """Create a titled card and yield its content column.

    Args:
        title: Section title
        icon: Optional Material icon name
        description: Optional text below the title
    """
    with ui.card().classes("w-full"):
        with ui.row().classes("items-center gap-2 mb-2"):
            if icon:
                ui.icon(icon).classes("text-slate-500 text-xl")
            with ui.column().classes("gap-0 flex-1"):
                ui.label(title).classes("text-lg font-semibold text-slate-700 dark:text-slate-200")
                if description:
                    ui.label(description).classes("text-sm text-slate-500 dark:text-slate-400")

        with ui.column().classes("w-full gap-3") as content:
            yield content
