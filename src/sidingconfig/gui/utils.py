"""
Utility functions for the editor GUI.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from nicegui import ui

LOGGER = logging.getLogger(__name__)


def safe_timer(interval: float, callback: Callable[[], Any], *, once: bool = False) -> ui.timer:
    """Create a timer that stops instead of failing once its client is gone.

    Args:
        interval: Timer interval in seconds
        callback: Function to call on each interval
        once: If True, timer only fires once
    """
    timer_ref: list[ui.timer | None] = [None]

    @wraps(callback)
    def safe_callback() -> None:
        if timer_ref[0] is not None and not timer_ref[0].active:
            return
        try:
            callback()
        except (RuntimeError, KeyError) as exc:
            # client disconnected or element deleted
            LOGGER.debug("Timer callback skipped: %s", exc)
            if timer_ref[0] is not None:
                timer_ref[0].active = False

    timer = ui.timer(interval, safe_callback, once=once)
    timer_ref[0] = timer

    def on_disconnect() -> None:
        timer.active = False

    ui.context.client.on_disconnect(on_disconnect)
    return timer


async def confirm_dialog(message: str, *, confirm_label: str = "Delete") -> bool:
    """Show a modal confirmation and resolve to the operator's choice.

    Closing the dialog without choosing counts as a refusal.
    """
    with ui.dialog() as dialog, ui.card().classes("p-4"):
        ui.label(message).classes("text-lg font-semibold mb-4")
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancel", on_click=lambda: dialog.submit(False)).props("flat")
            ui.button(confirm_label, on_click=lambda: dialog.submit(True)).props("color=negative")

    dialog.open()
    try:
        return bool(await dialog)
    finally:
        dialog.delete()


def safe_notify(client, message: str, *, type: str = "info", position: str = "bottom", **kwargs) -> None:  # noqa: A002
    """Send a notification to a client that may have disconnected during an await."""
    if getattr(client, "_deleted", False):
        LOGGER.debug("Skipping notification - client disconnected: %s", message)
        return
    try:
        with client:
            ui.notify(message, type=type, position=position, **kwargs)
    except RuntimeError:
        LOGGER.debug("Failed to send notification (client likely disconnected): %s", message)


def suppress_nicegui_disconnect_errors() -> None:
    """Drop NiceGUI 'parent slot deleted' errors raised after a tab closes."""

    class DisconnectErrorFilter(logging.Filter):
        def filter(self, record: logging.LogRecord) -> bool:
            return not (record.name == "nicegui" and "parent slot" in str(record.msg).lower())

    logging.getLogger("nicegui").addFilter(DisconnectErrorFilter())
