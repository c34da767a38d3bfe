"""
NiceGUI application setup and entry point for the editor.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from nicegui import app, ui

from ..config import AppConfig
from ..target import KeyValueStorage
from .pages import editor
from .state import EditorState, UserStorage
from .utils import suppress_nicegui_disconnect_errors

LOGGER = logging.getLogger(__name__)


def create_app(app_config: AppConfig, storage_factory: Callable[[], KeyValueStorage] = UserStorage) -> None:
    """Register the editor routes.

    Args:
        app_config: Loaded editor configuration
        storage_factory: Builds the storage for a page visit; the default reads
            the visiting browser's ``app.storage.user``
    """

    @ui.page("/")
    def index_page() -> None:
        state = EditorState.create(app_config, storage_factory())
        ui.page_title("Siding Calculator Configuration")
        editor.editor_page(state)

    @app.get("/api/config")
    def api_config() -> dict:
        """Default configuration in the published JSON shape."""
        from ..models import default_configuration

        return default_configuration().to_json_dict()


def run_editor(app_config: AppConfig, *, host: str | None = None, port: int | None = None) -> None:
    """Start the editor web server.

    Args:
        app_config: Loaded editor configuration
        host: Override for ``gui.host``
        port: Override for ``gui.port``
    """
    suppress_nicegui_disconnect_errors()
    create_app(app_config)

    host = host or app_config.gui.host
    port = port or app_config.gui.port
    LOGGER.info("Starting configuration editor on http://%s:%d", host, port)
    ui.run(
        host=host,
        port=port,
        title="Siding Calculator Configuration",
        reload=False,
        show=False,
        storage_secret=app_config.gui.ensure_storage_secret(),
    )
