"""
Web editor for the calculator configuration, built on NiceGUI.

Public API:
    - run_editor: Start the web server with the editor page
    - create_app: Register the editor routes
    - EditorState: Per-browser store, publisher and storage bundle
"""

from __future__ import annotations

from .app import create_app, run_editor
from .state import EditorState, UserStorage

__all__ = [
    "create_app",
    "run_editor",
    "EditorState",
    "UserStorage",
]
