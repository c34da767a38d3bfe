from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LABEL_WIDTH = 18
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_NOISY_LOGGERS = ("urllib3", "nicegui", "uvicorn.access")


def configure_logging(
    level: int = logging.INFO,
    *,
    log_file: Path | None = None,
    console: Console | None = None,
) -> None:
    """Install console (rich) and optional file handlers on the root logger.

    Calling it again replaces the handlers it installed before.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_sidingconfig", False):
            root.removeHandler(handler)

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler._sidingconfig = True
    root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler._sidingconfig = True
        root.addHandler(file_handler)

    root.setLevel(min(level, logging.DEBUG) if log_file is not None else level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def render_fields_block(title: str, fields: Mapping[str, object], *, indent: str = "    ") -> str:
    """Render a titled ``label: value`` block for multi-line log messages."""
    label_width = min(max((len(key) for key in fields), default=0), DEFAULT_LABEL_WIDTH)
    lines = [title, "-" * len(title)]
    for key, value in fields.items():
        text = "" if value is None else str(value)
        lines.append(f"{indent}{key:<{label_width}}: {text}")
    return "\n".join(lines)
