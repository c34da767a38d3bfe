from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from sidingconfig.logging_utils import configure_logging, render_fields_block


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestRenderFieldsBlock:
    """Tests for render_fields_block."""

    def test_title_is_underlined(self):
        """The first two lines are the title and a rule of equal length."""
        lines = render_fields_block("Publish", {"Target": "acme/rates"}).splitlines()
        assert lines[0] == "Publish"
        assert lines[1] == "-------"

    def test_labels_are_aligned(self):
        """Labels are padded to the longest label."""
        text = render_fields_block("Block", {"A": 1, "Longer": 2})
        assert "    A     : 1" in text
        assert "    Longer: 2" in text

    def test_none_renders_empty(self):
        text = render_fields_block("Block", {"Key": None})
        assert text.endswith("Key: ")

    def test_custom_indent(self):
        text = render_fields_block("Block", {"Key": "v"}, indent="  ")
        assert text.splitlines()[2] == "  Key: v"

    def test_empty_fields(self):
        assert render_fields_block("Block", {}) == "Block\n-----"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_installs_rich_handler(self, root_logger):
        configure_logging(logging.INFO, console=Console(file=io.StringIO()))
        rich_handlers = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert rich_handlers[0].level == logging.INFO

    def test_repeat_call_replaces_handlers(self, root_logger):
        """Configuring twice does not duplicate console output."""
        configure_logging(logging.INFO, console=Console(file=io.StringIO()))
        configure_logging(logging.DEBUG, console=Console(file=io.StringIO()))
        rich_handlers = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert rich_handlers[0].level == logging.DEBUG

    def test_log_file_receives_debug(self, root_logger, tmp_path):
        log_file = tmp_path / "logs" / "sidingconfig.log"
        configure_logging(logging.WARNING, log_file=log_file, console=Console(file=io.StringIO()))

        logging.getLogger("sidingconfig.test").debug("debug detail")
        for handler in root_logger.handlers:
            handler.flush()

        assert "debug detail" in log_file.read_text(encoding="utf-8")

    def test_quiets_http_loggers(self, root_logger):
        configure_logging(logging.DEBUG, console=Console(file=io.StringIO()))
        assert logging.getLogger("urllib3").level == logging.WARNING
