from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sidingconfig.gui import utils


@pytest.fixture
def fake_ui(monkeypatch) -> MagicMock:
    fake = MagicMock()
    fake.timer.return_value.active = True
    monkeypatch.setattr(utils, "ui", fake)
    return fake


class TestSafeTimer:
    """Tests for safe_timer."""

    def test_creates_timer(self, fake_ui):
        callback = MagicMock()

        timer = utils.safe_timer(3.0, callback, once=True)

        assert timer is fake_ui.timer.return_value
        args, kwargs = fake_ui.timer.call_args
        assert args[0] == 3.0
        assert kwargs == {"once": True}
        args[1]()
        callback.assert_called_once_with()

    def test_callback_error_deactivates_timer(self, fake_ui):
        """A callback failing because its client is gone stops the timer."""
        timer = utils.safe_timer(1.0, MagicMock(side_effect=RuntimeError("client deleted")))

        fake_ui.timer.call_args[0][1]()

        assert timer.active is False

    def test_inactive_timer_skips_callback(self, fake_ui):
        callback = MagicMock()
        timer = utils.safe_timer(1.0, callback)
        timer.active = False

        fake_ui.timer.call_args[0][1]()

        callback.assert_not_called()

    def test_disconnect_deactivates_timer(self, fake_ui):
        timer = utils.safe_timer(1.0, MagicMock())

        on_disconnect = fake_ui.context.client.on_disconnect.call_args[0][0]
        on_disconnect()

        assert timer.active is False
