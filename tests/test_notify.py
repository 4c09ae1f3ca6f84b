"""Tests for completion notifications."""

from io import StringIO
from unittest.mock import MagicMock

from rich.console import Console

from cl_exports.notify import NOTIFICATION_TITLE, ConsoleNotifier, send_notification


class TestConsoleNotifier:
    def test_prints_panel(self) -> None:
        buffer = StringIO()
        notifier = ConsoleNotifier(Console(file=buffer, width=80))

        notifier.notify("Export of 12 skus is finished!")

        output = buffer.getvalue()
        assert NOTIFICATION_TITLE in output
        assert "Export of 12 skus is finished!" in output


class TestSendNotification:
    def test_delivers_message(self) -> None:
        notifier = MagicMock()

        send_notification(notifier, "done")

        notifier.notify.assert_called_once_with("done")

    def test_failures_are_swallowed(self) -> None:
        notifier = MagicMock()
        notifier.notify.side_effect = OSError("no display")

        send_notification(notifier, "done")
