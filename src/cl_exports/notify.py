"""Completion notifications."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.panel import Panel

from cl_exports.logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_TITLE = "Commerce Layer CLI"


class Notifier(Protocol):
    """Receives a single human-readable completion message."""

    def notify(self, message: str) -> None: ...


class ConsoleNotifier:
    """Rings the terminal bell and prints the message in a panel."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, message: str) -> None:
        self._console.bell()
        self._console.print(Panel(message, title=NOTIFICATION_TITLE, expand=False))


def send_notification(notifier: Notifier, message: str) -> None:
    """Deliver a notification without letting failures reach the caller."""
    try:
        notifier.notify(message)
    except Exception as e:
        logger.debug("Notification not delivered: {}", e)
