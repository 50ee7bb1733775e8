"""User-facing notification sinks.

The admin screens report the outcome of saves and icon updates as short
success/error toasts. Here that capability is a small protocol with a
logging-backed implementation for services and a console one for the CLI.
Notifications are fire-and-forget.
"""

from __future__ import annotations

import logging
import sys
import typing as typ

logger = logging.getLogger(__name__)


class Notifier(typ.Protocol):
    """Anything that can show a success or error message to the user."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Forward notifications to the ``union_pages.notifications`` logger."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)


class ConsoleNotifier:
    """Print notifications, errors to stderr."""

    def __init__(self, *, stream: typ.TextIO | None = None) -> None:
        self._stream = stream

    def success(self, message: str) -> None:
        print(message, file=self._stream or sys.stdout)

    def error(self, message: str) -> None:
        print(f"error: {message}", file=self._stream or sys.stderr)


__all__ = ["ConsoleNotifier", "LogNotifier", "Notifier"]
