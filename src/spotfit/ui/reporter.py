"""Console-based reporter implementation using Rich."""

from __future__ import annotations

from spotfit.ui.messages import action, info, success, warning


class ConsoleReporter:
    """Reporter printing styled messages to the shared Rich console.

    Example:
        >>> reporter = ConsoleReporter()
        >>> reporter.action("Localizing 200 frames...")
        >>> reporter.success("Fitted 1523 peaks")
    """

    def action(self, message: str) -> None:
        action(message)

    def info(self, message: str) -> None:
        info(message)

    def warning(self, message: str) -> None:
        warning(message)

    def success(self, message: str) -> None:
        success(message)


__all__ = ["ConsoleReporter"]
