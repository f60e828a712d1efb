"""Progress and status reporting abstraction.

Core and service layers report progress through the ``Reporter`` protocol so
that they never depend on a particular UI:

    - NullReporter discards everything (tests, batch use)
    - LoggingReporter forwards to the standard ``logging`` module
    - ConsoleReporter (in ``spotfit.ui``) prints with Rich
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Protocol for progress and status reporting."""

    def action(self, message: str) -> None:
        """Report an action being performed, e.g. 'Linking particles...'."""
        ...

    def info(self, message: str) -> None:
        """Report an informational message."""
        ...

    def warning(self, message: str) -> None:
        """Report a non-fatal issue."""
        ...

    def success(self, message: str) -> None:
        """Report successful completion of an operation."""
        ...


class NullReporter:
    """Silent reporter that discards all messages.

    Example:
        >>> reporter = NullReporter()
        >>> reporter.action("Localizing...")  # No output
    """

    def action(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass


class LoggingReporter:
    """Reporter that writes to Python logging.

    Example:
        >>> reporter = LoggingReporter("spotfit.tracking")
        >>> reporter.action("Linking 120 localizations")  # INFO level
        >>> reporter.warning("No trajectories found")  # WARNING level
    """

    def __init__(self, logger_name: str = "spotfit") -> None:
        self._logger = logging.getLogger(logger_name)

    def action(self, message: str) -> None:
        """Log action at INFO level with prefix."""
        self._logger.info("[ACTION] %s", message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def success(self, message: str) -> None:
        """Log success at INFO level with prefix."""
        self._logger.info("[SUCCESS] %s", message)


__all__ = ["LoggingReporter", "NullReporter", "Reporter"]
