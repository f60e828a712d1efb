"""Logging configuration for SpotFit UI."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from spotfit.ui.console import VERSION, console

LOGGER_NAME = "spotfit"

# Module-level logger (configured by setup_logging)
_logger: logging.Logger | None = None


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(
    log_file: Path | None = None,
    verbose: bool = False,
    level: int = logging.INFO,
) -> logging.Logger | None:
    """Configure the ``spotfit`` logger.

    Nothing is configured when neither a log file nor verbose output is
    requested. A ``.json`` log file gets one JSON object per line.
    """
    global _logger

    if log_file is None and not verbose:
        _logger = None
        return None

    _logger = logging.getLogger(LOGGER_NAME)
    _logger.setLevel(level)
    for handler in _logger.handlers[:]:
        handler.close()
        _logger.removeHandler(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(level)
        if log_file.suffix == ".json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-5s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        _logger.addHandler(file_handler)

    if verbose:
        console_handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            markup=True,
        )
        console_handler.setLevel(level)
        _logger.addHandler(console_handler)

    _logger.info("━" * 60)
    _logger.info("SpotFit v%s - Session Started", VERSION)
    _logger.info("━" * 60)
    _logger.info("Command: %s", " ".join(sys.argv))
    _logger.info("Working directory: %s", Path.cwd())
    _logger.info("Python: %s | Platform: %s", sys.version.split()[0], sys.platform)
    return _logger


def log(message: str, level: str = "info") -> None:
    """Log a message (if logging is enabled)."""
    if _logger is None:
        return

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    _logger.log(level_map.get(level.lower(), logging.INFO), message)


def log_section(title: str) -> None:
    """Log a section header."""
    if _logger is None:
        return

    _logger.info("")
    _logger.info("=== %s ===", title.upper())


def log_dict(data: dict[str, object], indent: str = "  ") -> None:
    """Log a dictionary as key-value pairs."""
    if _logger is None:
        return

    for key, value in data.items():
        _logger.info("%s- %s: %s", indent, key, value)


def close_logging() -> None:
    """Close logging and finalize log file."""
    global _logger

    if _logger is None:
        return

    _logger.info("━" * 60)
    _logger.info("SpotFit Session Completed")
    _logger.info("━" * 60)

    for handler in _logger.handlers[:]:
        handler.close()
        _logger.removeHandler(handler)
    _logger = None


__all__ = [
    "JSONFormatter",
    "LOGGER_NAME",
    "close_logging",
    "log",
    "log_dict",
    "log_section",
    "setup_logging",
]
