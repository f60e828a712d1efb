"""UI and terminal output styling for SpotFit.

Submodules:
- console: Theme and console instance
- logging: File and console logging utilities
- messages: Status messages (success, error, warning, etc.)
- progress: Progress bar utilities
- tables: Table display utilities
- reporter: Reporter protocol implementation for the console
"""

from spotfit.ui.console import SPOTFIT_THEME, VERSION, console
from spotfit.ui.logging import close_logging, log, log_dict, log_section, setup_logging
from spotfit.ui.messages import (
    action,
    error,
    info,
    print_next_steps,
    show_header,
    show_version,
    success,
    warning,
)
from spotfit.ui.progress import create_progress
from spotfit.ui.reporter import ConsoleReporter
from spotfit.ui.tables import create_table, print_summary

__all__ = [
    "SPOTFIT_THEME",
    "VERSION",
    "ConsoleReporter",
    "action",
    "close_logging",
    "console",
    "create_progress",
    "create_table",
    "error",
    "info",
    "log",
    "log_dict",
    "log_section",
    "print_next_steps",
    "print_summary",
    "setup_logging",
    "show_header",
    "show_version",
    "success",
    "warning",
]
