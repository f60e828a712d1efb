"""Console configuration and theme for SpotFit UI.

This module provides the central console instance and theme used throughout
the application for consistent styling.
"""

import contextlib
from importlib import metadata

from rich.console import Console
from rich.theme import Theme

VERSION = "0.1.0"
with contextlib.suppress(metadata.PackageNotFoundError):
    VERSION = metadata.version("spotfit")

SPOTFIT_THEME = Theme(
    {
        # --- Semantic Status ---
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "info": "cyan",
        # --- UI Structure ---
        "header": "bold cyan",
        "subheader": "bold white",
        # --- Data & Values ---
        "key": "cyan",
        "value": "green",
        "metric": "bold green",
        "path": "blue underline",
        "code": "bold magenta",
    }
)

# Single console instance for entire application
console = Console(theme=SPOTFIT_THEME)

__all__ = ["SPOTFIT_THEME", "VERSION", "console"]
