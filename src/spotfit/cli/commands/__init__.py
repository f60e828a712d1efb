"""CLI command modules for SpotFit.

Each module exports one command function; ``spotfit.cli.app`` registers them.
"""

from spotfit.cli.commands.curve_fit import curve_fit_command
from spotfit.cli.commands.drift import drift_command
from spotfit.cli.commands.init import init_command
from spotfit.cli.commands.localize import localize_command
from spotfit.cli.commands.steps import steps_command
from spotfit.cli.commands.track import track_command

__all__ = [
    "curve_fit_command",
    "drift_command",
    "init_command",
    "localize_command",
    "steps_command",
    "track_command",
]
