"""Shared utilities for SpotFit core (typing, exceptions, reporting)."""

from spotfit.core.shared.exceptions import ConfigError, DataIOError, SpotFitError
from spotfit.core.shared.reporter import LoggingReporter, NullReporter, Reporter
from spotfit.core.shared.typing import BoolArray, FloatArray, IntArray

__all__ = [
    "BoolArray",
    "ConfigError",
    "DataIOError",
    "FloatArray",
    "IntArray",
    "LoggingReporter",
    "NullReporter",
    "Reporter",
    "SpotFitError",
]
