"""Exception taxonomy for SpotFit.

Numerical degeneracy (singular curvature matrices, too few samples) is never
signalled with an exception: it surfaces as NaN in the results. The classes
below cover the remaining failure modes.
"""

from __future__ import annotations


class SpotFitError(Exception):
    """Base class for all SpotFit-specific exceptions."""


class ConfigError(SpotFitError):
    """Configuration-related errors (invalid/missing options)."""


class DataIOError(SpotFitError):
    """Data loading/saving errors (files, formats, missing columns)."""


__all__ = [
    "ConfigError",
    "DataIOError",
    "SpotFitError",
]
