"""Service layer for SpotFit.

Services are the primary API for the CLI and other adapters. They wrap the
core algorithms and report progress through a ``Reporter``.
"""

from spotfit.services.curve_fit import CurveFitService
from spotfit.services.drift import DriftResult, DriftService
from spotfit.services.localize import LocalizeResult, LocalizeService
from spotfit.services.steps import StepService
from spotfit.services.track import TrackResult, TrackService

__all__ = [
    "CurveFitService",
    "DriftResult",
    "DriftService",
    "LocalizeResult",
    "LocalizeService",
    "StepService",
    "TrackResult",
    "TrackService",
]
