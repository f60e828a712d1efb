"""Core module for SpotFit - numerical engine, algorithms and domain models."""

from spotfit.core.domain.config import (
    DetectionConfig,
    FitConfig,
    LinkingConfig,
    OutputConfig,
    SpotFitConfig,
    StepFitConfig,
)
from spotfit.core.domain.peaks import Localization, Peak, Roi

__all__ = [
    "DetectionConfig",
    "FitConfig",
    "LinkingConfig",
    "Localization",
    "OutputConfig",
    "Peak",
    "Roi",
    "SpotFitConfig",
    "StepFitConfig",
]
