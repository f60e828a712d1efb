"""Domain objects: configuration models and localization records."""

from spotfit.core.domain.config import (
    DetectionConfig,
    FitConfig,
    LinkingConfig,
    MaxErrors,
    OutputConfig,
    SpotFitConfig,
    StepFitConfig,
)
from spotfit.core.domain.peaks import LOCALIZATION_COLUMNS, Localization, Peak, Roi

__all__ = [
    "LOCALIZATION_COLUMNS",
    "DetectionConfig",
    "FitConfig",
    "LinkingConfig",
    "Localization",
    "MaxErrors",
    "OutputConfig",
    "Peak",
    "Roi",
    "SpotFitConfig",
    "StepFitConfig",
]
