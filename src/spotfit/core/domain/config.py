"""Domain configuration models for SpotFit.

Every component receives its configuration explicitly; the defaults below are
the only defaults in the package. Invalid combinations are rejected here,
before any detection or fitting runs.
"""

from pathlib import Path
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from spotfit.core import constants


class DetectionConfig(BaseModel):
    """Configuration for peak detection.

    Example TOML section:
        [detection]
        use_filter = true
        inner_radius = 1
        outer_radius = 3
        threshold_sigma = 6.0
        min_separation = 8
    """

    model_config = ConfigDict(extra="forbid")

    use_filter: bool = Field(
        default=True,
        description="Apply the discoidal averaging filter before thresholding.",
    )
    inner_radius: Annotated[int, Field(ge=0)] = Field(
        default=constants.FILTER_INNER_RADIUS,
        description="Radius of the inner disc of the discoidal filter.",
    )
    outer_radius: Annotated[int, Field(gt=0)] = Field(
        default=constants.FILTER_OUTER_RADIUS,
        description="Radius of the outer ring of the discoidal filter.",
    )
    threshold_sigma: float = Field(
        default=constants.THRESHOLD_SIGMA,
        description="Threshold as mean + threshold_sigma * standard deviation.",
    )
    threshold_value: float | None = Field(
        default=None,
        description="Fixed threshold (overrides threshold_sigma if set).",
    )
    min_separation: Annotated[int, Field(gt=0)] = Field(
        default=constants.MIN_SEPARATION,
        description="Minimum distance in pixels between two detected peaks.",
    )

    @model_validator(mode="after")
    def check_filter_radii(self) -> Self:
        """The inner disc must fit inside the outer ring."""
        if self.use_filter and self.inner_radius >= self.outer_radius:
            msg = (
                f"inner_radius ({self.inner_radius}) must be smaller than "
                f"outer_radius ({self.outer_radius})"
            )
            raise ValueError(msg)
        return self


class MaxErrors(BaseModel):
    """Largest accepted standard error per 2D Gaussian parameter."""

    model_config = ConfigDict(extra="forbid")

    baseline: Annotated[float, Field(ge=0)] = constants.MAX_ERROR_BASELINE
    amplitude: Annotated[float, Field(ge=0)] = constants.MAX_ERROR_AMPLITUDE
    x: Annotated[float, Field(ge=0)] = constants.MAX_ERROR_POSITION
    y: Annotated[float, Field(ge=0)] = constants.MAX_ERROR_POSITION
    sigma_x: Annotated[float, Field(ge=0)] = constants.MAX_ERROR_SIGMA
    sigma_y: Annotated[float, Field(ge=0)] = constants.MAX_ERROR_SIGMA

    def as_tuple(self) -> tuple[float, ...]:
        """Thresholds in parameter-vector order."""
        return tuple(getattr(self, name) for name in constants.GAUSSIAN_PARAMETER_NAMES)


class FitConfig(BaseModel):
    """Configuration for 2D Gaussian peak fitting."""

    model_config = ConfigDict(extra="forbid")

    fit_radius: Annotated[int, Field(ge=1)] = Field(
        default=constants.FIT_RADIUS,
        description="Half-width in pixels of the square fit window.",
    )
    max_errors: MaxErrors = Field(default_factory=MaxErrors)
    saturation_value: float | None = Field(
        default=None,
        description="Samples at or above this value are excluded from fits. "
        "Defaults to the dtype maximum for integer images.",
    )
    max_iterations: Annotated[int, Field(gt=0)] = Field(
        default=constants.LM_MAX_ITERATIONS,
        description="Maximum iterations for the Levenberg-Marquardt solver.",
    )
    precision: Annotated[float, Field(gt=0)] = Field(
        default=constants.LM_PRECISION,
        description="Stop when the sum of squares changes by less than this.",
    )
    damping: Annotated[float, Field(gt=0)] = Field(
        default=constants.LM_DAMPING,
        description="Initial Levenberg-Marquardt damping factor.",
    )


class LinkingConfig(BaseModel):
    """Configuration for particle linking."""

    model_config = ConfigDict(extra="forbid")

    look_ahead: Annotated[int, Field(ge=1)] = Field(
        default=constants.LOOK_AHEAD_FRAMES,
        description="Number of frames searched for a successor (blinking tolerance).",
    )
    max_step: Annotated[float, Field(gt=0)] = Field(
        default=constants.MAX_STEP_DISTANCE,
        description="Maximum displacement in pixels between linked localizations.",
    )
    discard_unlinked: bool = Field(
        default=True,
        description="Drop localizations that do not belong to any trajectory.",
    )


class StepFitConfig(BaseModel):
    """Configuration for changepoint (step) fitting."""

    model_config = ConfigDict(extra="forbid")

    noise_sigma: Annotated[float, Field(gt=0)] = Field(
        default=1.0,
        description="Estimated per-sample noise standard deviation.",
    )
    segments: Annotated[int, Field(ge=1)] | None = Field(
        default=None,
        description="Target number of segments; automatic stop if not set.",
    )


class OutputConfig(BaseModel):
    """Configuration for output files and execution."""

    model_config = ConfigDict(extra="forbid")

    directory: Path = Field(default=Path("Results"), description="Output directory for results.")
    n_workers: Annotated[int, Field(ge=1)] | None = Field(
        default=None,
        description="Worker threads for per-frame localization (default: CPU count).",
    )


class SpotFitConfig(BaseModel):
    """Top-level SpotFit configuration.

    Example TOML configuration:
        [detection]
        threshold_sigma = 6.0
        min_separation = 8

        [fitting]
        fit_radius = 4

        [fitting.max_errors]
        x = 0.5
        y = 0.5

        [linking]
        look_ahead = 2
        max_step = 5.0

        [steps]
        noise_sigma = 1.0
    """

    model_config = ConfigDict(extra="forbid")

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    fitting: FitConfig = Field(default_factory=FitConfig)
    linking: LinkingConfig = Field(default_factory=LinkingConfig)
    steps: StepFitConfig = Field(default_factory=StepFitConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


__all__ = [
    "DetectionConfig",
    "FitConfig",
    "LinkingConfig",
    "MaxErrors",
    "OutputConfig",
    "SpotFitConfig",
    "StepFitConfig",
]
