"""Core algorithms: detection, peak fitting, linking, step fitting and analysis."""

from spotfit.core.algorithms.changepoint import (
    Segment,
    StepFitResult,
    StepFitter,
    fit_changepoints,
)
from spotfit.core.algorithms.curve_fitting import CurveFitResult, build_model, fit_table
from spotfit.core.algorithms.detection import compute_threshold, detect_peaks
from spotfit.core.algorithms.displacement import (
    StepSizeDistribution,
    fit_diffusion_coefficients,
    mean_square_displacement,
    square_displacements,
    step_size_distribution,
    step_sizes,
)
from spotfit.core.algorithms.drift import (
    DriftModel,
    correct_drift,
    correct_stack_drift,
    estimate_drift,
)
from spotfit.core.algorithms.filters import DiscoidalAveragingFilter, discoidal_average
from spotfit.core.algorithms.linking import link_particles, trajectory_ids
from spotfit.core.algorithms.peak_fitting import (
    fit_peak,
    fit_peaks,
    is_valid_fit,
    localize_frame,
)

__all__ = [
    "CurveFitResult",
    "DiscoidalAveragingFilter",
    "DriftModel",
    "Segment",
    "StepFitResult",
    "StepFitter",
    "StepSizeDistribution",
    "build_model",
    "compute_threshold",
    "correct_drift",
    "correct_stack_drift",
    "detect_peaks",
    "discoidal_average",
    "estimate_drift",
    "fit_changepoints",
    "fit_diffusion_coefficients",
    "fit_peak",
    "fit_peaks",
    "fit_table",
    "is_valid_fit",
    "link_particles",
    "localize_frame",
    "mean_square_displacement",
    "square_displacements",
    "step_size_distribution",
    "step_sizes",
    "trajectory_ids",
]
