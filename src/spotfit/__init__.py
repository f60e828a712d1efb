"""SpotFit - Single-particle localization, tracking and step fitting.

Public API:
    - detect_peaks, fit_peak, fit_peaks: Peak detection and 2D Gaussian fitting
    - link_particles: Trajectory linking
    - mean_square_displacement, fit_diffusion_coefficients,
      step_size_distribution: Motion analysis of trajectories
    - estimate_drift, correct_drift: Drift correction from fiducials
    - fit_changepoints, StepFitter: Piecewise-constant step fitting
    - fit_table: Curve fitting of table columns
    - levenberg_marquardt: Generic weighted least-squares solver

Services:
    - LocalizeService, TrackService, StepService, DriftService, CurveFitService

Configuration:
    - SpotFitConfig: Main configuration object
    - DetectionConfig, FitConfig, LinkingConfig, StepFitConfig, OutputConfig
"""

import contextlib
from importlib import metadata

__version__ = "0.1.0"

with contextlib.suppress(metadata.PackageNotFoundError):
    __version__ = metadata.version(__name__)

from spotfit.core.algorithms import (
    StepFitResult,
    StepFitter,
    correct_drift,
    detect_peaks,
    estimate_drift,
    fit_changepoints,
    fit_diffusion_coefficients,
    fit_peak,
    fit_peaks,
    fit_table,
    link_particles,
    mean_square_displacement,
    step_size_distribution,
)
from spotfit.core.domain.config import (
    DetectionConfig,
    FitConfig,
    LinkingConfig,
    OutputConfig,
    SpotFitConfig,
    StepFitConfig,
)
from spotfit.core.domain.peaks import Localization, Peak, Roi
from spotfit.core.fitting import SolverResult, levenberg_marquardt
from spotfit.core.parallel import localize_stack
from spotfit.services import (
    CurveFitService,
    DriftService,
    LocalizeService,
    StepService,
    TrackService,
)

__all__ = [
    "CurveFitService",
    "DetectionConfig",
    "DriftService",
    "FitConfig",
    "LinkingConfig",
    "LocalizeService",
    "Localization",
    "OutputConfig",
    "Peak",
    "Roi",
    "SolverResult",
    "SpotFitConfig",
    "StepFitConfig",
    "StepFitResult",
    "StepFitter",
    "StepService",
    "TrackService",
    "__version__",
    "correct_drift",
    "detect_peaks",
    "estimate_drift",
    "fit_changepoints",
    "fit_diffusion_coefficients",
    "fit_peak",
    "fit_peaks",
    "fit_table",
    "levenberg_marquardt",
    "link_particles",
    "localize_stack",
    "mean_square_displacement",
    "step_size_distribution",
]
