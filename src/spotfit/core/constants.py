"""Core constants for SpotFit fitting, detection and tracking.

These values are the defaults of the configuration models in
``spotfit.core.domain.config``; they can be overridden via configuration
files or CLI arguments.
"""

import math

# =============================================================================
# Levenberg-Marquardt Defaults
# =============================================================================

LM_MAX_ITERATIONS = 100
"""Maximum number of Levenberg-Marquardt iterations per solve."""

LM_PRECISION = 1e-6
"""Absolute change in sum of squares below which the solver stops."""

LM_DAMPING = 1e-3
"""Initial damping factor (lambda)."""

LM_DAMPING_STEP = 10.0
"""Factor by which lambda shrinks on accepted and grows on rejected steps."""

NUMERICAL_GRADIENT_STEP = 1e-6
"""Step used for central-difference gradients of custom models."""

# =============================================================================
# Gaussian Peak Fitting
# =============================================================================

SIGMA_TO_FWHM = 2.0 * math.sqrt(2.0 * math.log(2.0))
"""Conversion factor from Gaussian standard deviation to FWHM."""

GAUSSIAN_PARAMETER_NAMES = ("baseline", "amplitude", "x", "y", "sigma_x", "sigma_y")
"""Parameter order of the 2D Gaussian model."""

FIT_RADIUS = 4
"""Half-width (in pixels) of the square fit window."""

MAX_ERROR_BASELINE = 5000.0
MAX_ERROR_AMPLITUDE = 5000.0
MAX_ERROR_POSITION = 1.0
MAX_ERROR_SIGMA = 1.0

# =============================================================================
# Peak Detection
# =============================================================================

FILTER_INNER_RADIUS = 1
FILTER_OUTER_RADIUS = 3

THRESHOLD_SIGMA = 6.0
"""Statistical threshold: mean + THRESHOLD_SIGMA * standard deviation."""

MIN_SEPARATION = 8
"""Radius (in pixels) suppressed around each detected peak."""

# =============================================================================
# Particle Linking
# =============================================================================

LOOK_AHEAD_FRAMES = 1
MAX_STEP_DISTANCE = 8.0
