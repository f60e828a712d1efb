"""Sub-pixel 2D Gaussian fitting of detected peaks.

Each peak is fitted in a square window around its seed pixel with the
Levenberg-Marquardt solver. Fits whose parameters or errors are NaN, or whose
errors exceed the configured maxima, are rejected: callers receive fewer
localizations than candidates, never an exception.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

from spotfit.core.algorithms.detection import detect_peaks
from spotfit.core.domain.config import DetectionConfig, FitConfig
from spotfit.core.domain.peaks import Localization, Peak, Roi, empty_parameters
from spotfit.core.fitting.models import Gaussian2D
from spotfit.core.fitting.optimizer import levenberg_marquardt
from spotfit.core.fitting.results import SolverResult

if TYPE_CHECKING:
    from spotfit.core.algorithms.filters import Transform
    from spotfit.core.shared.typing import FloatArray


def saturation_level(grid: np.ndarray, config: FitConfig) -> float:
    """Sample value at which a pixel counts as saturated."""
    if config.saturation_value is not None:
        return float(config.saturation_value)
    if np.issubdtype(grid.dtype, np.integer):
        return float(np.iinfo(grid.dtype).max)
    return np.inf


def window_samples(
    grid: np.ndarray, window: Roi, saturation: float = np.inf
) -> tuple[FloatArray, FloatArray]:
    """Coordinates (x, y) and values of the unsaturated samples of a window."""
    window = window.clip(grid.shape)
    values = np.asarray(grid[window.slices], dtype=float)
    ys, xs = np.mgrid[window.slices]
    keep = values < saturation
    coordinates = np.column_stack([xs[keep], ys[keep]]).astype(float)
    return coordinates, values[keep]


def initial_guess(
    coordinates: FloatArray, values: FloatArray, grid: np.ndarray, seed: FloatArray
) -> FloatArray:
    """Fill the NaN entries of ``seed`` with estimates from the window.

    Baseline is the window minimum, amplitude the window range, position the
    window maximum and both sigmas 1. With a seeded position the amplitude is
    taken at the seeded pixel instead.
    """
    low = int(np.argmin(values))
    high = int(np.argmax(values))
    baseline = values[low]
    guess = np.array(
        [baseline, values[high] - baseline, coordinates[high, 0], coordinates[high, 1], 1.0, 1.0]
    )

    params = np.array(seed, dtype=float, copy=True)
    if not np.isnan(params[2]) and not np.isnan(params[3]):
        if np.isnan(params[0]):
            params[0] = baseline
        if np.isnan(params[1]):
            row = min(max(int(params[3]), 0), grid.shape[0] - 1)
            col = min(max(int(params[2]), 0), grid.shape[1] - 1)
            params[1] = float(grid[row, col]) - params[0]

    missing = np.isnan(params)
    params[missing] = guess[missing]
    return params


def _nan_result(seed: FloatArray) -> SolverResult:
    size = seed.size
    return SolverResult(
        parameters=np.full(size, np.nan),
        errors=np.full(size, np.nan),
        chi_squared=np.nan,
        r_squared=np.nan,
        iterations=0,
        damping=np.nan,
        n_observations=0,
        vary=np.ones(size, dtype=bool),
        covariance=np.full((size, size), np.nan),
    )


def fit_peak(
    grid: FloatArray,
    window: Roi | Peak,
    seed: Sequence[float] | FloatArray | None = None,
    config: FitConfig | None = None,
) -> SolverResult:
    """Fit a 2D Gaussian to one window of an image.

    Args:
        grid: 2D image, indexed [y, x]
        window: Fit window, or a peak around which a window of
            ``config.fit_radius`` is taken (its position seeds x and y)
        seed: Optional parameter vector; NaN entries are estimated
        config: Fit configuration

    Returns
    -------
        Solver result with the raw fitted parameters and errors. A window
        without any usable sample yields an all-NaN result.
    """
    config = config or FitConfig()
    grid = np.asarray(grid)
    seed_arr = empty_parameters() if seed is None else np.array(seed, dtype=float, copy=True)

    if isinstance(window, Peak):
        if np.isnan(seed_arr[2]) and np.isnan(seed_arr[3]):
            seed_arr[2], seed_arr[3] = window.x, window.y
        window = Roi.around(window.x, window.y, config.fit_radius)

    coordinates, values = window_samples(grid, window, saturation_level(grid, config))
    if values.size == 0:
        return _nan_result(seed_arr)

    params = initial_guess(coordinates, values, grid, seed_arr)
    return levenberg_marquardt(
        Gaussian2D(),
        coordinates,
        values,
        params,
        damping=config.damping,
        max_iterations=config.max_iterations,
        precision=config.precision,
    )


def is_valid_fit(result: SolverResult, config: FitConfig) -> bool:
    """Check a fit against NaN and the per-parameter error limits."""
    if not result.is_finite:
        return False
    limits = np.asarray(config.max_errors.as_tuple())
    return bool(np.all(np.abs(result.errors) <= limits))


def to_localization(result: SolverResult, frame: int) -> Localization:
    """Build a localization, forcing sigma_x and sigma_y to be non-negative."""
    parameters = result.parameters.copy()
    parameters[4:6] = np.abs(parameters[4:6])
    return Localization(
        frame=frame,
        parameters=parameters,
        errors=result.errors.copy(),
        chi_squared=result.chi_squared,
        r_squared=result.r_squared,
        iterations=result.iterations,
    )


def fit_peaks(
    grid: FloatArray,
    peaks: Iterable[Peak],
    config: FitConfig | None = None,
    *,
    frame: int | None = None,
) -> list[Localization]:
    """Fit every peak and keep the valid localizations.

    Args:
        grid: 2D image, indexed [y, x]
        peaks: Candidate peaks (detected or supplied externally)
        config: Fit configuration
        frame: Frame index to record (default: each peak's own frame)

    Returns
    -------
        Valid localizations, in the order of the input peaks
    """
    config = config or FitConfig()
    localizations = []
    for peak in peaks:
        result = fit_peak(grid, peak, config=config)
        if is_valid_fit(result, config):
            localizations.append(to_localization(result, peak.frame if frame is None else frame))
    return localizations


def localize_frame(
    grid: FloatArray,
    detection: DetectionConfig | None = None,
    fitting: FitConfig | None = None,
    *,
    roi: Roi | None = None,
    transform: Transform | None = None,
    frame: int = 0,
) -> tuple[list[Localization], int]:
    """Detect and fit the peaks of a single frame.

    Returns
    -------
        Tuple of (valid localizations, number of detected peaks)
    """
    peaks = detect_peaks(grid, roi, detection, transform=transform, frame=frame)
    return fit_peaks(grid, peaks, fitting), len(peaks)


__all__ = [
    "fit_peak",
    "fit_peaks",
    "initial_guess",
    "is_valid_fit",
    "localize_frame",
    "saturation_level",
    "to_localization",
    "window_samples",
]
