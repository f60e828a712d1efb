"""Displacement analysis of trajectories.

Square displacements and their mean per time lag, free-diffusion fits of the
MSD curves, and the distribution of single-frame step lengths.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from spotfit.core.fitting.models import FreeDiffusion, NumericalModel
from spotfit.core.fitting.optimizer import levenberg_marquardt
from spotfit.core.shared.exceptions import ConfigError, DataIOError
from spotfit.core.shared.typing import FloatArray

_REQUIRED = ("trajectory", "frame", "x", "y")


def _check_columns(tracks: pd.DataFrame) -> None:
    missing = [column for column in _REQUIRED if column not in tracks.columns]
    if missing:
        msg = f"Track table is missing required columns: {', '.join(missing)}"
        raise DataIOError(msg)


def square_displacements(
    tracks: pd.DataFrame, pixel_size: float = 1.0, time_interval: float = 1.0
) -> pd.DataFrame:
    """Square displacement between every ordered pair of points of a trajectory.

    Args:
        tracks: Linked table (``trajectory``, ``frame``, ``x``, ``y``)
        pixel_size: Length of one pixel in physical units
        time_interval: Time between two frames

    Returns
    -------
        Table with columns ``trajectory``, ``dt`` and ``sd``
    """
    _check_columns(tracks)

    parts = []
    linked = tracks.dropna(subset=["trajectory"])
    for trajectory, group in linked.groupby("trajectory", sort=True):
        group = group.sort_values("frame", kind="stable")
        frames = group["frame"].to_numpy(dtype=float)
        xy = group[["x", "y"]].to_numpy(dtype=float) * pixel_size
        first, second = np.triu_indices(len(group), k=1)
        delta = xy[second] - xy[first]
        parts.append(
            pd.DataFrame(
                {
                    "trajectory": int(trajectory),
                    "dt": (frames[second] - frames[first]) * time_interval,
                    "sd": np.sum(delta * delta, axis=1),
                }
            )
        )

    if not parts:
        return pd.DataFrame({"trajectory": pd.Series(dtype=int), "dt": [], "sd": []})
    return pd.concat(parts, ignore_index=True)


def mean_square_displacement(
    tracks: pd.DataFrame,
    pixel_size: float = 1.0,
    time_interval: float = 1.0,
    *,
    average: bool = False,
    min_points: int = 1,
) -> pd.DataFrame:
    """Mean square displacement per trajectory and time lag.

    Args:
        tracks: Linked table
        pixel_size: Length of one pixel in physical units
        time_interval: Time between two frames
        average: Pool all trajectories together (reported as trajectory -1)
        min_points: Drop lags supported by fewer square displacements

    Returns
    -------
        Table with ``trajectory``, ``dt``, ``msd``, ``std`` and ``n`` columns,
        sorted by trajectory then lag
    """
    sd = square_displacements(tracks, pixel_size, time_interval)
    if average:
        sd["trajectory"] = -1

    grouped = sd.groupby(["trajectory", "dt"], sort=True)["sd"]
    msd = grouped.agg(msd="mean", std=lambda values: float(np.std(values)), n="size").reset_index()
    return msd[msd["n"] >= min_points].reset_index(drop=True)


def fit_diffusion_coefficients(
    msd: pd.DataFrame,
    dimensionality: float = 4.0,
    max_fit_time: float = np.inf,
) -> pd.DataFrame:
    """Fit a free-diffusion line ``dimensionality * D * dt`` to each trajectory's MSD.

    Every lag is weighted by the standard deviation of its square
    displacements; lags with a zero spread count as unweighted.

    Args:
        msd: Output of :func:`mean_square_displacement`
        dimensionality: 2 per spatial dimension (4 for 2D tracks)
        max_fit_time: Only lags ``dt <= max_fit_time`` are fitted

    Returns
    -------
        Table with ``trajectory``, ``D``, ``D_error``, ``r_squared`` and
        ``n_lags``; trajectories without fitted lags or with a NaN
        coefficient are left out
    """
    model = FreeDiffusion(dimensionality)
    rows = []
    for trajectory, group in msd.groupby("trajectory", sort=True):
        fitted = group[group["dt"] <= max_fit_time].sort_values("dt")
        if fitted.empty:
            continue

        dt = fitted["dt"].to_numpy(dtype=float)
        values = fitted["msd"].to_numpy(dtype=float)
        # Start from the slope through the origin and the longest lag
        initial = values[-1] / (dimensionality * dt[-1])
        result = levenberg_marquardt(
            model, dt, values, [initial], sigma=fitted["std"].to_numpy(dtype=float)
        )

        if np.isnan(result.parameters[0]):
            continue
        rows.append(
            {
                "trajectory": int(trajectory),
                "D": float(result.parameters[0]),
                "D_error": float(result.errors[0]),
                "r_squared": result.r_squared,
                "n_lags": len(fitted),
            }
        )

    return pd.DataFrame(rows, columns=["trajectory", "D", "D_error", "r_squared", "n_lags"])


def step_sizes(tracks: pd.DataFrame, pixel_size: float = 1.0) -> FloatArray:
    """Lengths of the single-frame steps of all trajectories.

    Steps bridging a gap of more than one frame are ignored.
    """
    _check_columns(tracks)
    sizes = []
    linked = tracks.dropna(subset=["trajectory"])
    for _, group in linked.groupby("trajectory", sort=True):
        group = group.sort_values("frame", kind="stable")
        frames = group["frame"].to_numpy(dtype=float)
        xy = group[["x", "y"]].to_numpy(dtype=float)
        consecutive = np.diff(frames) == 1
        delta = np.diff(xy, axis=0)[consecutive]
        sizes.append(np.hypot(delta[:, 0], delta[:, 1]) * pixel_size)
    return np.concatenate(sizes) if sizes else np.empty(0)


def step_size_density(r: FloatArray, msd: float) -> FloatArray:
    """Probability density of 2D Brownian step lengths, ``2r/msd * exp(-r²/msd)``."""
    return (2 * r / msd) * np.exp(-(r * r) / msd)


@dataclass(frozen=True)
class StepSizeDistribution:
    """Normalized step-size histogram and the diffusion coefficient fitted to it."""

    histogram: pd.DataFrame
    n_steps: int
    msd: float
    fitted_msd: float
    fitted_msd_error: float
    diffusion_coefficient: float
    diffusion_error: float

    def density(self, r: FloatArray) -> FloatArray:
        """Fitted density at step lengths ``r``."""
        return step_size_density(np.asarray(r, dtype=float), self.fitted_msd)


def step_size_distribution(
    tracks: pd.DataFrame,
    pixel_size: float = 1.0,
    time_interval: float = 1.0,
    bin_width: float | None = None,
    min_step_size: float = 0.0,
) -> StepSizeDistribution:
    """Histogram single-frame step lengths and fit the 2D diffusion density.

    The histogram is normalized to a probability density. Bins centered
    below ``min_step_size`` are dropped before fitting; the fitted mean
    square step gives ``D = msd / (4 * time_interval)``.

    Args:
        tracks: Linked table
        pixel_size: Length of one pixel in physical units
        time_interval: Time between two frames
        bin_width: Histogram bin width (default: ``pixel_size / 10``)
        min_step_size: Smallest bin center included in the fit
    """
    if bin_width is None:
        bin_width = pixel_size / 10
    if bin_width <= 0:
        msg = f"bin_width must be positive, got {bin_width}"
        raise ConfigError(msg)

    sizes = step_sizes(tracks, pixel_size)
    if sizes.size == 0:
        return StepSizeDistribution(
            histogram=pd.DataFrame({"step_size": [], "probability": []}),
            n_steps=0,
            msd=np.nan,
            fitted_msd=np.nan,
            fitted_msd_error=np.nan,
            diffusion_coefficient=np.nan,
            diffusion_error=np.nan,
        )

    bins = (sizes / bin_width).astype(int)
    counts = np.bincount(bins, minlength=int(sizes.max() / bin_width) + 1)
    probability = counts / (sizes.size * bin_width)
    centers = (np.arange(counts.size) + 0.5) * bin_width
    keep = centers >= min_step_size
    centers, probability = centers[keep], probability[keep]

    msd = float(np.mean(sizes * sizes))
    model = NumericalModel(lambda x, p: step_size_density(x[:, 0], p[0]), ("msd",))
    result = levenberg_marquardt(model, centers[:, np.newaxis], probability, [msd])
    fitted_msd = float(result.parameters[0])
    fitted_error = float(result.errors[0])

    return StepSizeDistribution(
        histogram=pd.DataFrame({"step_size": centers, "probability": probability}),
        n_steps=int(sizes.size),
        msd=msd,
        fitted_msd=fitted_msd,
        fitted_msd_error=fitted_error,
        diffusion_coefficient=fitted_msd / (4 * time_interval),
        diffusion_error=fitted_error / (4 * time_interval),
    )


__all__ = [
    "StepSizeDistribution",
    "fit_diffusion_coefficients",
    "mean_square_displacement",
    "square_displacements",
    "step_size_density",
    "step_size_distribution",
    "step_sizes",
]
