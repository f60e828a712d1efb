"""Stage drift estimation from fiducial markers.

Fiducials are immobile markers (beads, fixed particles) that were localized
in every frame. Each fiducial's positions are taken relative to its first
localization; the pooled offsets are fitted over frames with one polynomial
per axis, and the polynomial is subtracted from the positions of all
localizations.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import ndimage

from spotfit.core.fitting.models import Polynomial
from spotfit.core.fitting.optimizer import levenberg_marquardt
from spotfit.core.fitting.results import SolverResult
from spotfit.core.shared.exceptions import DataIOError
from spotfit.core.shared.typing import FloatArray

DRIFT_COLUMNS = ("frame", "x", "y")


@dataclass(frozen=True)
class DriftModel:
    """Polynomial drift in x and y as a function of the frame index.

    The polynomials are expressed in ``frame / frame_scale`` so that high
    degrees stay well conditioned over long movies.
    """

    degree: int
    frame_scale: float
    x: SolverResult
    y: SolverResult

    def drift(self, frames: FloatArray) -> tuple[FloatArray, FloatArray]:
        """Drift ``(dx, dy)`` at the given frames."""
        t = np.asarray(frames, dtype=float) / self.frame_scale
        model = Polynomial(self.degree)
        return model.evaluate(t, self.x.parameters), model.evaluate(t, self.y.parameters)

    def to_frame(self, frames: FloatArray) -> pd.DataFrame:
        """Table of the drift at every frame (``frame``, ``dx``, ``dy``)."""
        frames = np.asarray(frames)
        dx, dy = self.drift(frames)
        return pd.DataFrame({"frame": frames, "dx": dx, "dy": dy})


def estimate_drift(fiducials: pd.DataFrame, degree: int = 5) -> DriftModel:
    """Fit the drift of fiducial markers with a polynomial per axis.

    Args:
        fiducials: Localizations of the fiducials (``frame``, ``x``, ``y``);
            a ``trajectory`` column tells several fiducials apart
        degree: Degree of the drift polynomials

    Raises
    ------
        DataIOError: If a required column is missing or there are no more
        localizations than polynomial coefficients minus one
    """
    missing = [column for column in DRIFT_COLUMNS if column not in fiducials.columns]
    if missing:
        msg = f"Fiducial table is missing required columns: {', '.join(missing)}"
        raise DataIOError(msg)

    markers = fiducials.dropna(subset=list(DRIFT_COLUMNS))
    if "trajectory" in markers.columns:
        groups = [group for _, group in markers.groupby("trajectory", sort=True)]
    else:
        groups = [markers]

    frames, dx, dy = [], [], []
    for group in groups:
        group = group.sort_values("frame", kind="stable")
        xy = group[["x", "y"]].to_numpy(dtype=float)
        frames.append(group["frame"].to_numpy(dtype=float))
        dx.append(xy[:, 0] - xy[0, 0])
        dy.append(xy[:, 1] - xy[0, 1])

    n_samples = sum(len(f) for f in frames)
    if n_samples <= degree:
        msg = (
            f"A degree {degree} drift polynomial needs more than {degree} "
            f"fiducial localizations, got {n_samples}"
        )
        raise DataIOError(msg)

    t = np.concatenate(frames)
    scale = float(t.max()) if t.max() > 0 else 1.0
    t /= scale

    model = Polynomial(degree)
    initial = 0.1 * 0.1 ** np.arange(degree + 1)
    x_fit = levenberg_marquardt(model, t, np.concatenate(dx), initial)
    y_fit = levenberg_marquardt(model, t, np.concatenate(dy), initial)
    return DriftModel(degree=degree, frame_scale=scale, x=x_fit, y=y_fit)


def correct_drift(localizations: pd.DataFrame, drift: DriftModel) -> pd.DataFrame:
    """Subtract the drift at each row's frame from its ``x`` and ``y``.

    Returns a corrected copy; the input is not modified.
    """
    dx, dy = drift.drift(localizations["frame"].to_numpy(dtype=float))
    corrected = localizations.copy()
    corrected["x"] = corrected["x"] - dx
    corrected["y"] = corrected["y"] - dy
    return corrected


def correct_stack_drift(stack: np.ndarray, drift: DriftModel) -> np.ndarray:
    """Translate every frame of a stack back by its drift (bilinear interpolation)."""
    dx, dy = drift.drift(np.arange(stack.shape[0]))
    corrected = np.empty(stack.shape, dtype=float)
    for frame, image in enumerate(stack):
        corrected[frame] = ndimage.shift(
            image.astype(float), (-dy[frame], -dx[frame]), order=1, mode="nearest"
        )
    return corrected


__all__ = [
    "DRIFT_COLUMNS",
    "DriftModel",
    "correct_drift",
    "correct_stack_drift",
    "estimate_drift",
]
