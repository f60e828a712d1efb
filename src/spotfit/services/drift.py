"""Drift correction service."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from spotfit.core.algorithms.drift import DriftModel, correct_drift, estimate_drift
from spotfit.core.shared.exceptions import DataIOError
from spotfit.core.shared.reporter import NullReporter, Reporter


@dataclass(frozen=True)
class DriftResult:
    """Drift-corrected table with the fitted drift."""

    corrected: pd.DataFrame
    model: DriftModel
    drift: pd.DataFrame
    n_fiducials: int


class DriftService:
    """Service estimating stage drift from fiducial trajectories.

    Example:
        service = DriftService()
        result = service.correct(tracks, fiducials=[0, 3], degree=4)
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or NullReporter()

    def correct(
        self, tracks: pd.DataFrame, fiducials: Sequence[int], degree: int = 5
    ) -> DriftResult:
        """Fit the drift of the fiducial trajectories and remove it from all rows.

        Raises
        ------
            DataIOError: If the table has no trajectories or a fiducial is unknown
        """
        if "trajectory" not in tracks.columns:
            msg = "Drift correction needs a track table with a 'trajectory' column"
            raise DataIOError(msg)

        present = set(tracks["trajectory"].dropna().astype(int))
        unknown = sorted(set(fiducials) - present)
        if unknown:
            msg = f"Unknown fiducial trajectories: {', '.join(map(str, unknown))}"
            raise DataIOError(msg)

        self._reporter.action(
            f"Fitting a degree {degree} drift polynomial to {len(fiducials)} fiducial(s)..."
        )
        markers = tracks[tracks["trajectory"].isin(list(fiducials))]
        model = estimate_drift(markers, degree)

        frames = np.arange(int(tracks["frame"].min()), int(tracks["frame"].max()) + 1)
        drift = model.to_frame(frames)
        largest = float(np.hypot(drift["dx"], drift["dy"]).max())
        self._reporter.success(f"Largest drift {largest:.3g} px")

        return DriftResult(
            corrected=correct_drift(tracks, model),
            model=model,
            drift=drift,
            n_fiducials=len(fiducials),
        )


__all__ = ["DriftResult", "DriftService"]
