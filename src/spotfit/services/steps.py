"""Step fitting service: changepoint detection on 1D signals and trajectories."""

import numpy as np
import pandas as pd

from spotfit.core.algorithms.changepoint import StepFitResult, fit_changepoints
from spotfit.core.domain.config import StepFitConfig
from spotfit.core.shared.exceptions import ConfigError, DataIOError
from spotfit.core.shared.reporter import NullReporter, Reporter
from spotfit.io.tables import segments_to_frame


class StepService:
    """Service for piecewise-constant fits of signals.

    Example:
        service = StepService()
        result = service.fit(signal, StepFitConfig(noise_sigma=2.0))
        print(result.changepoints)
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or NullReporter()

    def fit(self, signal: np.ndarray, config: StepFitConfig | None = None) -> StepFitResult:
        """Segment one signal into constant steps."""
        if config is None:
            config = StepFitConfig()
        return fit_changepoints(signal, config.noise_sigma, config.segments)

    def fit_trajectories(
        self,
        tracks: pd.DataFrame,
        column: str,
        config: StepFitConfig | None = None,
    ) -> pd.DataFrame:
        """Fit steps to one column of every trajectory, ordered by frame.

        Returns
        -------
            Segment table with ``trajectory``, ``start``, ``stop``, ``mean``,
            ``chi_squared`` columns; indices are positions within the trajectory

        Raises
        ------
            ConfigError: If ``column`` is not in the table
            DataIOError: If the table has no ``trajectory``/``frame`` columns
        """
        if column not in tracks.columns:
            msg = f"Unknown signal column '{column}' (available: {', '.join(tracks.columns)})"
            raise ConfigError(msg)
        missing = [name for name in ("trajectory", "frame") if name not in tracks.columns]
        if missing:
            msg = f"Track table is missing required columns: {', '.join(missing)}"
            raise DataIOError(msg)

        linked = tracks.dropna(subset=["trajectory"])
        n_trajectories = linked["trajectory"].nunique()
        self._reporter.action(f"Fitting steps to '{column}' of {n_trajectories} trajectories...")

        parts = []
        for trajectory, group in linked.groupby("trajectory", sort=True):
            signal = group.sort_values("frame", kind="stable")[column].to_numpy(dtype=float)
            result = self.fit(signal, config)
            parts.append(segments_to_frame(result.segments, trajectory=int(trajectory)))

        if not parts:
            self._reporter.warning("No trajectories to fit")
            return segments_to_frame([], trajectory=pd.Series(dtype=int))

        table = pd.concat(parts, ignore_index=True)
        self._reporter.success(f"Found {len(table)} segments")
        return table


__all__ = ["StepService"]
