"""Tracking service: link localizations into trajectories and analyse their motion."""

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from spotfit.core.algorithms.displacement import (
    StepSizeDistribution,
    fit_diffusion_coefficients,
    mean_square_displacement,
    step_size_distribution,
)
from spotfit.core.algorithms.linking import link_particles, trajectory_ids
from spotfit.core.domain.config import LinkingConfig
from spotfit.core.shared.reporter import NullReporter, Reporter


@dataclass(frozen=True)
class TrackResult:
    """Linked table with a few counts for reporting."""

    tracks: pd.DataFrame
    n_localizations: int
    n_trajectories: int

    @property
    def summary(self) -> dict[str, Any]:
        linked = int(self.tracks["trajectory"].notna().sum())
        return {
            "Localizations": self.n_localizations,
            "Trajectories": self.n_trajectories,
            "Linked localizations": linked,
        }


class TrackService:
    """Service for particle tracking and displacement analysis."""

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or NullReporter()

    def link(self, localizations: pd.DataFrame, config: LinkingConfig | None = None) -> TrackResult:
        """Link localizations of consecutive frames into trajectories."""
        if config is None:
            config = LinkingConfig()

        self._reporter.action(
            f"Linking {len(localizations)} localizations "
            f"(max step {config.max_step:g} px, look-ahead {config.look_ahead})..."
        )
        tracks = link_particles(localizations, config)
        n_trajectories = len(trajectory_ids(tracks))

        if n_trajectories == 0:
            self._reporter.warning("No trajectories found")
        else:
            self._reporter.success(f"Found {n_trajectories} trajectories")

        return TrackResult(
            tracks=tracks,
            n_localizations=len(localizations),
            n_trajectories=n_trajectories,
        )

    def msd(
        self,
        tracks: pd.DataFrame,
        pixel_size: float = 1.0,
        time_interval: float = 1.0,
        *,
        average: bool = False,
        min_points: int = 1,
    ) -> pd.DataFrame:
        """Mean square displacement per trajectory (or pooled) and lag."""
        self._reporter.action("Computing mean square displacements...")
        msd = mean_square_displacement(
            tracks, pixel_size, time_interval, average=average, min_points=min_points
        )
        self._reporter.info(f"{len(msd)} (trajectory, lag) pairs")
        return msd

    def diffusion(
        self,
        msd: pd.DataFrame,
        dimensionality: float = 4.0,
        max_fit_time: float | None = None,
    ) -> pd.DataFrame:
        """Diffusion coefficient of every trajectory from its MSD curve."""
        self._reporter.action("Fitting diffusion coefficients...")
        limit = np.inf if max_fit_time is None else max_fit_time
        table = fit_diffusion_coefficients(msd, dimensionality, limit)
        if table.empty:
            self._reporter.warning("No diffusion coefficient could be fitted")
        else:
            self._reporter.info(
                f"{len(table)} trajectories, median D = {table['D'].median():.4g}"
            )
        return table

    def step_sizes(
        self,
        tracks: pd.DataFrame,
        pixel_size: float = 1.0,
        time_interval: float = 1.0,
        *,
        bin_width: float | None = None,
        min_step_size: float = 0.0,
    ) -> StepSizeDistribution:
        """Distribution of single-frame step lengths and the fitted D."""
        self._reporter.action("Computing the step size distribution...")
        distribution = step_size_distribution(
            tracks,
            pixel_size,
            time_interval,
            bin_width=bin_width,
            min_step_size=min_step_size,
        )
        if distribution.n_steps == 0:
            self._reporter.warning("No single-frame steps found")
        else:
            self._reporter.info(
                f"{distribution.n_steps} steps, D = {distribution.diffusion_coefficient:.4g} "
                f"± {distribution.diffusion_error:.2g}"
            )
        return distribution


__all__ = ["TrackResult", "TrackService"]
