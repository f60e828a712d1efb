"""Localization service: detect and fit peaks in every frame of a stack."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from spotfit.core.domain.config import SpotFitConfig
from spotfit.core.domain.peaks import Roi
from spotfit.core.parallel import localize_stack
from spotfit.core.shared.reporter import NullReporter, Reporter


@dataclass(frozen=True)
class LocalizeResult:
    """Result of a localization run.

    Attributes
    ----------
        localizations: One row per valid fit, sorted by frame
        n_frames: Number of frames processed
        found_peaks: Peaks found by the detector
        fitted_peaks: Peaks that passed fit validation
    """

    localizations: pd.DataFrame
    n_frames: int
    found_peaks: int
    fitted_peaks: int

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "Frames": self.n_frames,
            "Peaks found": self.found_peaks,
            "Peaks fitted": self.fitted_peaks,
            "Rejected fits": self.found_peaks - self.fitted_peaks,
        }


class LocalizeService:
    """Service for peak localization in image stacks.

    Example:
        service = LocalizeService()
        result = service.run(stack)
        print(f"Fitted {result.fitted_peaks} of {result.found_peaks} peaks")
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or NullReporter()

    def run(
        self,
        stack: np.ndarray,
        config: SpotFitConfig | None = None,
        *,
        roi: Roi | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> LocalizeResult:
        """Localize peaks in a (frames, height, width) stack.

        Args:
            stack: Image stack; a 2D image is treated as a single frame
            config: Configuration (defaults if not provided)
            roi: Region searched in every frame (default: whole image)
            progress_callback: Called with (frame, n_localizations) per frame

        Returns
        -------
            LocalizeResult with the localization table and peak counts
        """
        if config is None:
            config = SpotFitConfig()

        stack = np.asarray(stack)
        n_frames = 1 if stack.ndim == 2 else stack.shape[0]
        self._reporter.action(f"Localizing peaks in {n_frames} frame(s)...")

        table, collector = localize_stack(
            stack,
            config.detection,
            config.fitting,
            roi=roi,
            n_workers=config.output.n_workers,
            progress_callback=progress_callback,
        )

        if collector.found_peaks == 0:
            self._reporter.warning("No peaks found above threshold")
        else:
            self._reporter.success(
                f"Fitted {collector.fitted_peaks} of {collector.found_peaks} peaks"
            )

        return LocalizeResult(
            localizations=table,
            n_frames=n_frames,
            found_peaks=collector.found_peaks,
            fitted_peaks=collector.fitted_peaks,
        )


__all__ = ["LocalizeResult", "LocalizeService"]
