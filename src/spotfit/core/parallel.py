"""Parallel localization of image stacks.

Frames are independent: each worker duplicates its frame, detects and fits
its peaks without touching shared state. Only the final append to the shared
localization list (and the running totals) happens under a lock.
"""

from __future__ import annotations

import multiprocessing as mp
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
from threadpoolctl import threadpool_limits

from spotfit.core.algorithms.peak_fitting import localize_frame
from spotfit.core.domain.config import DetectionConfig, FitConfig
from spotfit.core.domain.peaks import LOCALIZATION_COLUMNS, Localization

if TYPE_CHECKING:
    from spotfit.core.algorithms.filters import Transform
    from spotfit.core.domain.peaks import Roi
    from spotfit.core.shared.typing import FloatArray


@dataclass
class LocalizationCollector:
    """Shared destination of per-frame results, guarded by a single lock."""

    localizations: list[tuple[int, Localization]] = field(default_factory=list)
    found_peaks: int = 0
    fitted_peaks: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def add(self, localizations: list[Localization], n_found: int) -> None:
        with self._lock:
            start = len(self.localizations)
            self.localizations.extend(enumerate(localizations, start))
            self.found_peaks += n_found
            self.fitted_peaks += len(localizations)

    def to_frame(self) -> pd.DataFrame:
        """Localizations as a table, sorted by frame then detection order."""
        ordered = sorted(self.localizations, key=lambda item: (item[1].frame, item[0]))
        rows = [localization.to_row() for _, localization in ordered]
        return pd.DataFrame(rows, columns=LOCALIZATION_COLUMNS)


def _localize_single_frame(
    frame: int,
    stack: FloatArray,
    collector: LocalizationCollector,
    *,
    detection: DetectionConfig,
    fitting: FitConfig,
    roi: Roi | None,
    transform: Transform | None,
    progress_callback: Callable[[int, int], None] | None,
) -> None:
    """Worker: localize one frame and hand the result to the collector."""
    localizations, n_found = localize_frame(
        stack[frame], detection, fitting, roi=roi, transform=transform, frame=frame
    )
    collector.add(localizations, n_found)
    if progress_callback is not None:
        progress_callback(frame, len(localizations))


def localize_stack(
    stack: FloatArray,
    detection: DetectionConfig | None = None,
    fitting: FitConfig | None = None,
    *,
    roi: Roi | None = None,
    transform: Transform | None = None,
    n_workers: int | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> tuple[pd.DataFrame, LocalizationCollector]:
    """Detect and fit peaks in every frame of a (frames, height, width) stack.

    Args:
        stack: Image stack (a single 2D image is treated as one frame)
        detection: Detection configuration
        fitting: Fit configuration
        roi: Region searched in every frame
        transform: Preprocessing transform replacing the default filter
        n_workers: Number of worker threads (default: CPU count)
        progress_callback: Called with (frame, n_localizations) per frame

    Returns
    -------
        Tuple of (localization table, collector with the peak totals)
    """
    stack = np.asarray(stack)
    if stack.ndim == 2:
        stack = stack[np.newaxis]

    n_frames = stack.shape[0]
    if n_workers is None:
        n_workers = mp.cpu_count()
    n_workers = max(1, min(n_workers, n_frames))

    collector = LocalizationCollector()
    worker = partial(
        _localize_single_frame,
        stack=stack,
        collector=collector,
        detection=detection or DetectionConfig(),
        fitting=fitting or FitConfig(),
        roi=roi,
        transform=transform,
        progress_callback=progress_callback,
    )

    # Keep BLAS single-threaded so it does not fight with the worker threads
    with threadpool_limits(limits=1, user_api="blas"):
        if n_workers > 1:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                # Consume the iterator so worker exceptions propagate
                list(executor.map(worker, range(n_frames)))
        else:
            for frame in range(n_frames):
                worker(frame)

    return collector.to_frame(), collector


__all__ = ["LocalizationCollector", "localize_stack"]
