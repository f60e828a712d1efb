"""Peak detection by iterative maximum search with disc suppression."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from spotfit.core.algorithms.filters import DiscoidalAveragingFilter
from spotfit.core.domain.config import DetectionConfig
from spotfit.core.domain.peaks import Peak, Roi

if TYPE_CHECKING:
    from spotfit.core.algorithms.filters import Transform
    from spotfit.core.shared.typing import FloatArray


def compute_threshold(region: FloatArray, config: DetectionConfig) -> float:
    """Detection threshold for a region.

    Uses the fixed ``threshold_value`` when configured, otherwise the region
    mean plus ``threshold_sigma`` population standard deviations.
    """
    if config.threshold_value is not None:
        return float(config.threshold_value)
    return float(np.mean(region) + config.threshold_sigma * np.std(region))


def prepare_image(
    grid: FloatArray, config: DetectionConfig, transform: Transform | None = None
) -> FloatArray:
    """Private float copy of the grid, filtered when the config asks for it."""
    image = np.array(grid, dtype=float, copy=True)
    if not config.use_filter:
        return image
    if transform is None:
        transform = DiscoidalAveragingFilter(config.inner_radius, config.outer_radius)
    return np.array(transform(image), dtype=float, copy=True)


def detect_peaks(
    grid: FloatArray,
    roi: Roi | None = None,
    config: DetectionConfig | None = None,
    *,
    transform: Transform | None = None,
    frame: int = 0,
) -> list[Peak]:
    """Find local intensity maxima above a threshold.

    The brightest remaining candidate is recorded, then a disc of radius
    ``min_separation`` around it is suppressed, until no candidate at or above
    the threshold is left. The caller's grid is never modified.

    Args:
        grid: 2D image, indexed [y, x]
        roi: Region searched for peaks (default: whole image)
        config: Detection configuration
        transform: Preprocessing transform replacing the default discoidal
            filter (only applied when ``config.use_filter`` is set)
        frame: Frame index recorded on the returned peaks

    Returns
    -------
        Peaks ordered from most to least intense
    """
    config = config or DetectionConfig()
    image = prepare_image(grid, config, transform)
    roi = (roi or Roi.full(image.shape)).clip(image.shape)
    if roi.size == 0:
        return []

    threshold = compute_threshold(image[roi.slices], config)

    # Candidates in row-major order; ties resolve to the first one
    rows, cols = np.nonzero(image[roi.slices] >= threshold)
    ys = rows + roi.y
    xs = cols + roi.x
    active = np.ones(ys.size, dtype=bool)

    minimum = float(image.min())
    radius = config.min_separation
    height, width = image.shape
    peaks: list[Peak] = []

    while active.any():
        values = np.where(active, image[ys, xs], -np.inf)
        best = int(np.argmax(values))
        if values[best] < threshold:
            break

        x, y = int(xs[best]), int(ys[best])
        peaks.append(Peak(x, y, frame))

        # Suppress a disc so the same peak is not counted twice
        y0, y1 = max(y - radius, 0), min(y + radius + 1, height)
        x0, x1 = max(x - radius, 0), min(x + radius + 1, width)
        dy, dx = np.ogrid[y0 - y : y1 - y, x0 - x : x1 - x]
        window = image[y0:y1, x0:x1]
        window[dx * dx + dy * dy <= radius * radius] = minimum
        active &= (xs - x) ** 2 + (ys - y) ** 2 > radius * radius

    return peaks


__all__ = ["compute_threshold", "detect_peaks", "prepare_image"]
