"""Image preprocessing transforms used before peak detection.

A transform is any callable mapping an image to a filtered image of the same
shape. It must not modify its input.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from scipy.ndimage import correlate

from spotfit.core.shared.typing import FloatArray

Transform = Callable[[FloatArray], FloatArray]


def disc_kernels(inner_radius: int, outer_radius: int) -> tuple[FloatArray, FloatArray]:
    """Inner disc and outer ring footprints of the discoidal filter.

    Distances are rounded to the nearest integer: a pixel belongs to the disc
    when its rounded distance is at most ``inner_radius`` and to the ring when
    it equals ``outer_radius``.
    """
    offsets = np.arange(-outer_radius, outer_radius + 1)
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    distance = np.rint(np.hypot(dx, dy))
    inner = (distance <= inner_radius).astype(float)
    outer = (distance == outer_radius).astype(float)
    return inner, outer


def discoidal_average(image: FloatArray, inner_radius: int, outer_radius: int) -> FloatArray:
    """Subtract the local ring average from the local disc average.

    Enhances spots of roughly ``inner_radius`` while removing a slowly varying
    background. Negative responses are clamped to zero. Near the borders only
    the samples inside the image contribute to each mean.

    Args:
        image: 2D image
        inner_radius: Radius of the averaged spot disc
        outer_radius: Radius of the background ring

    Returns
    -------
        Filtered copy of the image
    """
    data = np.asarray(image, dtype=float)
    inner, outer = disc_kernels(inner_radius, outer_radius)
    ones = np.ones_like(data)

    with np.errstate(divide="ignore", invalid="ignore"):
        inner_mean = correlate(data, inner, mode="constant")
        inner_mean /= correlate(ones, inner, mode="constant")
        outer_mean = correlate(data, outer, mode="constant")
        outer_mean /= correlate(ones, outer, mode="constant")

    return np.clip(np.nan_to_num(inner_mean - outer_mean), 0.0, None)


@dataclass(frozen=True)
class DiscoidalAveragingFilter:
    """Discoidal averaging filter as a reusable transform.

    Example:
        >>> transform = DiscoidalAveragingFilter(inner_radius=1, outer_radius=3)
        >>> filtered = transform(image)
    """

    inner_radius: int = 1
    outer_radius: int = 3

    def __post_init__(self) -> None:
        if not 0 <= self.inner_radius < self.outer_radius:
            msg = (
                "Filter radii must satisfy 0 <= inner_radius < outer_radius, "
                f"got {self.inner_radius} and {self.outer_radius}"
            )
            raise ValueError(msg)

    def __call__(self, image: FloatArray) -> FloatArray:
        return discoidal_average(image, self.inner_radius, self.outer_radius)


__all__ = ["DiscoidalAveragingFilter", "Transform", "disc_kernels", "discoidal_average"]
