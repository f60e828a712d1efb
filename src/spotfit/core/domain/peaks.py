"""Peak, region and localization records."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from spotfit.core.constants import GAUSSIAN_PARAMETER_NAMES, SIGMA_TO_FWHM
from spotfit.core.shared.typing import FloatArray


@dataclass(frozen=True)
class Roi:
    """Rectangular region of interest in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def full(cls, shape: tuple[int, ...]) -> Roi:
        """ROI covering a whole (height, width) image."""
        return cls(0, 0, int(shape[1]), int(shape[0]))

    @classmethod
    def around(cls, x: int, y: int, radius: int) -> Roi:
        """Square ROI of half-width ``radius`` centred on (x, y)."""
        return cls(x - radius, y - radius, 2 * radius + 1, 2 * radius + 1)

    def clip(self, shape: tuple[int, ...]) -> Roi:
        """Intersect with the bounds of a (height, width) image."""
        x0 = max(self.x, 0)
        y0 = max(self.y, 0)
        x1 = min(self.x + self.width, int(shape[1]))
        y1 = min(self.y + self.height, int(shape[0]))
        return Roi(x0, y0, max(x1 - x0, 0), max(y1 - y0, 0))

    @property
    def slices(self) -> tuple[slice, slice]:
        """Numpy (row, column) slices of the region."""
        return slice(self.y, self.y + self.height), slice(self.x, self.x + self.width)

    @property
    def size(self) -> int:
        return self.width * self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


@dataclass(frozen=True)
class Peak:
    """Integer peak position found by the detector."""

    x: int
    y: int
    frame: int = 0


@dataclass(frozen=True)
class Localization:
    """A validated sub-pixel 2D Gaussian fit of one peak.

    Attributes:
        frame: Frame index of the source image
        parameters: baseline, amplitude, x, y, sigma_x, sigma_y (sigmas >= 0)
        errors: Standard errors in the same order
        chi_squared: Sum of squared residuals of the fit
        r_squared: Coefficient of determination of the fit
        iterations: Solver iterations used
    """

    frame: int
    parameters: FloatArray
    errors: FloatArray
    chi_squared: float = math.nan
    r_squared: float = math.nan
    iterations: int = 0

    @property
    def x(self) -> float:
        return float(self.parameters[2])

    @property
    def y(self) -> float:
        return float(self.parameters[3])

    @property
    def fwhm_x(self) -> float:
        return float(self.parameters[4]) * SIGMA_TO_FWHM

    @property
    def fwhm_y(self) -> float:
        return float(self.parameters[5]) * SIGMA_TO_FWHM

    @property
    def fwhm(self) -> float:
        """Mean FWHM of both axes."""
        return (self.fwhm_x + self.fwhm_y) / 2

    @property
    def error_fwhm_x(self) -> float:
        return float(self.errors[4]) * SIGMA_TO_FWHM

    @property
    def error_fwhm_y(self) -> float:
        return float(self.errors[5]) * SIGMA_TO_FWHM

    @property
    def error_fwhm(self) -> float:
        return math.hypot(self.error_fwhm_x, self.error_fwhm_y) / 2

    def to_row(self) -> dict[str, Any]:
        """Flatten into a table row."""
        row: dict[str, Any] = {"frame": self.frame}
        row.update(zip(GAUSSIAN_PARAMETER_NAMES, map(float, self.parameters), strict=True))
        row.update(fwhm_x=self.fwhm_x, fwhm_y=self.fwhm_y, fwhm=self.fwhm)
        row.update(
            (f"error_{name}", float(error))
            for name, error in zip(GAUSSIAN_PARAMETER_NAMES, self.errors, strict=True)
        )
        row.update(
            error_fwhm_x=self.error_fwhm_x,
            error_fwhm_y=self.error_fwhm_y,
            error_fwhm=self.error_fwhm,
            chi_squared=self.chi_squared,
            r_squared=self.r_squared,
            iterations=self.iterations,
        )
        return row


LOCALIZATION_COLUMNS = [
    "frame",
    *GAUSSIAN_PARAMETER_NAMES,
    "fwhm_x",
    "fwhm_y",
    "fwhm",
    *(f"error_{name}" for name in GAUSSIAN_PARAMETER_NAMES),
    "error_fwhm_x",
    "error_fwhm_y",
    "error_fwhm",
    "chi_squared",
    "r_squared",
    "iterations",
]


def empty_parameters() -> FloatArray:
    """Seed vector with every parameter left to be estimated."""
    return np.full(len(GAUSSIAN_PARAMETER_NAMES), np.nan)


__all__ = ["LOCALIZATION_COLUMNS", "Localization", "Peak", "Roi", "empty_parameters"]
