"""Changepoint detection by recursive chi-squared minimization.

A signal is modeled as piecewise constant. Starting from one segment spanning
the whole signal, :meth:`StepFitter.add_step` repeatedly splits the segment
whose best two-way split lowers the global chi-squared the most.

The automatic stop compares the fit with a "counter" partition whose
boundaries sit at the best split point inside each current segment. While
real steps are being found, the fit improves faster than the counter fit and
the ratio chi2 / counter_chi2 decreases; once it increases the search stops.
The split that made the ratio increase stays committed.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from spotfit.core.shared.typing import FloatArray


@dataclass(frozen=True)
class Segment:
    """Constant segment ``[start, stop)`` with its mean and chi-squared."""

    start: int
    stop: int
    mean: float
    chi_squared: float

    def __len__(self) -> int:
        return self.stop - self.start


@dataclass(frozen=True)
class Split:
    """Best two-way split of a segment."""

    left: Segment
    right: Segment

    @property
    def chi_squared(self) -> float:
        return self.left.chi_squared + self.right.chi_squared

    @property
    def index(self) -> int:
        return self.left.stop


@dataclass(frozen=True)
class StepFitResult:
    """Segments covering the signal and the matching counter partition."""

    segments: list[Segment]
    chi_squared: float
    counter_segments: list[Segment]
    counter_chi_squared: float

    @property
    def changepoints(self) -> list[int]:
        """Indices where a new segment starts (excluding 0)."""
        return [segment.start for segment in self.segments[1:]]

    @property
    def means(self) -> list[float]:
        return [segment.mean for segment in self.segments]

    def fitted(self) -> FloatArray:
        """Piecewise-constant reconstruction of the signal."""
        if not self.segments:
            return np.empty(0)
        return np.repeat(self.means, [len(segment) for segment in self.segments])


class StepFitter:
    """Incremental piecewise-constant fit of a 1D signal.

    Segments are kept in an ordered list that always partitions
    ``range(len(signal))`` contiguously; a split replaces one entry with its
    two children.

    Example:
        >>> fitter = StepFitter(signal, sigma=1.0)
        >>> fitter.add_step()
        True
        >>> [s.start for s in fitter.segments]
        [0, 10]
    """

    def __init__(self, signal: FloatArray, sigma: float = 1.0) -> None:
        self.data = np.asarray(signal, dtype=float)
        self.sigma = float(sigma)
        self.segments: list[Segment] = []
        self.counter_segments: list[Segment] = []
        self.chi_squared = 0.0
        self.counter_chi_squared = 0.0
        self.clear()

    def clear(self) -> None:
        """Reset to a single segment spanning the whole signal."""
        if self.data.size == 0:
            self.segments = []
            self.chi_squared = 0.0
        else:
            step = self.segment(0, self.data.size)
            self.segments = [step]
            self.chi_squared = step.chi_squared
        self._update_counter_segments()

    def segment(self, start: int, stop: int) -> Segment:
        """Build the segment ``[start, stop)`` with its mean and chi-squared."""
        values = self.data[start:stop]
        with np.errstate(divide="ignore", invalid="ignore"):
            mean = float(np.mean(values)) if values.size else np.nan
            residuals = (values - mean) / self.sigma
        return Segment(start, stop, mean, float(np.sum(residuals * residuals)))

    def best_split(self, segment: Segment) -> Split | None:
        """Exhaustive search for the split minimizing the combined chi-squared.

        Every interior index is tried; on ties the leftmost split wins.
        Returns None for segments shorter than two samples.
        """
        n = len(segment)
        if n < 2:
            return None

        centered = self.data[segment.start : segment.stop] - segment.mean
        cumsum = np.cumsum(centered)
        cumsum_sq = np.cumsum(centered * centered)
        left_n = np.arange(1, n)
        right_n = n - left_n

        left = cumsum_sq[:-1] - cumsum[:-1] ** 2 / left_n
        right = (cumsum_sq[-1] - cumsum_sq[:-1]) - (cumsum[-1] - cumsum[:-1]) ** 2 / right_n
        index = segment.start + 1 + int(np.argmin(left + right))

        return Split(self.segment(segment.start, index), self.segment(index, segment.stop))

    def add_step(self) -> bool:
        """Split the segment that lowers the total chi-squared the most.

        Returns
        -------
            False when no split lowers the total (nothing is changed)
        """
        best_chi_squared = self.chi_squared
        best: tuple[int, Split] | None = None

        for i, segment in enumerate(self.segments):
            # Even a perfect split of this segment cannot beat the current best
            if self.chi_squared - segment.chi_squared > best_chi_squared or len(segment) < 2:
                continue

            split = self.best_split(segment)
            if split is None:
                continue
            chi_squared = (self.chi_squared - segment.chi_squared) + split.chi_squared
            if chi_squared < best_chi_squared:
                best_chi_squared = chi_squared
                best = (i, split)

        if best is None:
            return False

        index, split = best
        self.segments[index : index + 1] = [split.left, split.right]
        self.chi_squared = best_chi_squared
        self._update_counter_segments()
        return True

    def _update_counter_segments(self) -> None:
        """Rebuild the counter partition around the best split of each segment."""
        self.counter_segments = []
        self.counter_chi_squared = 0.0
        if self.data.size == 0:
            return

        last = 0
        for segment in self.segments:
            split = self.best_split(segment)
            if split is None:
                continue
            self.counter_segments.append(self.segment(last, split.index))
            last = split.index

        self.counter_segments.append(self.segment(last, self.data.size))
        self.counter_chi_squared = sum(s.chi_squared for s in self.counter_segments)

    @property
    def ratio(self) -> float:
        """Chi-squared of the fit relative to the counter fit."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.float64(self.chi_squared) / np.float64(self.counter_chi_squared))

    def result(self) -> StepFitResult:
        return StepFitResult(
            segments=list(self.segments),
            chi_squared=self.chi_squared,
            counter_segments=list(self.counter_segments),
            counter_chi_squared=self.counter_chi_squared,
        )

    def __str__(self) -> str:
        if not self.segments:
            return ""
        return ", ".join(str(b) for b in [self.segments[0].start, *(s.stop for s in self.segments)])


def fit_changepoints(
    signal: FloatArray, noise_sigma: float = 1.0, segments: int | None = None
) -> StepFitResult:
    """Segment a signal into constant steps.

    Args:
        signal: 1D signal
        noise_sigma: Per-sample noise standard deviation
        segments: Target number of segments; None selects the automatic stop

    Returns
    -------
        Ordered segments covering the signal, with total chi-squared
    """
    fitter = StepFitter(signal, noise_sigma)
    if fitter.data.size == 0:
        return fitter.result()

    if segments is not None:
        while len(fitter.segments) < segments and fitter.add_step():
            pass
        return fitter.result()

    ratio = np.inf
    while True:
        if not fitter.add_step():
            break
        previous, ratio = ratio, fitter.ratio
        if not ratio < previous:
            break

    return fitter.result()


__all__ = ["Segment", "Split", "StepFitResult", "StepFitter", "fit_changepoints"]
