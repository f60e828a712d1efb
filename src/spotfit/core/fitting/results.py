"""Fitting result classes."""

from dataclasses import dataclass

import numpy as np

from spotfit.core.shared.typing import BoolArray, FloatArray


@dataclass(frozen=True)
class SolverResult:
    """Result of a Levenberg-Marquardt solve.

    Degenerate problems are not flagged with exceptions: inspect
    :attr:`is_finite` (or the arrays directly) for NaN.
    """

    parameters: FloatArray
    errors: FloatArray
    chi_squared: float
    r_squared: float
    iterations: int
    damping: float
    n_observations: int
    vary: BoolArray
    covariance: FloatArray

    @property
    def n_free(self) -> int:
        """Number of parameters that were varied."""
        return int(np.count_nonzero(self.vary))

    @property
    def reduced_chi_squared(self) -> float:
        with np.errstate(divide="ignore", invalid="ignore"):
            dof = np.float64(self.n_observations - self.n_free)
            return float(np.float64(self.chi_squared) / dof)

    @property
    def is_finite(self) -> bool:
        """True when no parameter or error is NaN."""
        return not (np.isnan(self.parameters).any() or np.isnan(self.errors).any())
