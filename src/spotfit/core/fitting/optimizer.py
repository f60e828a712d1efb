"""Levenberg-Marquardt least-squares optimization.

This module implements a damped Gauss-Newton solver over a caller-supplied
:class:`~spotfit.core.fitting.models.Model` with an analytic gradient. The
normal equations are solved by Gauss-Jordan elimination, so the solver has no
failure mode other than NaN: singular curvature matrices and degenerate sample
counts propagate into the parameters, errors and R² of the result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from spotfit.core.constants import (
    LM_DAMPING,
    LM_DAMPING_STEP,
    LM_MAX_ITERATIONS,
    LM_PRECISION,
)
from spotfit.core.fitting.linear_algebra import gauss_jordan, invert
from spotfit.core.fitting.results import SolverResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from spotfit.core.fitting.models import Model
    from spotfit.core.shared.typing import BoolArray, FloatArray


def _prepare_sigma(sigma: FloatArray | None, n: int) -> FloatArray:
    """Per-sample standard deviations; 0 means unweighted."""
    if sigma is None:
        return np.ones(n)
    sigma = np.asarray(sigma, dtype=float)
    return np.where(sigma == 0, 1.0, sigma)


def _sum_of_squares(
    model: Model, x: FloatArray, y: FloatArray, sigma: FloatArray, parameters: FloatArray
) -> float:
    residuals = (y - model.evaluate(x, parameters)) / sigma
    return float(np.sum(residuals * residuals))


def _curvature(
    model: Model,
    x: FloatArray,
    y: FloatArray,
    sigma: FloatArray,
    parameters: FloatArray,
    vary: BoolArray,
) -> tuple[FloatArray, FloatArray, float]:
    """Weighted curvature matrix, gradient vector and sum of squares."""
    residuals = (y - model.evaluate(x, parameters)) / sigma
    jacobian = model.gradient(x, parameters)[:, vary] / sigma[:, np.newaxis]
    alpha = jacobian.T @ jacobian
    beta = jacobian.T @ residuals
    return alpha, beta, float(np.sum(residuals * residuals))


def _r_squared(y: FloatArray, sigma: FloatArray, chi_squared: float, n_free: int) -> float:
    """Weighted coefficient of determination."""
    n = y.size
    weights = 1.0 / (sigma * sigma)
    mean = np.sum(y * weights) / np.sum(weights)
    sst = np.sum((y - mean) ** 2 * weights)
    return float(1.0 - (chi_squared / np.float64(n - n_free)) / (sst / np.float64(n - 1)))


def levenberg_marquardt(
    model: Model,
    x: FloatArray,
    y: FloatArray,
    parameters: Sequence[float] | FloatArray,
    *,
    sigma: FloatArray | None = None,
    vary: Sequence[bool] | BoolArray | None = None,
    damping: float = LM_DAMPING,
    max_iterations: int = LM_MAX_ITERATIONS,
    precision: float = LM_PRECISION,
) -> SolverResult:
    """Fit ``model`` to the observations ``(x, y)``.

    Args:
        model: Model providing ``evaluate`` and ``gradient``
        x: Independent variables, shape (n, d) (or (n,) for 1D models)
        y: Observed values, shape (n,)
        parameters: Initial parameter vector; it is copied, not modified
        sigma: Optional per-sample standard deviations (weights are 1/sigma²)
        vary: Optional mask of parameters to optimize (default: all)
        damping: Initial damping factor lambda
        max_iterations: Iteration cap
        precision: Stop when the sum of squares changes by less than this

    Returns
    -------
        SolverResult with refined parameters, standard errors, chi-squared
        and weighted R². Fixed parameters get an error of 0.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    params = np.array(parameters, dtype=float, copy=True)
    n = y.size
    sigma_arr = _prepare_sigma(sigma, n)
    vary_mask = np.ones(params.size, dtype=bool) if vary is None else np.asarray(vary, dtype=bool)
    n_free = int(np.count_nonzero(vary_mask))

    lam = float(damping)
    sum_of_squares = 0.0
    iterations = 0

    with np.errstate(all="ignore"):
        for iterations in range(1, max_iterations + 1):
            alpha, beta, before = _curvature(model, x, y, sigma_arr, params, vary_mask)
            alpha[np.diag_indices_from(alpha)] *= 1.0 + lam

            trial = params.copy()
            trial[vary_mask] += gauss_jordan(alpha, beta)
            after = _sum_of_squares(model, x, y, sigma_arr, trial)

            improvement = abs(after - before)
            if after < before:
                params = trial
                lam /= LM_DAMPING_STEP
            else:
                after = before
                lam *= LM_DAMPING_STEP
            sum_of_squares = after

            if improvement < precision:
                break

        alpha, _, _ = _curvature(model, x, y, sigma_arr, params, vary_mask)
        covariance = invert(alpha)

        errors = np.zeros(params.size)
        scale = np.float64(sum_of_squares) / np.float64(n - n_free)
        errors[vary_mask] = np.sqrt(np.diag(covariance) * scale)
        r_squared = _r_squared(y, sigma_arr, sum_of_squares, n_free)

    return SolverResult(
        parameters=params,
        errors=errors,
        chi_squared=sum_of_squares,
        r_squared=r_squared,
        iterations=iterations,
        damping=lam,
        n_observations=n,
        vary=vary_mask,
        covariance=covariance,
    )


__all__ = ["levenberg_marquardt"]
