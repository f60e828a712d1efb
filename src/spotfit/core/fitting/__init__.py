"""Nonlinear least-squares fitting.

This package provides the numerical engine shared by peak fitting and
curve fitting: the Levenberg-Marquardt solver, its Gauss-Jordan linear
algebra and the model library.
"""

from spotfit.core.fitting.linear_algebra import gauss_jordan, invert
from spotfit.core.fitting.models import (
    MODELS,
    Exponential,
    FreeDiffusion,
    Gaussian1D,
    Gaussian2D,
    Model,
    NumericalModel,
    Polynomial,
    get_model,
    list_models,
    register_model,
)
from spotfit.core.fitting.optimizer import levenberg_marquardt
from spotfit.core.fitting.results import SolverResult

__all__ = [
    "MODELS",
    "Exponential",
    "FreeDiffusion",
    "Gaussian1D",
    "Gaussian2D",
    "Model",
    "NumericalModel",
    "Polynomial",
    "SolverResult",
    "gauss_jordan",
    "get_model",
    "invert",
    "levenberg_marquardt",
    "list_models",
    "register_model",
]
