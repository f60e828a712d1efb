"""Fit models for the Levenberg-Marquardt solver.

A model is a pair of vectorized functions over the rows of an
independent-variable matrix ``x`` of shape (n, d):

    evaluate(x, p) -> (n,)       model values
    gradient(x, p) -> (n, p)     partial derivatives with respect to p

Models are frozen dataclasses built fresh per fitting problem. Named models
are registered with :func:`register_model` so that they can be selected from
configuration.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from spotfit.core.constants import GAUSSIAN_PARAMETER_NAMES, NUMERICAL_GRADIENT_STEP
from spotfit.core.shared.typing import FloatArray


@runtime_checkable
class Model(Protocol):
    """Protocol for fit models."""

    @property
    def parameter_names(self) -> tuple[str, ...]:
        """Names of the parameters, in vector order."""
        ...

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        """Evaluate the model at every row of ``x``."""
        ...

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        """Partial derivatives with respect to every parameter, shape (n, p)."""
        ...


# Global model registry
MODELS: dict[str, Callable[..., Model]] = {}


def register_model(names: str | Iterable[str]) -> Callable[[type], type]:
    """Register a model class under one or more names.

    Example:
        @register_model("gaussian2d")
        class Gaussian2D:
            ...
    """
    if isinstance(names, str):
        names = [names]

    def decorator(model_class: type) -> type:
        for name in names:
            MODELS[name] = model_class
        return model_class

    return decorator


def get_model(name: str, **kwargs: object) -> Model:
    """Instantiate a registered model by name.

    Raises
    ------
        KeyError: If the model name is not registered
    """
    return MODELS[name](**kwargs)


def list_models() -> list[str]:
    """List all registered model names."""
    return list(MODELS.keys())


def _columns(x: FloatArray, count: int) -> list[FloatArray]:
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x[:, np.newaxis]
    return [x[:, i] for i in range(count)]


@register_model(["gaussian2d", "gaussian_2d"])
@dataclass(frozen=True)
class Gaussian2D:
    """Elliptical 2D Gaussian on a constant baseline.

    value(x, y) = baseline + amplitude * exp(-(dx² / 2σx² + dy² / 2σy²))

    Parameters: baseline, amplitude, x, y, sigma_x, sigma_y.
    """

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return GAUSSIAN_PARAMETER_NAMES

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        px, py = _columns(x, 2)
        baseline, amplitude, x0, y0, sx, sy = parameters
        dx = px - x0
        dy = py - y0
        return baseline + amplitude * np.exp(-(dx * dx / (2 * sx * sx) + dy * dy / (2 * sy * sy)))

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        px, py = _columns(x, 2)
        _, amplitude, x0, y0, sx, sy = parameters
        dx = px - x0
        dy = py - y0
        shape = np.exp(-(dx * dx / (2 * sx * sx) + dy * dy / (2 * sy * sy)))
        scaled = amplitude * shape
        return np.column_stack(
            [
                np.ones_like(shape),
                shape,
                scaled * dx / (sx * sx),
                scaled * dy / (sy * sy),
                scaled * dx * dx / (sx * sx * sx),
                scaled * dy * dy / (sy * sy * sy),
            ]
        )


@register_model("gaussian")
@dataclass(frozen=True)
class Gaussian1D:
    """1D Gaussian on a constant baseline (baseline, amplitude, center, sigma)."""

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return ("baseline", "amplitude", "center", "sigma")

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (px,) = _columns(x, 1)
        baseline, amplitude, center, sigma = parameters
        d = (px - center) / sigma
        return baseline + amplitude * np.exp(-0.5 * d * d)

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (px,) = _columns(x, 1)
        _, amplitude, center, sigma = parameters
        d = px - center
        shape = np.exp(-(d * d) / (2 * sigma * sigma))
        return np.column_stack(
            [
                np.ones_like(shape),
                shape,
                amplitude * shape * d / (sigma * sigma),
                amplitude * shape * d * d / (sigma * sigma * sigma),
            ]
        )


@register_model(["polynomial", "line"])
@dataclass(frozen=True)
class Polynomial:
    """Polynomial ``a0 + a1 x + ... + ak x^k`` (a line by default)."""

    degree: int = 1

    def __post_init__(self) -> None:
        if self.degree < 0:
            msg = f"Polynomial degree must be non-negative, got {self.degree}"
            raise ValueError(msg)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(f"a{i}" for i in range(self.degree + 1))

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (px,) = _columns(x, 1)
        # Horner scheme
        result = np.full_like(px, parameters[-1])
        for coefficient in parameters[-2::-1]:
            result = result * px + coefficient
        return result

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (px,) = _columns(x, 1)
        return np.vander(px, self.degree + 1, increasing=True)


@register_model("exponential")
@dataclass(frozen=True)
class Exponential:
    """Exponential ``a * exp(b * x)``."""

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return ("a", "b")

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (px,) = _columns(x, 1)
        a, b = parameters
        return a * np.exp(b * px)

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (px,) = _columns(x, 1)
        a, b = parameters
        e = np.exp(b * px)
        return np.column_stack([e, a * px * e])


@register_model("diffusion")
@dataclass(frozen=True)
class FreeDiffusion:
    """Mean square displacement of free diffusion, ``dimensionality * D * dt``.

    ``dimensionality`` is 2 per spatial dimension (4 for 2D tracking).
    """

    dimensionality: float = 4.0

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return ("D",)

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (dt,) = _columns(x, 1)
        return self.dimensionality * parameters[0] * dt

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        (dt,) = _columns(x, 1)
        return (self.dimensionality * dt)[:, np.newaxis]


@dataclass(frozen=True)
class NumericalModel:
    """Model around an arbitrary vectorized function.

    The gradient is approximated by central differences, so any callable
    ``function(x, parameters) -> values`` can be fitted.

    Example:
        >>> model = NumericalModel(lambda x, p: p[0] * np.sin(p[1] * x[:, 0]), ("a", "k"))
    """

    function: Callable[[FloatArray, FloatArray], FloatArray]
    names: tuple[str, ...]
    step: float = NUMERICAL_GRADIENT_STEP

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return self.names

    def evaluate(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        return np.asarray(self.function(x, np.asarray(parameters, dtype=float)), dtype=float)

    def gradient(self, x: FloatArray, parameters: FloatArray) -> FloatArray:
        parameters = np.asarray(parameters, dtype=float)
        columns = []
        for i in range(parameters.size):
            upper = parameters.copy()
            lower = parameters.copy()
            upper[i] += self.step
            lower[i] -= self.step
            columns.append((self.evaluate(x, upper) - self.evaluate(x, lower)) / (2 * self.step))
        return np.column_stack(columns)


__all__ = [
    "MODELS",
    "Exponential",
    "FreeDiffusion",
    "Gaussian1D",
    "Gaussian2D",
    "Model",
    "NumericalModel",
    "Polynomial",
    "get_model",
    "list_models",
    "register_model",
]
