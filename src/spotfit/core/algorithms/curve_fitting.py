"""Curve fitting of one table column against another.

Any registered model taking a single independent variable (``line``,
``polynomial``, ``exponential``, ``gaussian``, ``diffusion``) can be fitted to
a range of rows of a table.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from spotfit.core.fitting.models import Model, get_model, list_models
from spotfit.core.fitting.optimizer import levenberg_marquardt
from spotfit.core.fitting.results import SolverResult
from spotfit.core.shared.exceptions import ConfigError


@dataclass(frozen=True)
class CurveFitResult:
    """Fitted parameters of a table curve fit."""

    model: Model
    x_column: str | None
    y_column: str
    initial: tuple[float, ...]
    solver: SolverResult

    @property
    def parameters(self) -> dict[str, float]:
        return dict(zip(self.model.parameter_names, self.solver.parameters.tolist(), strict=True))

    @property
    def errors(self) -> dict[str, float]:
        return dict(zip(self.model.parameter_names, self.solver.errors.tolist(), strict=True))

    def to_frame(self) -> pd.DataFrame:
        """One row per parameter: ``parameter``, ``initial``, ``value``, ``error``."""
        return pd.DataFrame(
            {
                "parameter": list(self.model.parameter_names),
                "initial": list(self.initial),
                "value": self.solver.parameters,
                "error": self.solver.errors,
            }
        )


def build_model(name: str, degree: int | None = None) -> Model:
    """Instantiate a registered model for curve fitting.

    ``degree`` applies to ``polynomial`` only (``line`` is degree 1).

    Raises
    ------
        ConfigError: If the name is not registered
    """
    try:
        if name == "polynomial" and degree is not None:
            return get_model(name, degree=degree)
        return get_model(name)
    except KeyError as exc:
        msg = f"Unknown model '{name}' (available: {', '.join(list_models())})"
        raise ConfigError(msg) from exc


def fit_table(
    table: pd.DataFrame,
    x_column: str | None,
    y_column: str,
    model: Model,
    initial: Sequence[float] | None = None,
    rows: tuple[int, int] | None = None,
) -> CurveFitResult:
    """Fit ``y_column`` against ``x_column`` over a range of rows.

    Args:
        table: Source table
        x_column: Independent variable; None uses the row number within the
            selected range (0, 1, 2, ...)
        y_column: Observed values
        model: Model with one independent variable
        initial: Initial parameters (default: all ones)
        rows: Half-open positional range ``(start, stop)`` (default: all rows)

    Returns
    -------
        CurveFitResult

    Raises
    ------
        ConfigError: On unknown columns, a bad row range or a wrong number
        of initial parameters
    """
    for column in (x_column, y_column):
        if column is not None and column not in table.columns:
            msg = f"Unknown column '{column}' (available: {', '.join(map(str, table.columns))})"
            raise ConfigError(msg)

    start, stop = rows if rows is not None else (0, len(table))
    if not 0 <= start < stop <= len(table):
        msg = f"Invalid row range [{start}, {stop}) for a table of {len(table)} rows"
        raise ConfigError(msg)
    selected = table.iloc[start:stop]

    names = model.parameter_names
    initial = tuple(float(v) for v in initial) if initial is not None else (1.0,) * len(names)
    if len(initial) != len(names):
        msg = f"Expected {len(names)} initial parameters ({', '.join(names)}), got {len(initial)}"
        raise ConfigError(msg)

    if x_column is None:
        x = np.arange(len(selected), dtype=float)
    else:
        x = selected[x_column].to_numpy(dtype=float)
    y = selected[y_column].to_numpy(dtype=float)

    solver = levenberg_marquardt(model, x, y, initial)
    return CurveFitResult(
        model=model, x_column=x_column, y_column=y_column, initial=initial, solver=solver
    )


__all__ = ["CurveFitResult", "build_model", "fit_table"]
