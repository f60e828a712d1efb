"""Curve fitting service for table columns."""

from collections.abc import Sequence

import pandas as pd

from spotfit.core.algorithms.curve_fitting import CurveFitResult, build_model, fit_table
from spotfit.core.shared.reporter import NullReporter, Reporter


class CurveFitService:
    """Service fitting a registered model to two columns of a table."""

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter = reporter or NullReporter()

    def fit(
        self,
        table: pd.DataFrame,
        x_column: str | None,
        y_column: str,
        model: str = "line",
        *,
        degree: int | None = None,
        initial: Sequence[float] | None = None,
        rows: tuple[int, int] | None = None,
    ) -> CurveFitResult:
        """Fit ``y_column`` against ``x_column`` (or the row number) with a named model."""
        fit_model = build_model(model, degree)
        x_label = x_column or "row"
        self._reporter.action(f"Fitting {model} to {y_column} vs {x_label}...")

        result = fit_table(table, x_column, y_column, fit_model, initial, rows)

        if result.solver.is_finite:
            self._reporter.success(
                f"Converged in {result.solver.iterations} iterations "
                f"(R² = {result.solver.r_squared:.4f})"
            )
        else:
            self._reporter.warning("Fit did not converge to finite parameters")
        return result


__all__ = ["CurveFitService"]
