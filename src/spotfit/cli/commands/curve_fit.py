"""Curve-fit command implementation."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer
from rich.markup import escape

from spotfit.cli.common import resolve_config
from spotfit.core.fitting.models import list_models
from spotfit.core.shared.exceptions import ConfigError, SpotFitError
from spotfit.io.tables import read_table, write_table
from spotfit.services import CurveFitService
from spotfit.ui import (
    ConsoleReporter,
    close_logging,
    console,
    create_table,
    error,
    setup_logging,
    show_header,
    success,
)


def parse_initial(text: str | None) -> list[float] | None:
    """Parse comma-separated initial parameters ("1, 0.5, 2")."""
    if text is None:
        return None
    try:
        return [float(value) for value in text.split(",")]
    except ValueError as exc:
        msg = f"Initial parameters must be comma-separated numbers, got '{text}'"
        raise ConfigError(msg) from exc


def curve_fit_command(
    table: Annotated[
        pathlib.Path,
        typer.Argument(
            help="CSV table holding the columns to fit",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    y_column: Annotated[
        str,
        typer.Option("--y", "-y", help="Column of observed values"),
    ],
    x_column: Annotated[
        str | None,
        typer.Option("--x", "-x", help="Independent variable column (default: row number)"),
    ] = None,
    model: Annotated[
        str,
        typer.Option(
            "--model",
            "-m",
            help=f"Fit model ({', '.join(list_models())})",
        ),
    ] = "line",
    degree: Annotated[
        int | None,
        typer.Option("--degree", help="Degree of the polynomial model", min=0),
    ] = None,
    initial: Annotated[
        str | None,
        typer.Option(
            "--initial",
            "-p",
            help="Comma-separated initial parameters (default: all ones)",
        ),
    ] = None,
    first: Annotated[
        int,
        typer.Option("--first", help="First row to fit (0-based)", min=0),
    ] = 0,
    last: Annotated[
        int | None,
        typer.Option("--last", help="Row after the last one to fit (default: end of table)"),
    ] = None,
    output: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for results",
            file_okay=False,
            resolve_path=True,
        ),
    ] = None,
    log_file: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--log-file",
            help="Write a log file (.log or .json)",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Show log messages on the console",
        ),
    ] = False,
) -> None:
    """Fit a model to one column of a table against another.

    Fitted parameters are written to curve_fit.csv.

    Examples
    --------
    Exponential decay of the amplitude over frames:
        $ spotfit curve-fit tracks.csv --x frame --y amplitude --model exponential -p 100,-0.1

    Cubic polynomial over the first 50 rows:
        $ spotfit curve-fit data.csv --x time --y signal --model polynomial --degree 3 --last 50
    """
    try:
        spotfit_config = resolve_config(None, output={"directory": output})
    except ValueError as exc:
        error(f"Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1) from exc

    setup_logging(log_file, verbose)
    try:
        show_header("Curve fitting")
        data = read_table(table)
        rows = (first, len(data) if last is None else last)
        result = CurveFitService(ConsoleReporter()).fit(
            data,
            x_column,
            y_column,
            model,
            degree=degree,
            initial=parse_initial(initial),
            rows=rows,
        )

        parameters = result.to_frame()
        summary = create_table(escape(f"{model} fit of {y_column}"))
        for column in ("Parameter", "Initial", "Value", "Error"):
            summary.add_column(column)
        for row in parameters.itertuples(index=False):
            summary.add_row(
                row.parameter, f"{row.initial:g}", f"{row.value:.6g}", f"{row.error:.2g}"
            )
        console.print(summary)

        path = write_table(parameters, spotfit_config.output.directory / "curve_fit.csv")
        success(f"Parameters written to [path]{path}[/path]")
    except SpotFitError as exc:
        error(escape(str(exc)))
        raise typer.Exit(1) from exc
    finally:
        close_logging()
