"""Steps command implementation."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer
from rich.markup import escape

from spotfit.cli.common import resolve_config
from spotfit.core.shared.exceptions import ConfigError, SpotFitError
from spotfit.io.tables import read_table, segments_to_frame, write_table
from spotfit.services import StepService
from spotfit.ui import (
    ConsoleReporter,
    close_logging,
    error,
    info,
    print_summary,
    setup_logging,
    show_header,
    success,
)


def steps_command(
    table: Annotated[
        pathlib.Path,
        typer.Argument(
            help="CSV table: a track table (fitted per trajectory) or a plain signal table",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    column: Annotated[
        str,
        typer.Option(
            "--column",
            "-k",
            help="Column holding the signal",
        ),
    ] = "amplitude",
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
    config: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to TOML configuration file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    noise_sigma: Annotated[
        float | None,
        typer.Option(
            "--noise-sigma",
            "-n",
            help="Per-sample noise standard deviation",
        ),
    ] = None,
    segments: Annotated[
        int | None,
        typer.Option(
            "--segments",
            "-s",
            help="Number of segments (automatic if not set)",
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
    """Fit piecewise-constant steps to a signal.

    With a track table (``trajectory`` column) each trajectory is fitted on its
    own, in frame order. Results are written to steps.csv.

    Examples
    --------
    Photobleaching steps of every trajectory:
        $ spotfit steps Results/tracks.csv --column amplitude --noise-sigma 20

    Exactly three segments of a single signal:
        $ spotfit steps signal.csv --column intensity --segments 3
    """
    try:
        spotfit_config = resolve_config(
            config,
            steps={"noise_sigma": noise_sigma, "segments": segments},
            output={"directory": output},
        )
    except ValueError as exc:
        error(f"Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1) from exc

    setup_logging(log_file, verbose)
    try:
        show_header("Step fitting")
        data = read_table(table)
        service = StepService(ConsoleReporter())

        if "trajectory" in data.columns:
            result = service.fit_trajectories(data, column, spotfit_config.steps)
        else:
            if column not in data.columns:
                msg = f"Unknown signal column '{column}' (available: {', '.join(data.columns)})"
                raise ConfigError(msg)
            info(f"Fitting steps to '{column}' ({len(data)} samples)")
            fit = service.fit(data[column].to_numpy(dtype=float), spotfit_config.steps)
            result = segments_to_frame(fit.segments)

        path = write_table(result, spotfit_config.output.directory / "steps.csv")
        print_summary(
            {"Signal": column, "Samples": len(data), "Segments": len(result)},
            title="Step fitting",
        )
        success(f"Segments written to [path]{path}[/path]")
    except SpotFitError as exc:
        error(escape(str(exc)))
        raise typer.Exit(1) from exc
    finally:
        close_logging()
