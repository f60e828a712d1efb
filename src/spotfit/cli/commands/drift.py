"""Drift command implementation."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer
from rich.markup import escape

from spotfit.cli.common import resolve_config
from spotfit.core.algorithms.drift import correct_stack_drift
from spotfit.core.algorithms.linking import REQUIRED_COLUMNS
from spotfit.core.shared.exceptions import SpotFitError
from spotfit.io.tables import read_stack, read_table, write_stack, write_table
from spotfit.services import DriftService
from spotfit.ui import (
    ConsoleReporter,
    close_logging,
    error,
    print_summary,
    setup_logging,
    show_header,
    success,
)


def drift_command(
    tracks: Annotated[
        pathlib.Path,
        typer.Argument(
            help="Track table (CSV with trajectory, frame, x and y columns)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    fiducials: Annotated[
        list[int],
        typer.Option(
            "--fiducial",
            "-f",
            help="Trajectory id of an immobile fiducial marker (repeatable)",
        ),
    ],
    degree: Annotated[
        int,
        typer.Option(
            "--degree",
            help="Degree of the drift polynomials",
            min=0,
        ),
    ] = 5,
    stack: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--stack",
            help="Image stack (.npy/.npz) to translate by the drift as well",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
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
    """Correct stage drift using fiducial trajectories.

    The drift of the fiducials is fitted over frames with one polynomial per
    axis and subtracted from every localization. Results are written to
    drift.csv and tracks_corrected.csv (and stack_corrected.npy with --stack).

    Examples
    --------
    Two beads tracked as trajectories 0 and 4:
        $ spotfit drift Results/tracks.csv -f 0 -f 4 --degree 3
    """
    try:
        spotfit_config = resolve_config(None, output={"directory": output})
    except ValueError as exc:
        error(f"Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1) from exc

    setup_logging(log_file, verbose)
    try:
        show_header("Drift correction")
        table = read_table(tracks, ("trajectory", *REQUIRED_COLUMNS))
        result = DriftService(ConsoleReporter()).correct(table, fiducials, degree)

        directory = spotfit_config.output.directory
        drift_path = write_table(result.drift, directory / "drift.csv")
        path = write_table(result.corrected, directory / "tracks_corrected.csv")
        print_summary(
            {
                "Fiducials": result.n_fiducials,
                "Degree": degree,
                "Frames": len(result.drift),
                "R² (x)": f"{result.model.x.r_squared:.4f}",
                "R² (y)": f"{result.model.y.r_squared:.4f}",
            },
            title="Drift correction",
        )
        success(f"Drift written to [path]{drift_path}[/path]")
        success(f"Corrected tracks written to [path]{path}[/path]")

        if stack is not None:
            images = correct_stack_drift(read_stack(stack), result.model)
            path = write_stack(images, directory / "stack_corrected.npy")
            success(f"Corrected stack written to [path]{path}[/path]")
    except SpotFitError as exc:
        error(escape(str(exc)))
        raise typer.Exit(1) from exc
    finally:
        close_logging()
