"""Track command implementation."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer
from rich.markup import escape

from spotfit.cli.common import resolve_config
from spotfit.core.algorithms.linking import REQUIRED_COLUMNS
from spotfit.core.shared.exceptions import SpotFitError
from spotfit.io.tables import read_table, write_table
from spotfit.services import TrackService
from spotfit.ui import (
    ConsoleReporter,
    close_logging,
    error,
    print_summary,
    setup_logging,
    show_header,
    success,
)


def track_command(
    localizations: Annotated[
        pathlib.Path,
        typer.Argument(
            help="Localization table (CSV with frame, x and y columns)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
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
    max_step: Annotated[
        float | None,
        typer.Option(
            "--max-step",
            "-d",
            help="Maximum displacement in pixels between linked localizations",
        ),
    ] = None,
    look_ahead: Annotated[
        int | None,
        typer.Option(
            "--look-ahead",
            "-g",
            help="Number of frames searched for a successor",
        ),
    ] = None,
    discard_unlinked: Annotated[
        bool | None,
        typer.Option(
            "--discard-unlinked/--keep-unlinked",
            help="Drop localizations that are not part of a trajectory",
        ),
    ] = None,
    msd: Annotated[
        bool,
        typer.Option(
            "--msd/--no-msd",
            help="Also compute mean square displacements (msd.csv)",
        ),
    ] = False,
    pixel_size: Annotated[
        float,
        typer.Option("--pixel-size", help="Pixel size for the MSD", min=0.0),
    ] = 1.0,
    time_interval: Annotated[
        float,
        typer.Option("--time-interval", help="Time between frames for the MSD", min=0.0),
    ] = 1.0,
    dimensionality: Annotated[
        float,
        typer.Option(
            "--dimensionality",
            help="MSD slope factor of the diffusion fit (4 for 2D tracks)",
            min=0.0,
        ),
    ] = 4.0,
    max_fit_time: Annotated[
        float | None,
        typer.Option(
            "--max-fit-time",
            help="Largest time lag used in the diffusion fit (default: all)",
        ),
    ] = None,
    step_sizes: Annotated[
        bool,
        typer.Option(
            "--step-sizes/--no-step-sizes",
            help="Also fit the step size distribution (step_sizes.csv)",
        ),
    ] = False,
    bin_width: Annotated[
        float | None,
        typer.Option(
            "--bin-width",
            help="Histogram bin width of the step sizes (default: pixel size / 10)",
        ),
    ] = None,
    min_step_size: Annotated[
        float,
        typer.Option("--min-step-size", help="Smallest step size included in the fit", min=0.0),
    ] = 0.0,
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
    """Link localizations of consecutive frames into trajectories.

    Results are written to tracks.csv; --msd adds msd.csv and diffusion.csv,
    --step-sizes adds step_sizes.csv.

    Examples
    --------
    Basic usage:
        $ spotfit track Results/localizations.csv

    Tolerate one missing frame, with MSD and diffusion in physical units:
        $ spotfit track locs.csv --look-ahead 2 --msd --pixel-size 0.1 --time-interval 0.05
    """
    try:
        spotfit_config = resolve_config(
            config,
            linking={
                "max_step": max_step,
                "look_ahead": look_ahead,
                "discard_unlinked": discard_unlinked,
            },
            output={"directory": output},
        )
    except ValueError as exc:
        error(f"Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1) from exc

    setup_logging(log_file, verbose)
    try:
        show_header("Particle tracking")
        table = read_table(localizations, REQUIRED_COLUMNS)
        service = TrackService(ConsoleReporter())
        result = service.link(table, spotfit_config.linking)

        directory = spotfit_config.output.directory
        path = write_table(result.tracks, directory / "tracks.csv")
        print_summary(result.summary, title="Tracking")
        success(f"Tracks written to [path]{path}[/path]")

        if msd:
            table_msd = service.msd(result.tracks, pixel_size, time_interval)
            path = write_table(table_msd, directory / "msd.csv")
            success(f"MSD written to [path]{path}[/path]")
            table_d = service.diffusion(table_msd, dimensionality, max_fit_time)
            path = write_table(table_d, directory / "diffusion.csv")
            success(f"Diffusion coefficients written to [path]{path}[/path]")

        if step_sizes:
            distribution = service.step_sizes(
                result.tracks,
                pixel_size,
                time_interval,
                bin_width=bin_width,
                min_step_size=min_step_size,
            )
            path = write_table(distribution.histogram, directory / "step_sizes.csv")
            print_summary(
                {
                    "Steps": distribution.n_steps,
                    "Mean square step": f"{distribution.msd:.4g}",
                    "D": f"{distribution.diffusion_coefficient:.4g}",
                    "D error": f"{distribution.diffusion_error:.2g}",
                },
                title="Step size distribution",
            )
            success(f"Step size histogram written to [path]{path}[/path]")
    except SpotFitError as exc:
        error(escape(str(exc)))
        raise typer.Exit(1) from exc
    finally:
        close_logging()
