"""Localize command implementation."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer
from rich.markup import escape

from spotfit.cli.common import resolve_config
from spotfit.core.shared.exceptions import SpotFitError
from spotfit.io.tables import read_stack, write_table
from spotfit.services import LocalizeService
from spotfit.ui import (
    ConsoleReporter,
    close_logging,
    create_progress,
    error,
    log_dict,
    print_summary,
    setup_logging,
    show_header,
    success,
)


def localize_command(
    stack: Annotated[
        pathlib.Path,
        typer.Argument(
            help="Image stack (.npy or .npz, shape frames x height x width)",
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
    threshold_sigma: Annotated[
        float | None,
        typer.Option(
            "--threshold-sigma",
            "-t",
            help="Detection threshold in standard deviations above the mean",
        ),
    ] = None,
    threshold_value: Annotated[
        float | None,
        typer.Option(
            "--threshold",
            help="Fixed detection threshold (overrides --threshold-sigma)",
        ),
    ] = None,
    min_separation: Annotated[
        int | None,
        typer.Option(
            "--min-separation",
            "-s",
            help="Minimum distance in pixels between two peaks",
        ),
    ] = None,
    fit_radius: Annotated[
        int | None,
        typer.Option(
            "--fit-radius",
            "-r",
            help="Half-width in pixels of the fit window",
        ),
    ] = None,
    use_filter: Annotated[
        bool | None,
        typer.Option(
            "--filter/--no-filter",
            help="Apply the discoidal averaging filter before detection",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-w",
            help="Number of worker threads (default: CPU count)",
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
    """Detect and fit 2D Gaussian peaks in every frame of an image stack.

    Results are written to localizations.csv in the output directory.

    Examples
    --------
    Basic usage:
        $ spotfit localize movie.npy

    Lower threshold, 4 workers:
        $ spotfit localize movie.npy --threshold-sigma 4 --workers 4
    """
    try:
        spotfit_config = resolve_config(
            config,
            detection={
                "threshold_sigma": threshold_sigma,
                "threshold_value": threshold_value,
                "min_separation": min_separation,
                "use_filter": use_filter,
            },
            fitting={"fit_radius": fit_radius},
            output={"directory": output, "n_workers": workers},
        )
    except ValueError as exc:
        error(f"Invalid configuration: {escape(str(exc))}")
        raise typer.Exit(1) from exc

    setup_logging(log_file, verbose)
    try:
        show_header("Peak localization")
        log_dict(spotfit_config.detection.model_dump())
        images = read_stack(stack)

        with create_progress(transient=True) as progress:
            task = progress.add_task("Localizing frames", total=images.shape[0])
            result = LocalizeService(ConsoleReporter()).run(
                images,
                spotfit_config,
                progress_callback=lambda _frame, _n: progress.advance(task),
            )

        path = write_table(
            result.localizations, spotfit_config.output.directory / "localizations.csv"
        )
        print_summary(result.summary, title="Localization")
        success(f"Localizations written to [path]{path}[/path]")
    except SpotFitError as exc:
        error(escape(str(exc)))
        raise typer.Exit(1) from exc
    finally:
        close_logging()
