"""Main Typer application for SpotFit."""

from typing import Annotated

import typer

from spotfit.cli.callbacks import version_callback
from spotfit.cli.commands import (
    curve_fit_command,
    drift_command,
    init_command,
    localize_command,
    steps_command,
    track_command,
)

app = typer.Typer(
    name="spotfit",
    help="SpotFit - Localization, tracking and step fitting of fluorescent spots",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """SpotFit - Single-particle localization and tracking.

    Detect and fit 2D Gaussian spots, link them into trajectories and find
    steps in their intensity traces.
    """


app.command(name="localize")(localize_command)
app.command(name="track")(track_command)
app.command(name="steps")(steps_command)
app.command(name="drift")(drift_command)
app.command(name="curve-fit")(curve_fit_command)
app.command(name="init")(init_command)
