"""Init command implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from spotfit.io.config import generate_default_config
from spotfit.ui import error, info, print_next_steps, success


def init_command(
    path: Annotated[
        Path,
        typer.Argument(
            help="Path for new configuration file",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = Path("spotfit.toml"),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing file",
        ),
    ] = False,
) -> None:
    """Generate a default configuration file.

    Examples
    --------
      Create default config:
        $ spotfit init

      Overwrite existing config:
        $ spotfit init --force
    """
    if path.exists() and not force:
        error(f"File already exists: [path]{path}[/path]")
        info("Use [code]--force[/code] to overwrite")
        raise typer.Exit(1)

    path.write_text(generate_default_config())
    success(f"Created configuration file: [path]{path}[/path]")

    print_next_steps(
        [
            f"Review and customize: [cyan]{path}[/]",
            f"Localize peaks: [cyan]spotfit localize movie.npy --config {path}[/]",
            f"Link trajectories: [cyan]spotfit track Results/localizations.csv --config {path}[/]",
        ]
    )
