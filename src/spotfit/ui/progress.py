"""UI progress indicators."""

from __future__ import annotations

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from spotfit.ui.console import console

__all__ = ["create_progress"]


def create_progress(transient: bool = False) -> Progress:
    """Create a standard progress bar with consistent styling.

    Args:
        transient: Whether the progress bar should disappear when complete

    Returns
    -------
        Configured Progress instance
    """
    return Progress(
        SpinnerColumn(finished_text="[success]✓[/success]", spinner_name="dots"),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(complete_style="cyan", finished_style="green"),
        MofNCompleteColumn(),
        TextColumn("[dim]•[/dim]"),
        TimeElapsedColumn(),
        console=console,
        transient=transient,
    )
