"""UI messages and status indicators."""

from __future__ import annotations

from spotfit.ui.console import VERSION, console
from spotfit.ui.logging import log, log_section

__all__ = [
    "action",
    "error",
    "info",
    "print_next_steps",
    "show_header",
    "show_version",
    "success",
    "warning",
]


def show_header(text: str, do_log: bool = True) -> None:
    """Display a prominent section header."""
    console.print("[header]" + "━" * 60 + "[/header]")
    console.print(f"[header]  {text}[/header]")
    console.print("[header]" + "━" * 60 + "[/header]")
    if do_log:
        log_section(text)


def show_version() -> None:
    """Show version information (for --version flag)."""
    console.print(f"[header]SpotFit[/header] [dim]v{VERSION}[/dim]")


def success(message: str, indent: int = 0, do_log: bool = True) -> None:
    """Display a success message."""
    spaces = "  " * indent
    console.print(f"{spaces}[success]✓[/success] {message}")
    if do_log:
        log(message)


def warning(message: str, indent: int = 0, do_log: bool = True) -> None:
    """Display a warning message."""
    spaces = "  " * indent
    console.print(f"{spaces}[warning]⚠[/warning]  {message}")
    if do_log:
        log(message, level="warning")


def error(message: str, indent: int = 0, do_log: bool = True) -> None:
    """Display an error message."""
    spaces = "  " * indent
    console.print(f"{spaces}[error]✗[/error] {message}")
    if do_log:
        log(message, level="error")


def info(message: str, indent: int = 0, do_log: bool = True) -> None:
    """Display an info message."""
    spaces = "  " * indent
    console.print(f"{spaces}[dim]▸[/dim] {message}")
    if do_log:
        log(message)


def action(message: str) -> None:
    """Display an action/process message with visual separation."""
    console.print(f"\n[bold yellow]→[/bold yellow] {message}")
    log(message)


def print_next_steps(steps: list[str]) -> None:
    """Print suggested next steps for the user."""
    console.print("\n[header]Next steps:[/header]")
    for number, step in enumerate(steps, 1):
        console.print(f"  {number}. {step}")
