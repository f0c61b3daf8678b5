"""UI helpers for CLI interaction.

Keeps presentation logic (Rich output, error display) separate from the
generator itself.
"""

from collections.abc import Callable
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.panel import Panel
import typer

from spotgen.config import get_logger

# Diagnostics and banners go to stderr, stdout carries only the playlist
console = Console(stderr=True)
logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Errors are logged with their traceback, shown to the user as a short
    message and turned into a non-zero exit code.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def display_result_banner(result: str) -> None:
    """Frame generated output meant to be pasted into a Spotify playlist."""
    console.print(
        Panel(
            "[bold]Copy and paste the output below into a new Spotify playlist[/bold]",
            border_style="green",
        )
    )
    if not result:
        console.print("[yellow]No tracks were resolved[/yellow]")
