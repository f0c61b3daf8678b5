"""spotgen CLI - generate a playlist from a generator string or file."""

import asyncio
from pathlib import Path
from typing import Annotated

from rich.console import Console
import typer

from spotgen import __version__
from spotgen.application.generator import Generator
from spotgen.config import get_logger, setup_loguru_logger
from spotgen.infrastructure.cli.ui import command_error_handler, display_result_banner

VERSION = __version__

# Formats that render to text
CLI_FORMATS = ("uri", "list", "csv", "log")

# Playlist output goes to stdout; logging and banners use stderr
output_console = Console(soft_wrap=True)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"🎵 spotgen v{VERSION} - Generate Spotify playlists from plain text",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)


def read_input(source: str) -> str:
    """Read a generator string from a file, or take the argument itself.

    Literal ``\\n`` sequences in an inline string are turned into newlines
    for shells that cannot pass multi-line arguments.
    """
    path = Path(source)
    try:
        if path.is_file():
            text = path.read_text(encoding="utf-8")
            return text.replace("\r\n", "\n").replace("\r", "\n")
    except OSError:
        # too long or otherwise not a usable path
        pass
    return source.replace("\\n", "\n")


@app.command(name="generate")
@command_error_handler
def generate_command(
    source: Annotated[
        str,
        typer.Argument(
            metavar="INPUT",
            help="File containing a generator string, or the string itself",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Argument(metavar="OUTPUT", help="File to write (default: stdout)"),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option("--format", "-f", help="Output format (uri, list, csv, log)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Generate a playlist and print or save the result."""
    if output_format and output_format not in CLI_FORMATS:
        raise typer.BadParameter(
            f"Unknown format {output_format!r}, expected one of {', '.join(CLI_FORMATS)}"
        )
    setup_loguru_logger(verbose)

    generator = Generator(read_input(source))
    result = asyncio.run(generator.generate(output_format))
    if not isinstance(result, str):
        result = "\n".join(str(item) for item in result)

    if output is None:
        display_result_banner(result)
        if result:
            output_console.print(result, markup=False, highlight=False)
        return

    output.write_text(f"{result}\n" if result else "", encoding="utf-8")
    logger.info(f"Wrote {len(result.splitlines())} lines to {output}")


@app.command(name="version")
def version_command() -> None:
    """Show version information."""
    output_console.print(
        f"[bold bright_blue]🎵 spotgen[/bold bright_blue] [dim]v{VERSION}[/dim]"
    )


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
