"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from icloudy import __version__
from icloudy.cli.commands import config, copy, find
from icloudy.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="icloudy",
    help="Locate iCloud Drive folders and copy files into them.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"icloudy version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    root = logging.getLogger("icloudy")
    root.handlers.clear()
    handler = RichHandler(console=err_console, show_path=False, markup=False)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    platform: Annotated[
        str | None,
        typer.Option(
            "--platform",
            help="Override platform detection (darwin, win32).",
            hidden=True,
        ),
    ] = None,
) -> None:
    """icloudy - find iCloud Drive paths and copy files to them.

    Discovers the iCloud Drive root and per-app storage folders on
    macOS and Windows, ranks them by confidence and copies files into
    the best match.
    """
    _configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["platform"] = platform


# Register commands
app.command(name="find")(find.find_paths)
app.command(name="copy")(copy.copy_files)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
