"""CLI package for icloudy.

This package contains the Typer application and all subcommands.
"""

from icloudy.cli.main import app

__all__ = ["app"]
