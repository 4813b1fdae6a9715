"""CLI commands for icloudy.

This package contains all subcommand implementations.
"""

from icloudy.cli.commands import config, copy, find

__all__ = ["config", "copy", "find"]
