"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum

import typer

from icloudy.core.config import ConfigError, IcloudyConfig, load_config_or_default
from icloudy.discovery.factory import UnsupportedPlatformError, get_adapter
from icloudy.discovery.search import PathFinder
from icloudy.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options for path listings."""

    TABLE = "table"
    JSON = "json"
    PLAIN = "plain"


def load_cli_config() -> IcloudyConfig:
    """Load the user configuration or exit with code 1 on a broken file."""
    try:
        return load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_finder(ctx: typer.Context, config: IcloudyConfig) -> PathFinder:
    """Build a PathFinder for the selected platform.

    Args:
        ctx: Typer context carrying the global ``--platform`` override.
        config: Effective configuration.

    Returns:
        PathFinder wrapping the platform adapter.

    Raises:
        typer.Exit: With code 2 if the platform is not supported.
    """
    platform = (ctx.obj or {}).get("platform")
    try:
        adapter = get_adapter(platform, config=config)
    except UnsupportedPlatformError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e
    return PathFinder(adapter)


def is_quiet(ctx: typer.Context) -> bool:
    """Return True if the global ``--quiet`` flag is set."""
    return bool((ctx.obj or {}).get("quiet"))
