"""Configuration commands.

Show, create and locate the icloudy configuration file.
"""

from typing import Annotated

import tomli_w
import typer
from rich.syntax import Syntax

from icloudy.cli.types import load_cli_config
from icloudy.core.config import ConfigError, IcloudyConfig, save_config
from icloudy.core.paths import get_config_path
from icloudy.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and manage icloudy configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Display the effective configuration as TOML."""
    config = load_cli_config()
    config_path = get_config_path()

    source = str(config_path) if config_path.exists() else "built-in defaults"
    console.print(f"[muted]# Source: {source}[/muted]")
    console.print(Syntax(tomli_w.dumps(config.model_dump(mode="json")), "toml"))


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file populated with the default values."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_info(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it with defaults.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(IcloudyConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Failed to write config: {e}")
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def path() -> None:
    """Print the config file location."""
    typer.echo(str(get_config_path()))
