"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from icloudy.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_paths_table(title: str = "iCloud Drive Paths") -> Table:
    """Create a pre-configured table for displaying discovered paths.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for path display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("#", width=3, justify="right", style="muted")
    table.add_column("", width=2, justify="center")
    table.add_column("Path", overflow="fold")
    table.add_column("Type", style="muted")
    table.add_column("Score", justify="right")
    table.add_column("App", style="text")
    return table


def format_score(score: int) -> str:
    """Format a path score with a color band.

    Args:
        score: Evaluator score.

    Returns:
        Rich markup string.
    """
    if score >= 25:
        return f"[score_high]{score}[/]"
    if score >= 10:
        return f"[score_medium]{score}[/]"
    return f"[score_low]{score}[/]"


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
