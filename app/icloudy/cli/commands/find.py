"""Find command for discovering iCloud Drive paths.

Lists the iCloud Drive root and app-storage folders found on this
machine, optionally narrowed by a fuzzy application name.
"""

import json
from typing import Annotated, Any

import typer

from icloudy.cli.display import build_paths_table, print_path_details, print_paths_summary
from icloudy.cli.types import OutputFormat, get_finder, is_quiet, load_cli_config
from icloudy.core.deadline import Deadline
from icloudy.models.path_info import PathInfo, PathType, SearchOptions
from icloudy.utils.formatting import console, print_warning


def find_paths(
    ctx: typer.Context,
    app_name: Annotated[
        str | None,
        typer.Argument(
            metavar="APP",
            help="Application name to search for (fuzzy match).",
        ),
    ] = None,
    min_score: Annotated[
        int | None,
        typer.Option(
            "--min-score",
            "-m",
            help="Only show paths scoring at least this much.",
        ),
    ] = None,
    include_inaccessible: Annotated[
        bool,
        typer.Option(
            "--include-inaccessible",
            "-a",
            help="Include paths that exist but cannot be listed.",
        ),
    ] = False,
    types: Annotated[
        list[PathType] | None,
        typer.Option(
            "--type",
            "-t",
            help="Only show paths of this type (repeatable).",
            case_sensitive=False,
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    detailed: Annotated[
        bool,
        typer.Option("--detailed", "-d", help="Show provenance and evaluation details."),
    ] = False,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Give up probing after this many seconds."),
    ] = None,
) -> None:
    """Find iCloud Drive paths on this machine.

    Without APP, lists every discovered location ranked by score. With
    APP, lists app-storage folders whose name, bundle ID or app ID
    matches, best match first.
    """
    config = load_cli_config()
    finder = get_finder(ctx, config)

    options = SearchOptions(
        app_name=app_name,
        min_score=min_score,
        include_inaccessible=include_inaccessible,
        types=tuple(types) if types else None,
    )
    deadline = Deadline.after(timeout) if timeout is not None else None
    paths = finder.find(options, deadline=deadline)

    if output_format == OutputFormat.JSON:
        _print_json(paths, options)
        return

    if output_format == OutputFormat.PLAIN:
        for info in paths:
            typer.echo(info.path)
        return

    if not paths:
        target = f"for '{app_name}'" if app_name else "on this machine"
        print_warning(f"No iCloud Drive paths found {target}.")
        raise typer.Exit(code=1)

    title = f"iCloud Drive Paths matching '{app_name}'" if app_name else "iCloud Drive Paths"
    console.print(build_paths_table(paths, title=title))

    if detailed:
        for info in paths:
            print_path_details(info)

    if not is_quiet(ctx):
        print_paths_summary(paths)


# === Private helper functions ===


def _print_json(paths: list[PathInfo], options: SearchOptions) -> None:
    """Print discovered paths as JSON with query and summary blocks."""
    accessible = sum(1 for info in paths if info.is_accessible)
    data: dict[str, Any] = {
        "query": {
            "app_name": options.app_name,
            "min_score": options.min_score,
            "include_inaccessible": options.include_inaccessible,
            "types": [t.value for t in options.types] if options.types else None,
        },
        "summary": {
            "total": len(paths),
            "accessible": accessible,
            "inaccessible": len(paths) - accessible,
        },
        "paths": [info.to_dict() for info in paths],
    }
    console.print_json(json.dumps(data))
