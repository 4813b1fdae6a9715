"""Copy command for sending local files to iCloud Drive.

Plans the copy, shows the plan, asks for confirmation and then copies
every file into the best matching iCloud folder.
"""

import dataclasses
import json
from typing import Annotated, Any

import typer

from icloudy.cli.display import create_result_table, print_analysis
from icloudy.cli.types import get_finder, is_quiet, load_cli_config
from icloudy.core.deadline import Deadline
from icloudy.models.transfer import CopyOptions
from icloudy.transfer.copier import CopyError, FileCopier
from icloudy.utils.formatting import console, print_error, print_info, print_success, print_warning


def build_copy_options(
    source: str,
    app: str | None = None,
    options: CopyOptions | None = None,
    **overrides: Any,
) -> CopyOptions:
    """Normalize the short call shapes into a single CopyOptions.

    Supports ``build_copy_options(source)``,
    ``build_copy_options(source, app)`` and
    ``build_copy_options(source, app, options)``. Keyword overrides are
    applied last.

    Args:
        source: Source file or directory.
        app: Application name; overrides ``options.app`` when given.
        options: Base options.
        **overrides: Any other CopyOptions field.

    Returns:
        CopyOptions instance.
    """
    base = options or CopyOptions(source=source)
    changes: dict[str, Any] = {"source": source, **overrides}
    if app is not None:
        changes["app"] = app
    return dataclasses.replace(base, **changes)


def copy_files(
    ctx: typer.Context,
    source: Annotated[
        str,
        typer.Argument(help="File or directory to copy."),
    ],
    app_name: Annotated[
        str | None,
        typer.Argument(
            metavar="APP",
            help="Target application (fuzzy match). Defaults to the best iCloud root.",
        ),
    ] = None,
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Copy directories recursively."),
    ] = False,
    pattern: Annotated[
        str | None,
        typer.Option("--pattern", "-p", help="Only copy files whose name matches this glob."),
    ] = None,
    overwrite: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite files that already exist."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be copied."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    detailed: Annotated[
        bool,
        typer.Option("--detailed", "-d", help="List every file and target path."),
    ] = False,
    output_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON."),
    ] = False,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Stop starting new work after this many seconds."),
    ] = None,
) -> None:
    """Copy files to an iCloud Drive folder."""
    config = load_cli_config()
    copier = FileCopier(get_finder(ctx, config), config.transfer)
    options = build_copy_options(
        source,
        app_name,
        pattern=pattern,
        recursive=recursive,
        overwrite=overwrite,
        dry_run=dry_run,
    )
    try:
        analysis = copier.analyze(options, deadline=_deadline(timeout))
    except CopyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not output_json:
        print_analysis(analysis, detailed=detailed)

    # Confirm unless --yes or --dry-run
    if not dry_run and not yes:
        confirmed = typer.confirm(
            f"\nCopy {analysis.total_files} file(s) to {analysis.target_paths[0].path}?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    # The prompt does not count against --timeout
    result = copier.execute(analysis, options, deadline=_deadline(timeout))

    if output_json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        if detailed or not result.success:
            console.print(create_result_table(result, dry_run=dry_run))
        _print_summary(result.copied_files, result.failed_files, dry_run, is_quiet(ctx))

    if not result.success:
        raise typer.Exit(code=1)


def _deadline(timeout: float | None) -> Deadline | None:
    return Deadline.after(timeout) if timeout is not None else None


def _print_summary(copied: list[str], failed: list[str], dry_run: bool, quiet: bool) -> None:
    """Print a one-line outcome."""
    if failed:
        print_warning(f"{len(failed)} file(s) failed, {len(copied)} copied.")
        return
    if quiet:
        return
    if dry_run:
        print_info(f"Dry run: {len(copied)} file(s) would be copied.")
    else:
        print_success(f"Copied {len(copied)} file(s).")
