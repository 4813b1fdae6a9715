"""Shared Rich display functions for paths and copy results.

Provides table builders and summary printers used by the find and
copy commands.
"""

from rich.markup import escape
from rich.table import Table

from icloudy.models.path_info import PathInfo, PathType
from icloudy.models.transfer import CopyResult, FileAnalysis
from icloudy.utils.formatting import console, create_paths_table, format_score, format_size


def _describe_app(info: PathInfo) -> str:
    metadata = info.metadata
    if metadata.app_name and metadata.bundle_id:
        return f"{metadata.app_name} [muted]({metadata.bundle_id})[/muted]"
    return metadata.app_name or ""


def build_paths_table(paths: list[PathInfo], title: str = "iCloud Drive Paths") -> Table:
    """Create a Rich table listing discovered paths.

    Args:
        paths: Paths to display, in display order.
        title: Table title.

    Returns:
        Populated Rich Table.
    """
    table = create_paths_table(title)
    for index, info in enumerate(paths, start=1):
        marker = "[success]✓[/success]" if info.is_accessible else "[error]✗[/error]"
        path_style = "path_root" if info.type == PathType.ROOT else "path_app"
        table.add_row(
            str(index),
            marker,
            f"[{path_style}]{escape(info.path)}[/{path_style}]",
            info.type.value,
            format_score(info.score),
            _describe_app(info),
        )
    return table


def print_path_details(info: PathInfo) -> None:
    """Print provenance and evaluation facts for a single path."""
    metadata = info.metadata
    console.print(f"\n[bold_header]{escape(info.path)}[/bold_header]")
    console.print(f"  Score: {format_score(info.score)}  Type: {info.type.value}")
    console.print(f"  Exists: {info.exists}  Accessible: {info.is_accessible}")
    if metadata.app_id:
        console.print(f"  App ID: {metadata.app_id}")
    if metadata.vendor:
        console.print(f"  Vendor: {metadata.vendor}")
    if metadata.has_icloud_markers:
        console.print("  [info]Contains iCloud markers[/info]")
    for source in metadata.sources:
        params = ", ".join(f"{k}={v}" for k, v in sorted(source.params.items()))
        suffix = f" [muted]({params})[/muted]" if params else ""
        console.print(f"  Source: {source.kind.value}{suffix}")


def print_paths_summary(paths: list[PathInfo]) -> None:
    """Print the total / accessible / inaccessible counts."""
    accessible = sum(1 for info in paths if info.is_accessible)
    console.print(
        f"\n[dim]Found {len(paths)} path(s): {accessible} accessible, "
        f"{len(paths) - accessible} inaccessible[/dim]"
    )


def print_analysis(analysis: FileAnalysis, *, detailed: bool = False) -> None:
    """Print the copy plan produced by FileCopier.analyze().

    Args:
        analysis: Copy plan.
        detailed: Also list every file and every candidate target.
    """
    console.print("\n[bold_header]Copy Plan[/bold_header]")
    console.print(f"  Source: {escape(analysis.source)}")
    console.print(f"  Target: [path_root]{escape(analysis.target_paths[0].path)}[/path_root]")
    if len(analysis.target_paths) > 1:
        console.print(f"  [muted]+ {len(analysis.target_paths) - 1} more target(s)[/muted]")
    console.print(f"  Files: {analysis.total_files} ({format_size(analysis.total_size)})")

    if detailed:
        console.print(build_paths_table(analysis.target_paths, title="Target Paths"))
        for path in analysis.files_to_copy:
            console.print(f"  [muted]{escape(path)}[/muted]")


def create_result_table(result: CopyResult, *, dry_run: bool = False) -> Table:
    """Create a Rich table listing per-file copy outcomes.

    Args:
        result: Copy outcome.
        dry_run: Whether this was a dry-run (changes title and status text).

    Returns:
        Populated Rich Table.
    """
    title = "Copy Results (Dry Run)" if dry_run else "Copy Results"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=10, justify="center")
    table.add_column("File", overflow="fold")
    table.add_column("Error", style="muted")

    ok_text = "[info]would copy[/info]" if dry_run else "[success]copied[/success]"
    for path in result.copied_files:
        table.add_row(ok_text, escape(path), "")
    for path, error in zip(result.failed_files, result.errors, strict=True):
        table.add_row("[error]failed[/error]", escape(path), escape(error))
    return table
