"""Shared Rich display functions for reports, plans and results.

Provides reusable table builders and summary printers used by the
reconciliation, manifest and snapshot commands.
"""

from rich.markup import escape
from rich.table import Table

from torrentprune.core.diff import DiffResult
from torrentprune.core.planner import DeleteKind, DeletionPlan
from torrentprune.core.snapshot import ChangeSet
from torrentprune.filesystem.models import WalkWarning
from torrentprune.filesystem.operator import ActionOutcome, ExecutionReport
from torrentprune.torrent.models import TorrentManifest
from torrentprune.utils.formatting import (
    console,
    create_table,
    format_size,
    print_info,
    print_success,
    print_warning,
)


def create_report_table(result: DiffResult) -> Table:
    """Create a table listing every difference between torrent and directory.

    Args:
        result: The diff result to display.

    Returns:
        Rich Table with one row per path.
    """
    table = create_table(f"Differences for {escape(result.name)}")
    table.add_column("Status", width=6, justify="center")
    table.add_column("Path", no_wrap=True)
    table.add_column("Note")

    rows: list[tuple[str, str, str]] = [
        *(("[extraneous][x][/]", str(p), "Not in torrent") for p in result.extraneous),
        *(("[empty_dir][x][/]", f"{p}/", "Empty directory") for p in result.empty_dirs),
        *(("[missing][-][/]", str(p), "Missing from disk") for p in result.missing),
        *(("[muted][~][/]", str(p), "Root-level file kept (use --surface)") for p in result.surface_skipped),
        *(("[muted][~][/]", str(p), "Behind a symbolic link, kept") for p in result.link_skipped),
    ]
    for status, path, note in sorted(rows, key=lambda row: row[1]):
        table.add_row(status, escape(path), f"[muted]{note}[/muted]")

    return table


def print_report_summary(result: DiffResult) -> None:
    """Print the summary line for a diff result.

    Args:
        result: The diff result to summarize.
    """
    parts: list[str] = []
    if result.extraneous:
        parts.append(f"[extraneous]{len(result.extraneous)} extraneous[/extraneous]")
    if result.empty_dirs:
        parts.append(f"[empty_dir]{len(result.empty_dirs)} empty directories[/empty_dir]")
    if result.missing:
        parts.append(f"[missing]{len(result.missing)} missing[/missing]")
    if result.surface_skipped:
        parts.append(f"[muted]{len(result.surface_skipped)} root-level kept[/muted]")
    if result.link_skipped:
        parts.append(f"[muted]{len(result.link_skipped)} behind links kept[/muted]")

    if parts:
        console.print(f"\nSummary: {', '.join(parts)}")
    else:
        console.print("\n[muted]Directory matches the torrent.[/muted]")


def print_walk_warnings(warnings: tuple[WalkWarning, ...]) -> None:
    """Print one warning line per entry the walker had to skip.

    Args:
        warnings: Warnings recorded during the walk.
    """
    for warning in warnings:
        print_warning(f"Skipped {escape(str(warning.path))} ({warning.kind.value}): {escape(warning.message)}")


def create_plan_table(plan: DeletionPlan, dry_run: bool = False) -> Table:
    """Create a table displaying planned deletions in execution order.

    Args:
        plan: The deletion plan.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for plan display.
    """
    title = "Planned Deletions (Dry Run)" if dry_run else "Planned Deletions"
    table = create_table(title)
    table.add_column("#", justify="right", style="muted")
    table.add_column("Type", width=9)
    table.add_column("Path", no_wrap=True)

    for index, operation in enumerate(plan, start=1):
        style = "extraneous" if operation.kind == DeleteKind.FILE else "empty_dir"
        table.add_row(
            str(index),
            f"[{style}]{operation.kind.value}[/{style}]",
            escape(str(operation.path)),
        )

    return table


def create_results_table(report: ExecutionReport) -> Table:
    """Create a table displaying deletion results.

    Args:
        report: The execution report.

    Returns:
        Rich Table configured for results display.
    """
    table = create_table("Deletion Results")
    table.add_column("Status", width=10)
    table.add_column("Path", no_wrap=True)
    table.add_column("Details", style="dim")

    for r in report.results:
        if r.outcome == ActionOutcome.DRY_RUN:
            status = "[info]dry-run[/]"
            detail = "Would delete"
        elif r.outcome == ActionOutcome.SUCCESS:
            status = "[success]deleted[/]"
            detail = ""
        else:
            status = "[error]failed[/]"
            detail = f"{r.outcome.value}: {r.error or 'Unknown error'}"
        table.add_row(status, escape(str(r.operation.path)), escape(detail))

    return table


def print_execution_summary(report: ExecutionReport) -> None:
    """Print the summary line for an execution report.

    Args:
        report: The execution report to summarize.
    """
    dry_count = sum(1 for r in report.results if r.dry_run)
    success_count = len(report.succeeded)
    fail_count = len(report.failed)

    if dry_count:
        print_info(f"Dry-run: {dry_count} path(s) would be deleted.")
    elif fail_count:
        print_warning(f"{success_count} deleted, {fail_count} failed")
    else:
        print_success(f"All {success_count} path(s) deleted successfully.")


def create_manifest_table(manifest: TorrentManifest) -> Table:
    """Create a table listing the files a torrent declares.

    Args:
        manifest: The torrent manifest.

    Returns:
        Rich Table with one row per file entry.
    """
    table = create_table(f"Files in {escape(manifest.name)}")
    table.add_column("Path", no_wrap=True)
    table.add_column("Size", justify="right", style="info")
    table.add_column("Note", style="muted")

    for entry in manifest.files:
        note = "padding" if entry.padding else ""
        table.add_row(escape(str(entry.relative_path)), format_size(entry.length), note)

    return table


def create_changes_table(changes: ChangeSet) -> Table:
    """Create a table displaying snapshot changes.

    Args:
        changes: The change set to display.

    Returns:
        Rich Table with added, removed and resized files.
    """
    table = create_table("Directory Changes")
    table.add_column("Status", width=6, justify="center")
    table.add_column("Path", no_wrap=True)
    table.add_column("Note")

    rows: list[tuple[str, str, str]] = [
        *(("[added][+][/]", str(p), "Added") for p in changes.added),
        *(("[removed][-][/]", str(p), "Removed") for p in changes.removed),
        *(
            (
                "[resized][~][/]",
                str(r.path),
                f"{format_size(r.old_size)} -> {format_size(r.new_size)}",
            )
            for r in changes.resized
        ),
        *(("[added][+][/]", f"{p}/", "New directory") for p in changes.new_dirs),
        *(("[removed][-][/]", f"{p}/", "Emptied directory") for p in changes.emptied_dirs),
    ]
    for status, path, note in sorted(rows, key=lambda row: row[1]):
        table.add_row(status, escape(path), f"[muted]{escape(note)}[/muted]")

    return table
