"""Clean command implementation.

Deletes files a torrent no longer references from its data directory.
"""

from pathlib import Path
from typing import Annotated

import typer

from torrentprune.cli.display import (
    create_plan_table,
    create_results_table,
    print_execution_summary,
    print_report_summary,
    print_walk_warnings,
)
from torrentprune.cli.types import reconcile, require_config
from torrentprune.core.planner import plan
from torrentprune.filesystem.operator import FilesystemOperator
from torrentprune.utils.formatting import console, print_info, print_success


def clean(
    torrent: Annotated[
        Path,
        typer.Argument(help="Path to the .torrent file."),
    ],
    directory: Annotated[
        Path | None,
        typer.Argument(help="Torrent data directory [default: ./<torrent name>]."),
    ] = None,
    surface: Annotated[
        bool,
        typer.Option("--surface", "-s", help="Also delete undeclared files in the torrent root."),
    ] = False,
    empty_dir: Annotated[
        bool,
        typer.Option("--empty-dir", "-d", help="Also delete directories left without files."),
    ] = False,
    no_confirm: Annotated[
        bool,
        typer.Option("--no-confirm", "-y", help="Skip confirmation prompt."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted without deleting."),
    ] = False,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Glob pattern of paths to keep (repeatable)."),
    ] = None,
) -> None:
    """Delete files in DIRECTORY that the torrent does not declare.

    Files listed in the torrent are never touched. Missing files are
    reported but not fetched.
    """
    config = require_config()
    result = reconcile(
        config,
        torrent,
        directory,
        surface=surface,
        empty_dir=empty_dir,
        exclude=exclude,
    )

    print_walk_warnings(result.warnings)
    if result.missing:
        print_info(f"{len(result.missing)} declared file(s) are missing from disk.")

    if result.is_clean:
        print_success("Nothing to delete. Directory matches the torrent.")
        return

    deletion_plan = plan(result)
    console.print(create_plan_table(deletion_plan, dry_run=dry_run))
    print_report_summary(result)

    if not dry_run and config.confirm and not no_confirm:
        confirmed = typer.confirm(
            f"\nDelete {len(deletion_plan)} path(s) from {result.root}?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            return

    report = FilesystemOperator(dry_run=dry_run).execute(deletion_plan)
    console.print(create_results_table(report))
    print_execution_summary(report)

    if report.has_failures:
        raise typer.Exit(code=1)
