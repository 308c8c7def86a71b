"""Diff command implementation.

Compares two states of a directory, each given as a live directory or
a snapshot file saved by the snapshot command.
"""

from pathlib import Path
from typing import Annotated

import typer

from torrentprune.cli.display import create_changes_table
from torrentprune.cli.types import OutputFormat, require_config, require_snapshot
from torrentprune.core.snapshot import SnapshotDiffEngine
from torrentprune.utils.formatting import console, print_success


def diff(
    before: Annotated[
        Path,
        typer.Argument(help="Earlier state: a directory or a snapshot JSON file."),
    ],
    after: Annotated[
        Path,
        typer.Argument(help="Later state: a directory or a snapshot JSON file."),
    ],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show files added, removed or resized between two directory states."""
    config = require_config()
    old = require_snapshot(before, config.follow_symlinks)
    new = require_snapshot(after, config.follow_symlinks)

    changes = SnapshotDiffEngine().compare(old.tree, new.tree)

    if output_format == OutputFormat.JSON:
        console.print_json(data=changes.to_dict())
        return

    if changes.is_empty:
        print_success("No differences.")
        return

    console.print(create_changes_table(changes))
    console.print(f"\nTotal: {changes.total_changes} change(s)")
