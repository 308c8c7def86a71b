"""Snapshot command implementation."""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from torrentprune.cli.display import print_walk_warnings
from torrentprune.cli.types import require_config, require_walk
from torrentprune.core.snapshot import Snapshot, SnapshotError, save_snapshot
from torrentprune.utils.formatting import format_size, print_error, print_success


def snapshot(
    directory: Annotated[
        Path,
        typer.Argument(help="Directory to capture."),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Snapshot file to write."),
    ],
) -> None:
    """Save the file tree of DIRECTORY for a later diff."""
    config = require_config()
    walk = require_walk(directory, config.follow_symlinks)
    print_walk_warnings(walk.warnings)

    try:
        path = save_snapshot(Snapshot.capture(walk), output)
    except SnapshotError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(
        f"Saved snapshot of {walk.tree.file_count} file(s), "
        f"{format_size(walk.tree.total_size)} to {escape(str(path))}"
    )
