"""Check command implementation.

Reports how a data directory differs from its torrent without deleting.
"""

from pathlib import Path
from typing import Annotated

import typer

from torrentprune.cli.display import (
    create_report_table,
    print_report_summary,
    print_walk_warnings,
)
from torrentprune.cli.types import OutputFormat, reconcile, require_config
from torrentprune.utils.formatting import console


def check(
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
        typer.Option("--surface", "-s", help="Count undeclared root-level files as extraneous."),
    ] = False,
    empty_dir: Annotated[
        bool,
        typer.Option("--empty-dir", "-d", help="Report directories left without files."),
    ] = False,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Glob pattern of paths to keep (repeatable)."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show extraneous, missing and empty entries without deleting anything."""
    config = require_config()
    result = reconcile(
        config,
        torrent,
        directory,
        surface=surface,
        empty_dir=empty_dir,
        exclude=exclude,
    )

    if output_format == OutputFormat.JSON:
        console.print_json(data=result.to_dict())
        return

    print_walk_warnings(result.warnings)
    if result.extraneous or result.empty_dirs or result.missing or result.surface_skipped or result.link_skipped:
        console.print(create_report_table(result))
    print_report_summary(result)
