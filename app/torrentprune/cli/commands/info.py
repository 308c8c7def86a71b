"""Info command implementation.

Prints the file manifest decoded from a torrent.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from torrentprune.cli.display import create_manifest_table
from torrentprune.cli.types import OutputFormat, require_torrent
from torrentprune.utils.formatting import console, format_size


def info(
    torrent: Annotated[
        Path,
        typer.Argument(help="Path to the .torrent file."),
    ],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show the name, tracker and files declared by a torrent."""
    manifest = require_torrent(torrent)

    if output_format == OutputFormat.JSON:
        console.print_json(data=manifest.to_dict())
        return

    console.print(create_manifest_table(manifest))
    console.print(f"\n[header]Name:[/header] {escape(manifest.name)}", highlight=False)
    if manifest.announce:
        console.print(f"[header]Tracker:[/header] {escape(manifest.announce)}", highlight=False)
    console.print(
        f"[header]Pieces:[/header] {manifest.piece_count} x {format_size(manifest.piece_length)}"
    )
    console.print(
        f"[header]Total:[/header] {len(manifest.content_files)} file(s), "
        f"{format_size(manifest.total_size)}"
    )
