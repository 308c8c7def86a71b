"""Shared types and utilities for CLI commands.

This module provides common enums and loader helpers used across
multiple CLI command modules. Loaders print a user-friendly error and
exit with code 1 on fatal errors, before anything is deleted.
"""

from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape

from torrentprune.core.config import ConfigError, PruneConfig, load_config
from torrentprune.core.diff import DiffEngine, DiffResult
from torrentprune.core.snapshot import Snapshot, SnapshotError, load_snapshot
from torrentprune.filesystem.models import WalkResult
from torrentprune.filesystem.walker import DirectoryWalker, WalkError
from torrentprune.torrent.bencode import DecodeError
from torrentprune.torrent.metainfo import ManifestError, NotMultiFileError, load_torrent
from torrentprune.torrent.models import TorrentManifest
from torrentprune.utils.formatting import print_error, print_info


class OutputFormat(str, Enum):
    """Output format options for report commands."""

    TABLE = "table"
    JSON = "json"


def require_config() -> PruneConfig:
    """Load the user configuration or exit with an error message.

    Returns:
        Loaded configuration (defaults if no config file exists).

    Raises:
        typer.Exit: If the config file is invalid.
    """
    try:
        return load_config()
    except ConfigError as e:
        print_error(f"Failed to load config: {escape(str(e))}")
        raise typer.Exit(code=1) from e


def require_torrent(path: Path) -> TorrentManifest:
    """Load a torrent manifest or exit with an error message.

    Args:
        path: Path to the .torrent file.

    Returns:
        The torrent's file manifest.

    Raises:
        typer.Exit: If the descriptor cannot be read, decoded or projected.
    """
    try:
        return load_torrent(path)
    except DecodeError as e:
        print_error(f"Failed to decode {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(code=1) from e
    except NotMultiFileError as e:
        print_error(escape(str(e)))
        print_info("Only multi-file torrents can be reconciled with a directory.")
        raise typer.Exit(code=1) from e
    except ManifestError as e:
        print_error(f"Invalid torrent {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(code=1) from e


def resolve_directory(manifest: TorrentManifest, directory: Path | None) -> Path:
    """Pick the data directory to reconcile.

    Args:
        manifest: The torrent's manifest.
        directory: Directory given on the command line, if any.

    Returns:
        The given directory, or ./<torrent name> when none was given.
    """
    if directory is not None:
        return directory
    return Path.cwd() / manifest.name


def require_walk(directory: Path, follow_symlinks: bool = True) -> WalkResult:
    """Walk a directory or exit with an error message.

    Args:
        directory: Directory to walk.
        follow_symlinks: Whether to follow symbolic links.

    Returns:
        The walk result.

    Raises:
        typer.Exit: If the directory is missing, not a directory or inaccessible.
    """
    try:
        return DirectoryWalker(follow_symlinks=follow_symlinks).walk(directory)
    except WalkError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e


def require_snapshot(path: Path, follow_symlinks: bool = True) -> Snapshot:
    """Capture a directory or load a saved snapshot file.

    Args:
        path: A directory to walk, or a JSON file written by ``snapshot``.
        follow_symlinks: Whether to follow symbolic links when walking.

    Returns:
        The snapshot for this side of the comparison.

    Raises:
        typer.Exit: If the path does not exist or the snapshot file is invalid.
    """
    try:
        is_dir = path.is_dir()
        exists = is_dir or path.exists()
    except OSError as e:
        print_error(f"Cannot access {escape(str(path))}: {escape(e.strerror or str(e))}")
        raise typer.Exit(code=1) from e

    if is_dir:
        return Snapshot.capture(require_walk(path, follow_symlinks))

    if not exists:
        print_error(f"Directory or snapshot not found: {escape(str(path))}")
        raise typer.Exit(code=1)

    try:
        return load_snapshot(path)
    except SnapshotError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e


def reconcile(
    config: PruneConfig,
    torrent: Path,
    directory: Path | None,
    *,
    surface: bool = False,
    empty_dir: bool = False,
    exclude: list[str] | None = None,
) -> DiffResult:
    """Decode a torrent, walk its directory and compute the diff.

    The torrent is fully decoded before the directory is touched.

    Args:
        config: Loaded user configuration.
        torrent: Path to the .torrent file.
        directory: Data directory, or None for ./<torrent name>.
        surface: --surface flag value.
        empty_dir: --empty-dir flag value.
        exclude: Extra exclude patterns from the command line.

    Returns:
        DiffResult with excluded candidates removed.

    Raises:
        typer.Exit: On any fatal error.
    """
    manifest = require_torrent(torrent)
    walk = require_walk(resolve_directory(manifest, directory), config.follow_symlinks)
    engine = DiffEngine(config.diff_options(surface=surface, empty_dir=empty_dir))
    result = engine.diff(manifest, walk)
    return result.exclude([*config.exclude, *(exclude or [])])
