"""Directory snapshots and snapshot comparison.

This module captures walked directory trees as snapshots, persists them
as JSON, and compares two trees to report added, removed and resized
files. Comparison is read-only and never deletes anything.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from tempfile import NamedTemporaryFile
from typing import Any

from torrentprune.filesystem.models import ROOT_PATH, DirectoryEntry, DirNode, FileNode, WalkResult

logger = logging.getLogger(__name__)

# Bumped when the JSON layout changes incompatibly
SNAPSHOT_FORMAT_VERSION = 1


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read, parsed or written."""


@dataclass(frozen=True, slots=True)
class Snapshot:
    """A directory tree tagged with where and when it was captured.

    Attributes:
        source: Directory the tree was walked from.
        tree: Root directory node.
        created: ISO 8601 capture timestamp.
    """

    source: str
    tree: DirNode
    created: str

    @classmethod
    def capture(cls, walk: WalkResult) -> Snapshot:
        """Create a snapshot from a walk result.

        Args:
            walk: Result of walking a directory.

        Returns:
            Snapshot stamped with the current time.
        """
        return cls(source=str(walk.root), tree=walk.tree, created=datetime.now(UTC).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "version": SNAPSHOT_FORMAT_VERSION,
            "source": self.source,
            "created": self.created,
            "tree": _node_to_dict(self.tree),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Deserialize from dictionary.

        Args:
            data: Dictionary produced by to_dict().

        Returns:
            Snapshot instance.

        Raises:
            SnapshotError: If the layout is unsupported or malformed.
        """
        version = data.get("version")
        if version != SNAPSHOT_FORMAT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version!r}")

        try:
            tree = _node_from_dict(data["tree"])
            source = str(data["source"])
            created = str(data["created"])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Malformed snapshot: {e}") from e

        if not isinstance(tree, DirNode) or tree.path != ROOT_PATH:
            raise SnapshotError("Malformed snapshot: tree root must be a directory")
        return cls(source=source, tree=tree, created=created)


def save_snapshot(snapshot: Snapshot, path: Path) -> Path:
    """Save a snapshot to a JSON file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace().

    Args:
        snapshot: The snapshot to save.
        path: Destination file.

    Returns:
        Path where the snapshot was saved.

    Raises:
        SnapshotError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            json.dump(snapshot.to_dict(), f, indent=2)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SnapshotError(f"Failed to write snapshot: {e}") from e

    logger.debug("Saved snapshot of %s to %s", snapshot.source, path)
    return path


def load_snapshot(path: Path) -> Snapshot:
    """Load a snapshot from a JSON file.

    Args:
        path: Snapshot file written by save_snapshot().

    Returns:
        The loaded snapshot.

    Raises:
        SnapshotError: If the file is missing, unreadable or malformed.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in snapshot {path}: {e}") from e
    except OSError as e:
        raise SnapshotError(f"Failed to read snapshot {path}: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"Malformed snapshot {path}: expected a JSON object")
    return Snapshot.from_dict(data)


@dataclass(frozen=True, slots=True)
class ResizedFile:
    """A file present in both trees with a different size.

    Attributes:
        path: Path relative to the tree root.
        old_size: Size in the before tree.
        new_size: Size in the after tree.
    """

    path: PurePosixPath
    old_size: int
    new_size: int


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Structural changes between two directory trees.

    Attributes:
        added: Files only in the after tree.
        removed: Files only in the before tree.
        resized: Files in both trees whose size changed.
        new_dirs: Top-most directories only in the after tree.
        emptied_dirs: Top-most directories that held files before and hold none after.
    """

    added: tuple[PurePosixPath, ...] = ()
    removed: tuple[PurePosixPath, ...] = ()
    resized: tuple[ResizedFile, ...] = ()
    new_dirs: tuple[PurePosixPath, ...] = ()
    emptied_dirs: tuple[PurePosixPath, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Check if the trees hold the same files with the same sizes."""
        return not (self.added or self.removed or self.resized)

    @property
    def total_changes(self) -> int:
        """Number of changed files."""
        return len(self.added) + len(self.removed) + len(self.resized)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "unchanged": self.is_empty,
            "summary": {
                "added": len(self.added),
                "removed": len(self.removed),
                "resized": len(self.resized),
                "total": self.total_changes,
            },
            "added": [str(p) for p in self.added],
            "removed": [str(p) for p in self.removed],
            "resized": [
                {"path": str(r.path), "old_size": r.old_size, "new_size": r.new_size}
                for r in self.resized
            ],
            "new_dirs": [str(p) for p in self.new_dirs],
            "emptied_dirs": [str(p) for p in self.emptied_dirs],
        }


class SnapshotDiffEngine:
    """Compares two directory trees by relative file path."""

    def compare(self, before: DirNode, after: DirNode) -> ChangeSet:
        """Compare two trees.

        Args:
            before: Earlier tree.
            after: Later tree.

        Returns:
            ChangeSet with every collection sorted by path.
        """
        before_files = {node.path: node.size for node in before.iter_files()}
        after_files = {node.path: node.size for node in after.iter_files()}

        added = after_files.keys() - before_files.keys()
        removed = before_files.keys() - after_files.keys()
        resized = [
            ResizedFile(path=path, old_size=before_files[path], new_size=after_files[path])
            for path in sorted(before_files.keys() & after_files.keys())
            if before_files[path] != after_files[path]
        ]

        before_dirs = {node.path for node in before.iter_dirs()}
        after_dirs = {node.path for node in after.iter_dirs()}
        new_dirs = after_dirs - before_dirs

        before_counts = _file_counts(before)
        after_counts = _file_counts(after)
        emptied = {
            d for d, count in before_counts.items() if count and not after_counts.get(d, 0)
        }

        return ChangeSet(
            added=tuple(sorted(added)),
            removed=tuple(sorted(removed)),
            resized=tuple(resized),
            new_dirs=_top_most(new_dirs),
            emptied_dirs=_top_most(emptied),
        )


def _file_counts(tree: DirNode) -> dict[PurePosixPath, int]:
    """Count files below each directory (the root excluded)."""
    counts = {node.path: 0 for node in tree.iter_dirs()}
    for node in tree.iter_files():
        for parent in node.path.parents:
            if parent in counts:
                counts[parent] += 1
    return counts


def _top_most(paths: Iterable[PurePosixPath]) -> tuple[PurePosixPath, ...]:
    path_set = set(paths)
    return tuple(sorted(p for p in path_set if not any(a in path_set for a in p.parents)))


def _node_to_dict(node: DirectoryEntry) -> dict[str, Any]:
    if isinstance(node, FileNode):
        return {"type": "file", "path": str(node.path), "size": node.size, "is_link": node.is_link}
    return {
        "type": "dir",
        "path": str(node.path),
        "is_link": node.is_link,
        "complete": node.complete,
        "children": [_node_to_dict(child) for child in node.children],
    }


def _node_from_dict(data: dict[str, Any]) -> DirectoryEntry:
    node_type = data["type"]
    path = PurePosixPath(data["path"])
    if path.is_absolute() or ".." in path.parts:
        raise ValueError(f"path must be relative: {path}")

    if node_type == "file":
        size = int(data["size"])
        if size < 0:
            raise ValueError(f"negative size for {path}")
        return FileNode(path=path, size=size, is_link=bool(data.get("is_link", False)))
    if node_type == "dir":
        return DirNode(
            path=path,
            children=tuple(_node_from_dict(child) for child in data["children"]),
            is_link=bool(data.get("is_link", False)),
            complete=bool(data.get("complete", True)),
        )
    raise ValueError(f"unknown node type {node_type!r}")
