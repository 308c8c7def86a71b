"""Diff engine for comparing a torrent manifest with a data directory.

This module provides the DiffEngine class that compares the files a
torrent declares with the files actually stored in its directory and
decides which entries are deletion candidates under the configured
surface and empty-directory policies.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from torrentprune.filesystem.models import DirNode, FileNode

if TYPE_CHECKING:
    from torrentprune.filesystem.models import WalkResult, WalkWarning
    from torrentprune.torrent.models import TorrentManifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiffOptions:
    """Policy for selecting deletion candidates.

    Attributes:
        surface: Include undeclared files lying directly in the torrent root.
        empty_dir: Also delete directories left without files.
    """

    surface: bool = False
    empty_dir: bool = False


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Result of comparing a manifest with a walked directory.

    All paths are prefixed by the torrent name (``name/sub/file``).

    Attributes:
        name: Torrent name the paths are prefixed with.
        root: Absolute path of the walked directory standing in for ``name``.
        extraneous: Files on disk but not in the manifest (deletion candidates).
        missing: Files in the manifest but not on disk (informational).
        empty_dirs: Directories left without files (deletion candidates).
        surface_skipped: Undeclared root-level files left alone because surface is off.
        link_skipped: Undeclared files reached through a linked directory, never deleted.
        warnings: Problems recorded while walking the directory.
    """

    name: str
    root: Path
    extraneous: frozenset[PurePosixPath]
    missing: frozenset[PurePosixPath]
    empty_dirs: frozenset[PurePosixPath] = frozenset()
    surface_skipped: frozenset[PurePosixPath] = frozenset()
    link_skipped: frozenset[PurePosixPath] = frozenset()
    warnings: tuple[WalkWarning, ...] = ()

    @property
    def is_clean(self) -> bool:
        """Check if there is nothing to delete.

        Returns:
            True if there are no extraneous files and no empty directories.
        """
        return not (self.extraneous or self.empty_dirs)

    @property
    def candidate_count(self) -> int:
        """Number of entries that would be deleted."""
        return len(self.extraneous) + len(self.empty_dirs)

    def resolve(self, path: PurePosixPath) -> Path:
        """Map a name-prefixed path to its absolute location on disk.

        Args:
            path: Path of the form ``name/...``.

        Returns:
            Absolute path below the walked directory.
        """
        return self.root.joinpath(*path.parts[1:])

    def narrow(
        self,
        *,
        extraneous: Iterable[PurePosixPath] | None = None,
        empty_dirs: Iterable[PurePosixPath] | None = None,
    ) -> DiffResult:
        """Return a copy with smaller candidate sets.

        Args:
            extraneous: New extraneous set (must be a subset of the current one).
            empty_dirs: New empty directory set (must be a subset of the current one).

        Returns:
            A new DiffResult.

        Raises:
            ValueError: If a new set contains a path that is not already a candidate.
        """
        new_extraneous = self.extraneous if extraneous is None else frozenset(extraneous)
        new_empty_dirs = self.empty_dirs if empty_dirs is None else frozenset(empty_dirs)

        if not new_extraneous <= self.extraneous:
            msg = f"Cannot add extraneous files: {sorted(map(str, new_extraneous - self.extraneous))}"
            raise ValueError(msg)
        if not new_empty_dirs <= self.empty_dirs:
            msg = f"Cannot add empty directories: {sorted(map(str, new_empty_dirs - self.empty_dirs))}"
            raise ValueError(msg)

        return replace(self, extraneous=new_extraneous, empty_dirs=new_empty_dirs)

    def exclude(self, patterns: Sequence[str]) -> DiffResult:
        """Drop candidates matching any glob pattern.

        Patterns are matched against the path relative to the torrent root
        and against the entry name. Empty directories that would still hold
        an excluded entry are dropped as well.

        Args:
            patterns: fnmatch-style patterns (e.g. ``*.nfo``, ``extras/*``).

        Returns:
            A narrowed DiffResult.
        """
        if not patterns:
            return self

        kept_files = {p for p in self.extraneous if not _matches(p, patterns)}
        dropped_dirs = {d for d in self.empty_dirs if _matches(d, patterns)}
        blockers = (self.extraneous - kept_files) | dropped_dirs

        kept_dirs = {
            d
            for d in self.empty_dirs - dropped_dirs
            if not any(d in blocker.parents for blocker in blockers)
        }
        return self.narrow(extraneous=kept_files, empty_dirs=kept_dirs)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the diff result.
        """
        return {
            "name": self.name,
            "root": str(self.root),
            "clean": self.is_clean,
            "summary": {
                "extraneous": len(self.extraneous),
                "missing": len(self.missing),
                "empty_dirs": len(self.empty_dirs),
                "surface_skipped": len(self.surface_skipped),
                "link_skipped": len(self.link_skipped),
                "warnings": len(self.warnings),
            },
            "extraneous": _sorted_strings(self.extraneous),
            "missing": _sorted_strings(self.missing),
            "empty_dirs": _sorted_strings(self.empty_dirs),
            "surface_skipped": _sorted_strings(self.surface_skipped),
            "link_skipped": _sorted_strings(self.link_skipped),
            "warnings": [
                {"path": str(w.path), "kind": w.kind.value, "message": w.message}
                for w in self.warnings
            ],
        }


class DiffEngine:
    """Engine for computing differences between a manifest and a directory.

    Example:
        >>> from torrentprune.core.diff import DiffEngine, DiffOptions
        >>> manifest = load_torrent(Path("show.torrent"))
        >>> walk = DirectoryWalker().walk(Path("downloads/show"))
        >>> result = DiffEngine(DiffOptions(empty_dir=True)).diff(manifest, walk)
        >>> if result.is_clean:
        ...     print("Nothing to remove")
    """

    def __init__(self, options: DiffOptions | None = None) -> None:
        """Initialize the DiffEngine.

        Args:
            options: Candidate selection policy. Defaults to DiffOptions().
        """
        self.options = options or DiffOptions()

    def diff(self, manifest: TorrentManifest, walk: WalkResult) -> DiffResult:
        """Compare a manifest against a walked directory.

        The walked directory stands in for the torrent root, so disk paths
        are prefixed with the manifest name regardless of the directory's
        own name.

        Args:
            manifest: The torrent's file manifest.
            walk: Result of walking the torrent's data directory.

        Returns:
            DiffResult with candidate and informational sets.
        """
        name = PurePosixPath(manifest.name)
        declared = manifest.paths()
        padding = manifest.paths(include_padding=True) - declared

        on_disk: set[PurePosixPath] = set()
        behind_link: set[PurePosixPath] = set()
        _collect_files(walk.tree, name, False, on_disk, behind_link)

        missing = declared - on_disk
        undeclared = on_disk - declared - padding

        link_skipped = undeclared & behind_link
        extraneous = undeclared - link_skipped

        surface_skipped: set[PurePosixPath] = set()
        if not self.options.surface:
            surface_skipped = {p for p in extraneous if p.parent == name}
            extraneous -= surface_skipped

        empty_dirs: set[PurePosixPath] = set()
        if self.options.empty_dir:
            _collect_empty_dirs(walk.tree, name, False, extraneous, empty_dirs)

        logger.debug(
            "Diff for %s: %d extraneous, %d missing, %d empty dirs",
            manifest.name,
            len(extraneous),
            len(missing),
            len(empty_dirs),
        )

        return DiffResult(
            name=manifest.name,
            root=walk.root,
            extraneous=frozenset(extraneous),
            missing=frozenset(missing),
            empty_dirs=frozenset(empty_dirs),
            surface_skipped=frozenset(surface_skipped),
            link_skipped=frozenset(link_skipped),
            warnings=walk.warnings,
        )


def _collect_files(
    node: DirNode,
    name: PurePosixPath,
    behind_link: bool,
    on_disk: set[PurePosixPath],
    linked: set[PurePosixPath],
) -> None:
    """Gather name-prefixed file paths, noting those reached through a linked directory."""
    for child in node.children:
        if isinstance(child, FileNode):
            path = name / child.path
            on_disk.add(path)
            if behind_link:
                linked.add(path)
        else:
            _collect_files(child, name, behind_link or child.is_link, on_disk, linked)


def _collect_empty_dirs(
    node: DirNode,
    name: PurePosixPath,
    behind_link: bool,
    extraneous: set[PurePosixPath],
    empty_dirs: set[PurePosixPath],
) -> bool:
    """Find directories that hold no files once extraneous files are gone.

    Returns:
        True if node itself will be removable (empty, fully listed, not behind a link).
    """
    behind_link = behind_link or (node.is_link and bool(node.path.parts))
    removable = node.complete and not behind_link

    for child in node.children:
        if isinstance(child, FileNode):
            if name / child.path not in extraneous:
                removable = False
        elif not _collect_empty_dirs(child, name, behind_link, extraneous, empty_dirs):
            removable = False

    # The torrent root itself is never a candidate
    if removable and node.path.parts:
        empty_dirs.add(name / node.path)
    return removable


def _matches(path: PurePosixPath, patterns: Sequence[str]) -> bool:
    relative = "/".join(path.parts[1:])
    return any(
        fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(path.name, pattern)
        for pattern in patterns
    )


def _sorted_strings(paths: Iterable[PurePosixPath]) -> list[str]:
    return sorted(str(p) for p in paths)
