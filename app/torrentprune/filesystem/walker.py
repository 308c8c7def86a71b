"""Directory walker for torrent data directories.

Recursively enumerates a directory into a tree of FileNode and DirNode
entries keyed by path relative to the walk root. Problems with single
entries (permission errors, symlink cycles, broken links) are collected
as warnings next to the partial tree instead of aborting the walk.
"""

import logging
import os
import stat
from pathlib import Path, PurePosixPath

from torrentprune.filesystem.models import (
    ROOT_PATH,
    DirectoryEntry,
    DirNode,
    FileNode,
    WalkErrorKind,
    WalkResult,
    WalkWarning,
)

logger = logging.getLogger(__name__)


class WalkError(Exception):
    """Base exception for fatal directory walk errors."""


class WalkNotFoundError(WalkError):
    """Raised when the walk root does not exist."""


class WalkNotADirectoryError(WalkError):
    """Raised when the walk root is not a directory."""


class WalkPermissionError(WalkError):
    """Raised when the walk root cannot be inspected."""


class DirectoryWalker:
    """Walks a directory tree depth-first.

    Symbolic links are followed unless disabled. A link that leads back to
    a directory already on the current branch is recorded as a CYCLE
    warning and not descended into.

    Args:
        follow_symlinks: If False, symbolic links are recorded as file
            leaves (with the size of the link itself) and never followed.
    """

    def __init__(self, *, follow_symlinks: bool = True) -> None:
        self._follow_symlinks = follow_symlinks

    def walk(self, root: Path) -> WalkResult:
        """Walk a directory and build its tree.

        Args:
            root: Directory to walk.

        Returns:
            WalkResult with the tree and any recorded warnings.

        Raises:
            WalkNotFoundError: If root does not exist.
            WalkNotADirectoryError: If root exists but is not a directory.
            WalkPermissionError: If root cannot be inspected.
        """
        root = Path(root).absolute()
        try:
            mode = root.stat().st_mode
        except FileNotFoundError:
            raise WalkNotFoundError(f"Directory not found: {root}") from None
        except PermissionError:
            raise WalkPermissionError(f"Permission denied: {root}") from None
        except OSError as e:
            raise WalkError(f"Cannot access {root}: {e.strerror or e}") from e
        if not stat.S_ISDIR(mode):
            raise WalkNotADirectoryError(f"Not a directory: {root}")

        warnings: list[WalkWarning] = []
        active = {os.path.realpath(root)}
        # A linked root is the torrent root itself, not a link inside it
        tree = self._walk_directory(root, ROOT_PATH, False, active, warnings)

        logger.debug(
            "Walked %s: %d files, %d warnings", root, tree.file_count, len(warnings)
        )
        return WalkResult(root=root, tree=tree, warnings=tuple(warnings))

    def _walk_directory(
        self,
        directory: Path,
        rel: PurePosixPath,
        is_link: bool,
        active: set[str],
        warnings: list[WalkWarning],
    ) -> DirNode:
        """Build the node for one directory and everything below it.

        Args:
            directory: Absolute path of the directory.
            rel: Path relative to the walk root.
            is_link: Whether the directory was reached through a symbolic link.
            active: Canonical paths of directories on the current branch.
            warnings: Accumulator for non-fatal problems.

        Returns:
            DirNode for the directory, marked incomplete if anything was skipped.
        """
        try:
            entries = sorted(directory.iterdir())
        except PermissionError:
            self._warn(warnings, rel, WalkErrorKind.PERMISSION_DENIED, "Permission denied")
            return DirNode(path=rel, is_link=is_link, complete=False)
        except OSError as e:
            self._warn(warnings, rel, WalkErrorKind.OS_ERROR, str(e))
            return DirNode(path=rel, is_link=is_link, complete=False)

        children: list[DirectoryEntry] = []
        complete = True

        for entry in entries:
            child_rel = rel / entry.name
            try:
                child = self._visit(entry, child_rel, active, warnings)
            except PermissionError:
                self._warn(warnings, child_rel, WalkErrorKind.PERMISSION_DENIED, "Permission denied")
                child = None
            except OSError as e:
                self._warn(warnings, child_rel, WalkErrorKind.OS_ERROR, str(e))
                child = None

            if child is None:
                # Something exists here that the tree does not describe
                complete = False
                continue

            if isinstance(child, DirNode) and not child.complete:
                complete = False
            children.append(child)

        return DirNode(path=rel, children=tuple(children), is_link=is_link, complete=complete)

    def _visit(
        self,
        entry: Path,
        rel: PurePosixPath,
        active: set[str],
        warnings: list[WalkWarning],
    ) -> DirectoryEntry | None:
        """Classify a single directory entry.

        Returns:
            The node for the entry, or None if it was skipped with a warning.

        Raises:
            OSError: If the entry cannot be inspected.
        """
        is_link = entry.is_symlink()

        if is_link and not self._follow_symlinks:
            return FileNode(path=rel, size=entry.lstat().st_size, is_link=True)

        if is_link and not entry.exists():
            self._warn(warnings, rel, WalkErrorKind.BROKEN_LINK, f"Broken link to {os.readlink(entry)}")
            return None

        if entry.is_dir():
            canonical = os.path.realpath(entry)
            if canonical in active:
                self._warn(warnings, rel, WalkErrorKind.CYCLE, f"Link cycle back to {canonical}")
                return None
            active.add(canonical)
            try:
                return self._walk_directory(entry, rel, is_link, active, warnings)
            finally:
                active.discard(canonical)

        if entry.is_file():
            return FileNode(path=rel, size=entry.stat().st_size, is_link=is_link)

        self._warn(warnings, rel, WalkErrorKind.UNSUPPORTED, "Not a regular file or directory")
        return None

    @staticmethod
    def _warn(
        warnings: list[WalkWarning],
        rel: PurePosixPath,
        kind: WalkErrorKind,
        message: str,
    ) -> None:
        logger.warning("Skipping %s (%s): %s", rel, kind.value, message)
        warnings.append(WalkWarning(path=rel, kind=kind, message=message))
