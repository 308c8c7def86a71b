"""Filesystem domain models for directory walking.

This module defines the tree produced by walking a directory: file and
directory nodes keyed by their path relative to the walk root, plus the
non-fatal warnings collected while walking.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

# Relative path of the walk root itself
ROOT_PATH = PurePosixPath(".")


class WalkErrorKind(str, Enum):
    """Kind of problem recorded for a single entry during a walk.

    Attributes:
        PERMISSION_DENIED: Entry could not be read or listed.
        CYCLE: Symbolic link leads back to a directory already on the current branch.
        BROKEN_LINK: Symbolic link whose target does not exist.
        UNSUPPORTED: Entry is neither a regular file nor a directory (socket, FIFO, device).
        OS_ERROR: Any other operating system error for this entry.
    """

    PERMISSION_DENIED = "permission_denied"
    CYCLE = "cycle"
    BROKEN_LINK = "broken_link"
    UNSUPPORTED = "unsupported"
    OS_ERROR = "os_error"


@dataclass(frozen=True, slots=True)
class WalkWarning:
    """A non-fatal problem encountered while walking.

    Attributes:
        path: Path relative to the walk root.
        kind: Classification of the problem.
        message: Human-readable description.
    """

    path: PurePosixPath
    kind: WalkErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class FileNode:
    """A regular file found during a walk.

    Attributes:
        path: Path relative to the walk root.
        size: Size in bytes.
        is_link: Whether the entry itself is a symbolic link to a file.
    """

    path: PurePosixPath
    size: int
    is_link: bool = False


@dataclass(frozen=True, slots=True)
class DirNode:
    """A directory found during a walk.

    Attributes:
        path: Path relative to the walk root ('.' for the root).
        children: Child nodes sorted by name.
        is_link: Whether the entry itself is a symbolic link to a directory.
        complete: False if this directory or a descendant could not be fully listed.
    """

    path: PurePosixPath
    children: tuple["DirectoryEntry", ...] = ()
    is_link: bool = False
    complete: bool = True

    def iter_files(self) -> Iterator[FileNode]:
        """Yield every file node in this subtree, depth-first."""
        for child in self.children:
            if isinstance(child, FileNode):
                yield child
            else:
                yield from child.iter_files()

    def iter_dirs(self) -> Iterator["DirNode"]:
        """Yield every directory node below this one, depth-first (parents first)."""
        for child in self.children:
            if isinstance(child, DirNode):
                yield child
                yield from child.iter_dirs()

    @property
    def file_count(self) -> int:
        """Number of files in this subtree."""
        return sum(1 for _ in self.iter_files())

    @property
    def total_size(self) -> int:
        """Sum of file sizes in this subtree."""
        return sum(node.size for node in self.iter_files())


DirectoryEntry = FileNode | DirNode


@dataclass(frozen=True, slots=True)
class WalkResult:
    """Partial-failure tolerant result of walking a directory.

    Attributes:
        root: Absolute path of the walked directory.
        tree: Root directory node.
        warnings: Problems recorded for individual entries.
    """

    root: Path
    tree: DirNode
    warnings: tuple[WalkWarning, ...] = ()

    @property
    def is_complete(self) -> bool:
        """Check if every entry could be read.

        Returns:
            True if no warnings were recorded.
        """
        return not self.warnings
