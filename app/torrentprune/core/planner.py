"""Deletion planning.

Turns the candidate sets of a DiffResult into an ordered list of delete
operations: every file first, then directories deepest-first, so a
directory is only removed after everything below it is gone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from torrentprune.core.diff import DiffResult


class DeleteKind(str, Enum):
    """Type of entry a delete operation removes."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class DeleteOperation:
    """A single planned deletion.

    Attributes:
        path: Name-prefixed path used for display (``name/sub/file``).
        target: Absolute filesystem path to delete.
        kind: Whether the entry is a file or a directory.
    """

    path: PurePosixPath
    target: Path
    kind: DeleteKind

    @property
    def depth(self) -> int:
        """Number of path segments below the filesystem root."""
        return len(self.path.parts)


@dataclass(frozen=True, slots=True)
class DeletionPlan:
    """Ordered sequence of delete operations.

    Attributes:
        operations: Operations in execution order.
    """

    operations: tuple[DeleteOperation, ...] = ()

    def __iter__(self) -> Iterator[DeleteOperation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def files(self) -> tuple[DeleteOperation, ...]:
        """File operations in plan order."""
        return tuple(op for op in self.operations if op.kind == DeleteKind.FILE)

    @property
    def directories(self) -> tuple[DeleteOperation, ...]:
        """Directory operations in plan order."""
        return tuple(op for op in self.operations if op.kind == DeleteKind.DIRECTORY)


def plan(result: DiffResult) -> DeletionPlan:
    """Build the deletion plan for a diff result.

    Files come first, sorted by path. Directories follow, sorted by
    descending depth and then by path, so children always precede their
    parents.

    Args:
        result: Diff result whose candidate sets should be deleted.

    Returns:
        DeletionPlan covering every extraneous file and empty directory.
    """
    files = [
        DeleteOperation(path=p, target=result.resolve(p), kind=DeleteKind.FILE)
        for p in sorted(result.extraneous)
    ]
    directories = [
        DeleteOperation(path=p, target=result.resolve(p), kind=DeleteKind.DIRECTORY)
        for p in sorted(result.empty_dirs, key=lambda d: (-len(d.parts), d))
    ]
    return DeletionPlan(operations=(*files, *directories))
