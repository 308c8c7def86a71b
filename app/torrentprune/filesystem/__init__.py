"""Filesystem walking and deletion module.

This module provides the directory walker producing comparable trees,
the tree models, and the operator that executes deletion plans.
"""

from torrentprune.filesystem.models import (
    DirectoryEntry,
    DirNode,
    FileNode,
    WalkErrorKind,
    WalkResult,
    WalkWarning,
)
from torrentprune.filesystem.operator import (
    ActionOutcome,
    ActionResult,
    ExecutionReport,
    FilesystemOperator,
)
from torrentprune.filesystem.walker import (
    DirectoryWalker,
    WalkError,
    WalkNotADirectoryError,
    WalkNotFoundError,
    WalkPermissionError,
)

__all__ = [
    "ActionOutcome",
    "ActionResult",
    "DirNode",
    "DirectoryEntry",
    "DirectoryWalker",
    "ExecutionReport",
    "FileNode",
    "FilesystemOperator",
    "WalkError",
    "WalkErrorKind",
    "WalkNotADirectoryError",
    "WalkNotFoundError",
    "WalkPermissionError",
    "WalkResult",
    "WalkWarning",
]
