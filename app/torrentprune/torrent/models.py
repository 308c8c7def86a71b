"""Torrent manifest models.

This module defines the data structures projected from a decoded
multi-file torrent descriptor: the torrent-wide manifest and the
individual file entries it declares.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath

# Path segments that would escape or alias the torrent root directory
_FORBIDDEN_SEGMENTS: frozenset[str] = frozenset({"", ".", ".."})


def is_valid_segment(segment: str) -> bool:
    """Check whether a single path segment is safe to join under a root.

    Args:
        segment: One path component from the manifest.

    Returns:
        True if the segment is non-empty, not '.' or '..', and has no separator.
    """
    if segment in _FORBIDDEN_SEGMENTS:
        return False
    return "/" not in segment and "\\" not in segment and "\x00" not in segment


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A single file declared in a torrent's file list.

    Attributes:
        path: Path segments relative to the torrent root directory.
        length: File size in bytes.
        padding: Whether this is a BEP 47 padding file rather than real content.
    """

    path: tuple[str, ...]
    length: int
    padding: bool = False

    def __post_init__(self) -> None:
        """Validate file entry data after initialization."""
        if not self.path:
            msg = "File path cannot be empty"
            raise ValueError(msg)
        for segment in self.path:
            if not is_valid_segment(segment):
                msg = f"Invalid path segment {segment!r} in {'/'.join(self.path)}"
                raise ValueError(msg)
        if self.length < 0:
            msg = f"File length cannot be negative, got {self.length}"
            raise ValueError(msg)

    @property
    def relative_path(self) -> PurePosixPath:
        """Path relative to the torrent root directory."""
        return PurePosixPath(*self.path)


@dataclass(frozen=True, slots=True)
class TorrentManifest:
    """File manifest of a multi-file torrent.

    Attributes:
        name: Name of the torrent root directory.
        files: File entries in declaration order.
        announce: Tracker announce URL, if the descriptor has one.
        piece_length: Number of bytes per piece.
        piece_count: Number of piece hashes in the descriptor.
    """

    name: str
    files: tuple[FileEntry, ...]
    announce: str | None = None
    piece_length: int = 0
    piece_count: int = 0

    def __post_init__(self) -> None:
        """Validate manifest data after initialization."""
        if not is_valid_segment(self.name):
            msg = f"Invalid torrent name {self.name!r}"
            raise ValueError(msg)

    @property
    def content_files(self) -> tuple[FileEntry, ...]:
        """File entries excluding padding files."""
        return tuple(entry for entry in self.files if not entry.padding)

    @property
    def total_size(self) -> int:
        """Total size of all non-padding files in bytes."""
        return sum(entry.length for entry in self.content_files)

    def paths(self, include_padding: bool = False) -> set[PurePosixPath]:
        """Build the set of declared file paths prefixed by the torrent name.

        Args:
            include_padding: If True, also include padding file paths.

        Returns:
            Set of paths of the form ``name/segment/...``.
        """
        entries = self.files if include_padding else self.content_files
        return {PurePosixPath(self.name, *entry.path) for entry in entries}

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "announce": self.announce,
            "piece_length": self.piece_length,
            "piece_count": self.piece_count,
            "total_size": self.total_size,
            "files": [
                {"path": str(entry.relative_path), "length": entry.length, "padding": entry.padding}
                for entry in self.files
            ],
        }
