"""Torrent descriptor loading and manifest projection.

This module reads a torrent descriptor from disk, decodes it and projects
the ``info`` section of a multi-file torrent into a TorrentManifest.
Single-file torrents are rejected since there is no directory to reconcile.
"""

import logging
from pathlib import Path

from torrentprune.torrent.bencode import (
    BencodeBytes,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeValue,
    decode,
)
from torrentprune.torrent.models import FileEntry, TorrentManifest, is_valid_segment

logger = logging.getLogger(__name__)

# Size of one SHA-1 piece hash in the "pieces" string
PIECE_HASH_LENGTH = 20

# Legacy padding entries that predate the BEP 47 "attr" key
_LEGACY_PADDING_PREFIX = "_____padding_file_"


class ManifestError(Exception):
    """Base exception for torrent manifest errors."""


class NotMultiFileError(ManifestError):
    """Raised when the descriptor describes a single-file torrent."""


class MissingFieldError(ManifestError):
    """Raised when a required key is absent.

    Attributes:
        field: Name of the missing key.
    """

    def __init__(self, field: str, context: str) -> None:
        super().__init__(f'Key "{field}" is missing in "{context}"')
        self.field = field


class InvalidPathError(ManifestError):
    """Raised when a file path or name is not valid UTF-8 or not a safe relative path."""


class InvalidFieldError(ManifestError):
    """Raised when a key holds a value of the wrong type or an invalid value."""


def load_torrent(path: Path) -> TorrentManifest:
    """Read, decode and project a torrent descriptor file.

    Args:
        path: Path to the .torrent file.

    Returns:
        The torrent's file manifest.

    Raises:
        ManifestError: If the file cannot be read or is not a valid multi-file torrent.
        DecodeError: If the file is not valid bencode.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ManifestError(f"Failed to read torrent file {path}: {e}") from e

    logger.debug("Decoding %d bytes from %s", len(data), path)
    return project_manifest(decode(data))


def project_manifest(root: BencodeValue) -> TorrentManifest:
    """Project a decoded descriptor into a multi-file manifest.

    Args:
        root: Decoded top-level value of the descriptor.

    Returns:
        TorrentManifest with files in declaration order.

    Raises:
        NotMultiFileError: If ``info`` has no ``files`` list.
        MissingFieldError: If a required key is missing.
        InvalidPathError: If a name or path segment is invalid.
        InvalidFieldError: If a key has the wrong type or an invalid value.
    """
    if not isinstance(root, BencodeDict):
        raise InvalidFieldError("Descriptor must be a dictionary")

    announce: str | None = None
    announce_value = root.get(b"announce")
    if announce_value is not None:
        announce = _text(_expect_bytes(announce_value, "announce"), "announce")

    info = _expect_dict(_require(root, b"info", "metainfo"), "info")

    name = _read_name(info)

    files_value = info.get(b"files")
    if files_value is None:
        if b"length" in info:
            raise NotMultiFileError(f'Torrent "{name}" is a single-file torrent')
        raise NotMultiFileError(f'Torrent "{name}" has no "files" list')

    piece_length = _expect_int(_require(info, b"piece length", "info"), "piece length")
    if piece_length <= 0:
        raise InvalidFieldError(f'Value "info"."piece length" must be positive, got {piece_length}')

    pieces = _expect_bytes(_require(info, b"pieces", "info"), "pieces")
    if not pieces or len(pieces) % PIECE_HASH_LENGTH != 0:
        raise InvalidFieldError(
            f'Value "info"."pieces" length {len(pieces)} is not a non-zero '
            f"multiple of {PIECE_HASH_LENGTH}"
        )

    files_list = _expect_list(files_value, "files")
    if not files_list:
        raise InvalidFieldError('Value "info"."files" is empty')

    files: list[FileEntry] = []
    seen: set[tuple[str, ...]] = set()
    for index, item in enumerate(files_list):
        entry = _read_file_entry(_expect_dict(item, f"files[{index}]"), index)
        if entry.path in seen:
            raise InvalidFieldError(f"Path declared twice in files: {'/'.join(entry.path)}")
        seen.add(entry.path)
        files.append(entry)

    manifest = TorrentManifest(
        name=name,
        files=tuple(files),
        announce=announce,
        piece_length=piece_length,
        piece_count=len(pieces) // PIECE_HASH_LENGTH,
    )
    logger.debug("Projected manifest %r with %d files", manifest.name, len(manifest.files))
    return manifest


def _read_name(info: BencodeDict) -> str:
    # "name.utf-8" takes precedence when a client wrote both
    raw = info.get(b"name.utf-8") or _require(info, b"name", "info")
    name = _path_text(_expect_bytes(raw, "name"), "name")
    if not is_valid_segment(name):
        raise InvalidPathError(f"Invalid torrent name: {name!r}")
    return name


def _read_file_entry(item: BencodeDict, index: int) -> FileEntry:
    context = f"files[{index}]"
    length = _expect_int(_require(item, b"length", context), "length")
    if length < 0:
        raise InvalidFieldError(f'Value "{context}"."length" is negative: {length}')

    raw_path = item.get(b"path.utf-8") or _require(item, b"path", context)
    segments_list = _expect_list(raw_path, "path")
    if not segments_list:
        raise InvalidPathError(f'Value "{context}"."path" is empty')

    segments: list[str] = []
    for segment_value in segments_list:
        segment = _path_text(_expect_bytes(segment_value, "path element"), "path")
        if not is_valid_segment(segment):
            raise InvalidPathError(f'Invalid segment {segment!r} in "{context}"."path"')
        segments.append(segment)

    return FileEntry(path=tuple(segments), length=length, padding=_is_padding(item, segments))


def _is_padding(item: BencodeDict, segments: list[str]) -> bool:
    attr = item.get(b"attr")
    if isinstance(attr, BencodeBytes) and b"p" in attr.value:
        return True
    return segments[-1].startswith(_LEGACY_PADDING_PREFIX)


def _require(container: BencodeDict, key: bytes, context: str) -> BencodeValue:
    value = container.get(key)
    if value is None:
        raise MissingFieldError(key.decode("ascii"), context)
    return value


def _expect_dict(value: BencodeValue, field: str) -> BencodeDict:
    if not isinstance(value, BencodeDict):
        raise InvalidFieldError(f'Invalid "{field}" data type: expected dictionary')
    return value


def _expect_list(value: BencodeValue, field: str) -> BencodeList:
    if not isinstance(value, BencodeList):
        raise InvalidFieldError(f'Invalid "{field}" data type: expected list')
    return value


def _expect_int(value: BencodeValue, field: str) -> int:
    if not isinstance(value, BencodeInt):
        raise InvalidFieldError(f'Invalid "{field}" data type: expected integer')
    return value.value


def _expect_bytes(value: BencodeValue, field: str) -> bytes:
    if not isinstance(value, BencodeBytes):
        raise InvalidFieldError(f'Invalid "{field}" data type: expected byte string')
    return value.value


def _text(raw: bytes, field: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidFieldError(f'Value "{field}" is not valid UTF-8') from e


def _path_text(raw: bytes, field: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidPathError(f'Value "{field}" is not valid UTF-8: {raw!r}') from e
