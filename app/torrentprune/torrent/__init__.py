"""Torrent descriptor decoding.

This module provides the bencode codec, the manifest models and the
projection of a multi-file torrent's info section into a file manifest.
"""

from torrentprune.torrent.bencode import (
    BencodeBytes,
    BencodeDict,
    BencodeInt,
    BencodeList,
    BencodeValue,
    DecodeError,
    InvalidLengthError,
    MalformedError,
    TruncatedError,
    decode,
    encode,
)
from torrentprune.torrent.metainfo import (
    InvalidFieldError,
    InvalidPathError,
    ManifestError,
    MissingFieldError,
    NotMultiFileError,
    load_torrent,
    project_manifest,
)
from torrentprune.torrent.models import FileEntry, TorrentManifest

__all__ = [
    "BencodeBytes",
    "BencodeDict",
    "BencodeInt",
    "BencodeList",
    "BencodeValue",
    "DecodeError",
    "FileEntry",
    "InvalidFieldError",
    "InvalidLengthError",
    "InvalidPathError",
    "MalformedError",
    "ManifestError",
    "MissingFieldError",
    "NotMultiFileError",
    "TorrentManifest",
    "TruncatedError",
    "decode",
    "encode",
    "load_torrent",
    "project_manifest",
]
