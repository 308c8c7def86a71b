"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: builders
for bencoded torrent descriptors and for data directories on disk.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from torrentprune.torrent.bencode import encode

from tests.builders import FileSpec, build_metainfo, to_bencode


@pytest.fixture
def metainfo_bytes() -> Callable[..., bytes]:
    """Factory returning the bencoded form of build_metainfo()."""

    def _build(files: list[FileSpec], **kwargs: Any) -> bytes:
        return encode(to_bencode(build_metainfo(files, **kwargs)))

    return _build


@pytest.fixture
def torrent_file(tmp_path: Path, metainfo_bytes: Callable[..., bytes]) -> Callable[..., Path]:
    """Factory writing a .torrent file into tmp_path and returning its path."""

    def _write(files: list[FileSpec], filename: str = "show.torrent", **kwargs: Any) -> Path:
        path = tmp_path / filename
        path.write_bytes(metainfo_bytes(files, **kwargs))
        return path

    return _write


@pytest.fixture
def make_tree() -> Callable[[Path, dict[str, str]], Path]:
    """Factory creating files below a root directory.

    Keys ending in '/' create empty directories; other keys create files
    with the given text content.
    """

    def _make(root: Path, entries: dict[str, str]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in entries.items():
            target = root / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        return root

    return _make


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory so user settings never leak in."""
    config_home = tmp_path_factory.mktemp("xdg-config")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home
