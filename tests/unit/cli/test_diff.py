"""Unit tests for the diff and snapshot commands."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

from torrentprune.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestSnapshotCommand:
    """Tests for torrentprune snapshot."""

    def test_writes_snapshot(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """The directory tree is saved as JSON."""
        root = make_tree(tmp_path / "show", {"a": "xyz", "sub/b": "x"})
        output = tmp_path / "snap.json"

        result = runner.invoke(app, ["snapshot", str(root), "--output", str(output)])

        assert result.exit_code == 0
        assert "Saved snapshot of 2 file(s)" in result.output
        assert json.loads(output.read_text())["tree"]["type"] == "dir"

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Snapshotting a missing directory fails."""
        result = runner.invoke(app, ["snapshot", str(tmp_path / "nope"), "-o", str(tmp_path / "s.json")])

        assert result.exit_code == 1


class TestDiffCommand:
    """Tests for torrentprune diff."""

    def test_two_directories(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Two live directories are compared."""
        before = make_tree(tmp_path / "before", {"a": "1", "b": "22"})
        after = make_tree(tmp_path / "after", {"a": "1", "b": "2222", "c": "x"})

        result = runner.invoke(app, ["diff", str(before), str(after), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["added"] == ["c"]
        assert data["removed"] == []
        assert data["resized"] == [{"path": "b", "old_size": 2, "new_size": 4}]

    def test_snapshot_against_directory(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """A saved snapshot can be compared with the current directory."""
        root = make_tree(tmp_path / "show", {"a": "1", "old/b": "2"})
        snap = tmp_path / "snap.json"
        runner.invoke(app, ["snapshot", str(root), "-o", str(snap)])
        (root / "old" / "b").unlink()

        result = runner.invoke(app, ["diff", str(snap), str(root), "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["removed"] == ["old/b"]
        assert data["emptied_dirs"] == ["old"]

    def test_identical(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Identical states report no differences."""
        root = make_tree(tmp_path / "show", {"a": "1"})

        result = runner.invoke(app, ["diff", str(root), str(root)])

        assert result.exit_code == 0
        assert "No differences" in result.output

    def test_table_output(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Changes are listed in a table."""
        before = make_tree(tmp_path / "before", {"a": "1"})
        after = make_tree(tmp_path / "after", {"b": "1"})

        result = runner.invoke(app, ["diff", str(before), str(after)])

        assert result.exit_code == 0
        assert "Added" in result.output
        assert "Removed" in result.output
        assert "2 change(s)" in result.output

    def test_invalid_snapshot_file(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """A file that is not a snapshot is fatal."""
        bad = tmp_path / "bad.json"
        bad.write_text("nope")
        root = make_tree(tmp_path / "show", {"a": "1"})

        result = runner.invoke(app, ["diff", str(bad), str(root)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_missing_side(self, tmp_path: Path) -> None:
        """A side that does not exist is fatal."""
        result = runner.invoke(app, ["diff", str(tmp_path / "x"), str(tmp_path)])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_inaccessible_side(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """A side that cannot be inspected exits with a message."""
        root = make_tree(tmp_path / "show", {"a": "1"})
        blocked = tmp_path / "blocked"
        original_is_dir = Path.is_dir

        def fake_is_dir(self: Path, *args, **kwargs):
            if self == blocked:
                raise PermissionError(13, "Permission denied")
            return original_is_dir(self, *args, **kwargs)

        with patch.object(Path, "is_dir", fake_is_dir):
            result = runner.invoke(app, ["diff", str(blocked), str(root)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Cannot access" in result.output
