"""Unit tests for the reconciliation diff engine.

Tests the extraneous, missing and empty-directory sets, the surface
policy, symbolic link and padding handling, and candidate narrowing.
"""

from collections.abc import Callable
from pathlib import Path, PurePosixPath

import pytest
from torrentprune.core.diff import DiffEngine, DiffOptions, DiffResult
from torrentprune.core.planner import plan
from torrentprune.filesystem.models import DirNode, FileNode, WalkResult
from torrentprune.filesystem.operator import FilesystemOperator
from torrentprune.filesystem.walker import DirectoryWalker
from torrentprune.torrent.models import FileEntry, TorrentManifest


def P(path: str) -> PurePosixPath:
    return PurePosixPath(path)


def _manifest(*files: tuple[str, int], name: str = "root", padding: tuple[str, ...] = ()) -> TorrentManifest:
    entries = [FileEntry(path=tuple(p.split("/")), length=n) for p, n in files]
    entries += [FileEntry(path=tuple(p.split("/")), length=1, padding=True) for p in padding]
    return TorrentManifest(name=name, files=tuple(entries))


def _diff(
    manifest: TorrentManifest, root: Path, *, surface: bool = False, empty_dir: bool = False
) -> DiffResult:
    walk = DirectoryWalker().walk(root)
    return DiffEngine(DiffOptions(surface=surface, empty_dir=empty_dir)).diff(manifest, walk)


@pytest.fixture
def scenario(tmp_path: Path, make_tree: Callable[..., Path]) -> tuple[TorrentManifest, Path]:
    """Manifest with a.txt and sub/b.txt; disk also has sub/c.txt and old.txt."""
    manifest = _manifest(("a.txt", 10), ("sub/b.txt", 5))
    root = make_tree(
        tmp_path / "root",
        {
            "a.txt": "0123456789",
            "sub/b.txt": "01234",
            "sub/c.txt": "x",
            "old.txt": "x",
        },
    )
    return manifest, root


class TestDiffEngine:
    """Tests for DiffEngine.diff()."""

    def test_surface_off_keeps_root_level_files(self, scenario: tuple[TorrentManifest, Path]) -> None:
        """Undeclared root-level files are skipped when surface is off."""
        manifest, root = scenario

        result = _diff(manifest, root)

        assert result.extraneous == {P("root/sub/c.txt")}
        assert result.surface_skipped == {P("root/old.txt")}
        assert result.missing == set()

    def test_surface_on_includes_root_level_files(self, scenario: tuple[TorrentManifest, Path]) -> None:
        """Surface mode makes root-level files candidates too."""
        manifest, root = scenario

        result = _diff(manifest, root, surface=True)

        assert result.extraneous == {P("root/sub/c.txt"), P("root/old.txt")}
        assert result.surface_skipped == set()

    def test_missing_files(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Declared files absent from disk are reported as missing."""
        manifest = _manifest(("a.txt", 1), ("sub/b.txt", 1))
        root = make_tree(tmp_path / "root", {"a.txt": "x"})

        result = _diff(manifest, root)

        assert result.missing == {P("root/sub/b.txt")}
        assert result.is_clean

    def test_sets_are_disjoint_from_their_sources(self, scenario: tuple[TorrentManifest, Path]) -> None:
        """Extraneous never holds a declared path, missing never a disk path."""
        manifest, root = scenario

        result = _diff(manifest, root, surface=True)

        assert not (result.extraneous & manifest.paths())
        assert not (result.missing & {P("root") / f.path for f in DirectoryWalker().walk(root).tree.iter_files()})

    def test_directory_name_does_not_matter(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """The walked directory stands in for the torrent name."""
        manifest = _manifest(("a.txt", 1), name="Some Show")
        root = make_tree(tmp_path / "renamed", {"a.txt": "x", "sub/extra": "y"})

        result = _diff(manifest, root)

        assert result.missing == set()
        assert result.extraneous == {P("Some Show/sub/extra")}
        assert result.resolve(P("Some Show/sub/extra")) == root / "sub" / "extra"

    def test_padding_files_are_ignored(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Padding files are never missing and never extraneous."""
        manifest = _manifest(("a.txt", 1), padding=(".pad/6",))
        root = make_tree(tmp_path / "root", {"a.txt": "x", ".pad/6": "\0"})

        result = _diff(manifest, root, surface=True, empty_dir=True)

        assert result.extraneous == set()
        assert result.missing == set()
        assert result.empty_dirs == set()

    def test_files_behind_linked_directory_are_never_candidates(
        self, tmp_path: Path, make_tree: Callable[..., Path]
    ) -> None:
        """Undeclared files reached through a directory link are kept."""
        make_tree(tmp_path / "elsewhere", {"shared.bin": "x"})
        manifest = _manifest(("a.txt", 1))
        root = make_tree(tmp_path / "root", {"a.txt": "x"})
        (root / "linked").symlink_to(tmp_path / "elsewhere")

        result = _diff(manifest, root, surface=True, empty_dir=True)

        assert result.extraneous == set()
        assert result.link_skipped == {P("root/linked/shared.bin")}
        assert result.empty_dirs == set()

    def test_symlinked_root_keeps_empty_directory_policy(
        self, tmp_path: Path, make_tree: Callable[..., Path]
    ) -> None:
        """A data directory reached through a link behaves like the real path."""
        manifest = _manifest(("a.txt", 1))
        real = make_tree(tmp_path / "real", {"a.txt": "x", "sub/c.txt": "x"})
        root = tmp_path / "root"
        root.symlink_to(real)

        result = _diff(manifest, root, empty_dir=True)

        assert result.extraneous == {P("root/sub/c.txt")}
        assert result.link_skipped == set()
        assert result.empty_dirs == {P("root/sub")}
        assert [op.path for op in plan(result)] == [P("root/sub/c.txt"), P("root/sub")]

    def test_root_link_flag_does_not_protect_directories(self) -> None:
        """Only links below the root keep their subtree."""
        manifest = _manifest(("a.txt", 1))
        tree = DirNode(
            path=P("."),
            children=(
                FileNode(path=P("a.txt"), size=1),
                DirNode(path=P("sub"), children=(FileNode(path=P("sub/c.txt"), size=1),)),
            ),
            is_link=True,
        )
        walk = WalkResult(root=Path("/data/root"), tree=tree)

        result = DiffEngine(DiffOptions(empty_dir=True)).diff(manifest, walk)

        assert result.extraneous == {P("root/sub/c.txt")}
        assert result.empty_dirs == {P("root/sub")}


class TestEmptyDirectories:
    """Tests for the empty-directory policy."""

    def test_directory_emptied_by_deletion(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """A directory holding only extraneous files becomes a candidate."""
        manifest = _manifest(("a.txt", 1))
        root = make_tree(tmp_path / "root", {"a.txt": "x", "sub/c.txt": "x"})

        result = _diff(manifest, root, empty_dir=True)

        assert result.extraneous == {P("root/sub/c.txt")}
        assert result.empty_dirs == {P("root/sub")}

        operations = [op.path for op in plan(result)]
        assert operations.index(P("root/sub/c.txt")) < operations.index(P("root/sub"))

    def test_empty_dir_policy_off(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Without the policy no directory is a candidate."""
        manifest = _manifest(("a.txt", 1))
        root = make_tree(tmp_path / "root", {"a.txt": "x", "sub/c.txt": "x", "empty/": ""})

        result = _diff(manifest, root)

        assert result.empty_dirs == set()

    def test_nested_empty_directories(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """Parents of empty directories are empty too."""
        manifest = _manifest(("a.txt", 1))
        root = make_tree(tmp_path / "root", {"a.txt": "x", "x/y/z/": ""})

        result = _diff(manifest, root, empty_dir=True)

        assert result.empty_dirs == {P("root/x"), P("root/x/y"), P("root/x/y/z")}

    def test_directory_with_declared_file_is_kept(self, scenario: tuple[TorrentManifest, Path]) -> None:
        """A directory still holding a declared file is not empty."""
        manifest, root = scenario

        result = _diff(manifest, root, empty_dir=True)

        assert result.empty_dirs == set()

    def test_surface_skipped_file_keeps_root_content(self, tmp_path: Path, make_tree: Callable[..., Path]) -> None:
        """The torrent root itself is never a candidate."""
        manifest = _manifest(("sub/a.txt", 1))
        root = make_tree(tmp_path / "root", {"stray": "x"})

        result = _diff(manifest, root, surface=True, empty_dir=True)

        assert P("root") not in result.empty_dirs
        assert result.extraneous == {P("root/stray")}

    def test_incomplete_directory_is_kept(self) -> None:
        """Directories that could not be fully listed are never removed."""
        manifest = _manifest(("a.txt", 1))
        tree = DirNode(
            path=P("."),
            children=(
                FileNode(path=P("a.txt"), size=1),
                DirNode(path=P("locked"), complete=False),
            ),
            complete=False,
        )
        walk = WalkResult(root=Path("/data/root"), tree=tree)

        result = DiffEngine(DiffOptions(empty_dir=True)).diff(manifest, walk)

        assert result.empty_dirs == set()


class TestIdempotence:
    """Running the reconciliation twice."""

    def test_second_run_is_clean(self, scenario: tuple[TorrentManifest, Path]) -> None:
        """After executing the plan nothing is left to delete."""
        manifest, root = scenario
        first = _diff(manifest, root, surface=True, empty_dir=True)
        report = FilesystemOperator().execute(plan(first))
        assert not report.has_failures

        second = _diff(manifest, root, surface=True, empty_dir=True)

        assert second.extraneous == set()
        assert second.empty_dirs == set()
        assert second.is_clean


class TestDiffResultNarrowing:
    """Tests for DiffResult.narrow() and exclude()."""

    @pytest.fixture
    def result(self) -> DiffResult:
        return DiffResult(
            name="root",
            root=Path("/data/root"),
            extraneous=frozenset({P("root/sub/c.nfo"), P("root/sub/d.txt"), P("root/x/e.txt")}),
            missing=frozenset(),
            empty_dirs=frozenset({P("root/sub"), P("root/x")}),
        )

    def test_narrow_to_subset(self, result: DiffResult) -> None:
        """Candidates can be removed."""
        narrowed = result.narrow(extraneous={P("root/sub/d.txt")}, empty_dirs=set())

        assert narrowed.extraneous == {P("root/sub/d.txt")}
        assert narrowed.empty_dirs == set()
        assert narrowed.candidate_count == 1

    def test_narrow_cannot_add(self, result: DiffResult) -> None:
        """Candidates can never be added."""
        with pytest.raises(ValueError, match="Cannot add"):
            result.narrow(extraneous={P("root/a.txt")})

    def test_exclude_by_name(self, result: DiffResult) -> None:
        """Patterns match entry names and protect containing directories."""
        excluded = result.exclude(["*.nfo"])

        assert excluded.extraneous == {P("root/sub/d.txt"), P("root/x/e.txt")}
        assert excluded.empty_dirs == {P("root/x")}

    def test_exclude_by_relative_path(self, result: DiffResult) -> None:
        """Patterns match paths relative to the torrent root."""
        excluded = result.exclude(["x/*"])

        assert P("root/x/e.txt") not in excluded.extraneous
        assert excluded.empty_dirs == {P("root/sub")}

    def test_exclude_directory(self, result: DiffResult) -> None:
        """An excluded directory is dropped from the empty set."""
        excluded = result.exclude(["x"])

        assert excluded.empty_dirs == {P("root/sub")}

    def test_no_patterns(self, result: DiffResult) -> None:
        """An empty pattern list changes nothing."""
        assert result.exclude([]) is result

    def test_to_dict(self, result: DiffResult) -> None:
        """Results serialize with sorted paths."""
        data = result.to_dict()

        assert data["clean"] is False
        assert data["extraneous"] == ["root/sub/c.nfo", "root/sub/d.txt", "root/x/e.txt"]
        assert data["summary"]["empty_dirs"] == 2
