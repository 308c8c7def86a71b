"""Unit tests for shared display helpers."""

from pathlib import Path, PurePosixPath

from torrentprune.cli.display import (
    create_changes_table,
    create_plan_table,
    create_report_table,
    create_results_table,
    print_report_summary,
)
from torrentprune.core.diff import DiffResult
from torrentprune.core.planner import plan
from torrentprune.core.snapshot import ChangeSet, ResizedFile
from torrentprune.filesystem.operator import FilesystemOperator
from torrentprune.utils.formatting import console


def _result() -> DiffResult:
    return DiffResult(
        name="show",
        root=Path("/data/show"),
        extraneous=frozenset({PurePosixPath("show/sub/[x].txt")}),
        missing=frozenset({PurePosixPath("show/a.mkv")}),
        empty_dirs=frozenset({PurePosixPath("show/sub")}),
        surface_skipped=frozenset({PurePosixPath("show/readme")}),
    )


class TestTables:
    """Tests for table builders."""

    def test_report_table_has_one_row_per_path(self) -> None:
        """Every reported path gets a row."""
        table = create_report_table(_result())

        assert table.row_count == 4

    def test_plan_table_titles(self) -> None:
        """Dry-run plans are labelled."""
        deletion_plan = plan(_result())

        assert create_plan_table(deletion_plan).title == "Planned Deletions"
        assert create_plan_table(deletion_plan, dry_run=True).title == "Planned Deletions (Dry Run)"
        assert create_plan_table(deletion_plan).row_count == 2

    def test_results_table(self) -> None:
        """Each executed operation gets a row."""
        report = FilesystemOperator(dry_run=True).execute(plan(_result()))

        assert create_results_table(report).row_count == 2

    def test_changes_table(self) -> None:
        """Files and directory changes are listed."""
        changes = ChangeSet(
            added=(PurePosixPath("new"),),
            resized=(ResizedFile(path=PurePosixPath("b"), old_size=1, new_size=2),),
            emptied_dirs=(PurePosixPath("old"),),
        )

        assert create_changes_table(changes).row_count == 3


class TestReportSummary:
    """Tests for print_report_summary()."""

    def test_counts_every_category(self) -> None:
        """Extraneous, empty, missing and kept paths are all counted."""
        result = DiffResult(
            name="show",
            root=Path("/data/show"),
            extraneous=frozenset({PurePosixPath("show/sub/c.txt")}),
            missing=frozenset(),
            empty_dirs=frozenset(),
            surface_skipped=frozenset({PurePosixPath("show/readme")}),
            link_skipped=frozenset({PurePosixPath("show/linked/a"), PurePosixPath("show/linked/b")}),
        )

        with console.capture() as capture:
            print_report_summary(result)

        output = " ".join(capture.get().split())
        assert "1 extraneous" in output
        assert "1 root-level kept" in output
        assert "2 behind links kept" in output

    def test_clean_result(self) -> None:
        """A result without any paths says the directory matches."""
        result = DiffResult(
            name="show",
            root=Path("/data/show"),
            extraneous=frozenset(),
            missing=frozenset(),
            empty_dirs=frozenset(),
        )

        with console.capture() as capture:
            print_report_summary(result)

        assert "Directory matches the torrent." in capture.get()
