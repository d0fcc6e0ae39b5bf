"""Tests for all-or-nothing report writing."""

import pytest

from order_report.core.errors import ReportWriteError
from order_report.core.file_io import write_reports


class TestWriteReports:
    def test_writes_every_file(self, tmp_path):
        a, b = tmp_path / "a.txt", tmp_path / "b.txt"
        written = write_reports({a: "alpha\n", b: "beta\n"})
        assert written == [a, b]
        assert a.read_text() == "alpha\n"
        assert b.read_text() == "beta\n"

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "report.txt"
        write_reports({path: "x"})
        assert path.read_text() == "x"

    def test_overwrites_existing(self, tmp_path):
        path = tmp_path / "report.txt"
        path.write_text("old")
        write_reports({str(path): "new"})
        assert path.read_text() == "new"

    def test_no_temporaries_left_behind(self, tmp_path):
        write_reports({tmp_path / "a.txt": "a", tmp_path / "b.txt": "b"})
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt", "b.txt"]

    def test_failure_writes_nothing(self, tmp_path):
        good = tmp_path / "good.txt"
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory is needed")
        bad = blocker / "bad.txt"

        with pytest.raises(ReportWriteError):
            write_reports({good: "detail", bad: "summary"})

        assert not good.exists()
        assert [p.name for p in tmp_path.iterdir()] == ["blocker"]
