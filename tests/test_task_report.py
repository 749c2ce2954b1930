"""Tests for summary rendering"""

import io

from rich.console import Console

from task_report import build_summary_table, reclaimed_cell, summary_lines, totals_lines
from task_runner import RunResult, TaskRecord, TaskStatus

RECORDS = (
    TaskRecord("docker", TaskStatus.SKIP, "docker not installed"),
    TaskRecord("node", TaskStatus.OK, "package manager caches cleaned", 2048, 1024),
    TaskRecord("brew", TaskStatus.FAIL, "brew cleanup + autoremove (one or more commands failed)", 0, 0),
)


def render(table) -> str:
    console = Console(file=io.StringIO(), width=200)
    console.print(table)
    return console.file.getvalue()


class TestSummaryLines:
    def test_dry_run_shows_not_applicable(self):
        lines = summary_lines(RunResult(RECORDS, dry_run=True))
        assert lines[0] == "Summary:"
        assert lines[1].split() == ["task", "status", "estimated", "reclaimed", "note"]
        assert lines[4].split()[:5] == ["node", "OK", "2.00", "KB", "n/a"]

    def test_apply_shows_measured_bytes(self):
        lines = summary_lines(RunResult(RECORDS, dry_run=False))
        assert lines[4].startswith("node       OK       2.00 KB      1.00 KB      package manager")

    def test_one_line_per_record(self):
        assert len(summary_lines(RunResult(RECORDS, dry_run=True))) == 3 + len(RECORDS)


class TestTotals:
    def test_dry_run_only_estimate(self):
        assert totals_lines(RunResult(RECORDS, dry_run=True)) == ["Estimated total space to reclaim: 2.00 KB"]

    def test_apply_adds_reclaimed(self):
        result = RunResult(RECORDS, dry_run=False, start_free=1000, end_free=1000 + 3 * 1024**2)
        assert totals_lines(result) == [
            "Estimated total space to reclaim: 2.00 KB",
            "Total space reclaimed: 3.00 MB",
        ]


class TestSummaryTable:
    def test_table_contains_every_task(self):
        output = render(build_summary_table(RunResult(RECORDS, dry_run=True)))
        assert "Cleanup Summary" in output
        for record in RECORDS:
            assert record.task in output
        assert "n/a" in output

    def test_reclaimed_cell(self):
        assert reclaimed_cell(RECORDS[1], dry_run=True) == "n/a"
        assert reclaimed_cell(RECORDS[1], dry_run=False) == "1.00 KB"
