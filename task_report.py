#!/usr/bin/env python3
"""
Run summary rendering for kenosis

Pure functions over a finished RunResult: a rich table for the console and
fixed-width plain lines for the log file. Nothing here changes a record.
"""

from rich import box
from rich.table import Table

from auxiliary import format_bytes
from task_runner import RunResult, TaskRecord, TaskStatus

STATUS_STYLES = {
    TaskStatus.OK: "green",
    TaskStatus.SKIP: "dim",
    TaskStatus.FAIL: "red bold",
}

NOT_APPLICABLE = "n/a"


def reclaimed_cell(record: TaskRecord, dry_run: bool) -> str:
    return NOT_APPLICABLE if dry_run else format_bytes(record.actual_bytes)


def build_summary_table(result: RunResult) -> Table:
    table = Table(title="Cleanup Summary", box=box.ROUNDED, show_lines=False)
    table.add_column("Task", style="cyan", min_width=10)
    table.add_column("Status", justify="center", min_width=6)
    table.add_column("Estimated", justify="right", style="yellow", min_width=10)
    table.add_column("Reclaimed", justify="right", style="green", min_width=10)
    table.add_column("Note", style="white")

    for record in result.records:
        style = STATUS_STYLES[record.status]
        table.add_row(
            record.task,
            f"[{style}]{record.status.value}[/{style}]",
            format_bytes(record.estimated_bytes),
            reclaimed_cell(record, result.dry_run),
            record.note,
        )
    return table


def summary_lines(result: RunResult) -> list[str]:
    """Plain-text rendering of the summary table"""
    lines = [
        "Summary:",
        f"{'task':<10} {'status':<8} {'estimated':<12} {'reclaimed':<12} note",
        f"{'-' * 10} {'-' * 8} {'-' * 12} {'-' * 12} {'-' * 41}",
    ]
    for record in result.records:
        lines.append(
            f"{record.task:<10} {record.status.value:<8} {format_bytes(record.estimated_bytes):<12} "
            f"{reclaimed_cell(record, result.dry_run):<12} {record.note}"
        )
    return lines


def totals_lines(result: RunResult) -> list[str]:
    """Run totals; the reclaimed figure is the whole-run free-space delta"""
    lines = [f"Estimated total space to reclaim: {format_bytes(result.total_estimated)}"]
    if not result.dry_run:
        lines.append(f"Total space reclaimed: {format_bytes(result.total_reclaimed)}")
    return lines
