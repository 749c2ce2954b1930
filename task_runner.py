#!/usr/bin/env python3
"""
Task execution and reclaim accounting for kenosis

Each selected task is estimated, executed and measured in turn. Outcomes are
collected in a per-task buffer (TaskRun) and only published as immutable
TaskRecord values once the task has finished, at which point a task that
had any failing command gets its OK records downgraded to FAIL.

Run totals are folds over the published records plus the free-space samples
taken at the start and end of the run.
"""

import logging
import os
import shlex
import shutil
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Sequence

from auxiliary import format_bytes
from size_estimator import free_bytes

logger = logging.getLogger(__name__)

FAILED_SUFFIX = " (one or more commands failed)"


class TaskStatus(Enum):
    OK = "OK"
    SKIP = "SKIP"
    FAIL = "FAIL"


class TaskState(Enum):
    PENDING = "pending"
    ESTIMATING = "estimating"
    EXECUTING = "executing"
    RECORDED = "recorded"


@dataclass(frozen=True)
class TaskRecord:
    """Published outcome of one task (or one branch of a task)"""

    task: str
    status: TaskStatus
    note: str
    estimated_bytes: int = 0
    actual_bytes: int = 0


class TaskRun:
    """Per-task buffer: runs operations, tracks failure, holds pending outcomes."""

    def __init__(self, task_name: str, ctx, estimated_bytes: int = 0):
        self.task_name = task_name
        self.ctx = ctx
        self.estimated_bytes = max(estimated_bytes, 0)
        self.actual_bytes = 0
        self.failed = False
        self.state = TaskState.PENDING
        self._pending: list[tuple[TaskStatus, str]] = []

    @property
    def dry_run(self) -> bool:
        return self.ctx.config.dry_run

    @property
    def has_records(self) -> bool:
        return bool(self._pending)

    def record(self, status: TaskStatus, note: str):
        self._pending.append((status, note))

    def mark_failed(self, reason: str):
        logger.warning("%s: %s", self.task_name, reason)
        self.failed = True

    def command(self, description: str, argv: Sequence[str]) -> bool:
        """Run one external command; a failure flags the task but never raises."""
        cmdline = shlex.join(argv)
        if self.dry_run:
            logger.info("[DRY-RUN] %s", description)
            logger.info("[DRY-RUN]   %s", cmdline)
            return True

        logger.info("[RUN] %s", description)
        try:
            result = self.ctx.runner(list(argv), check=False)
        except OSError as e:
            self.mark_failed(f"Command failed: {cmdline} ({e})")
            return False

        if result.returncode == 0:
            return True
        self.mark_failed(f"Command failed: {cmdline} (exit {result.returncode})")
        return False

    def remove_paths(self, description: str, paths: Iterable[os.PathLike]) -> bool:
        """Remove directory trees; missing paths are not an error."""
        paths = [str(p) for p in paths]
        if self.dry_run:
            logger.info("[DRY-RUN] %s", description)
            logger.info("[DRY-RUN]   %s", shlex.join(["rm", "-rf", *paths]))
            return True

        logger.info("[RUN] %s", description)
        ok = True
        for path in paths:
            try:
                if os.path.isdir(path) and not os.path.islink(path):
                    shutil.rmtree(path)
                elif os.path.lexists(path):
                    os.unlink(path)
            except OSError as e:
                self.mark_failed(f"Could not remove {path}: {e}")
                ok = False
        return ok

    def finalize(self) -> tuple[TaskRecord, ...]:
        """Publish the buffered outcomes, applying the failure downgrade."""
        actual_bytes = max(self.actual_bytes, 0)
        records = []
        for status, note in self._pending:
            record = TaskRecord(self.task_name, status, note, self.estimated_bytes, actual_bytes)
            if self.failed and status is TaskStatus.OK:
                record = replace(record, status=TaskStatus.FAIL, note=note + FAILED_SUFFIX)
            records.append(record)
        self.state = TaskState.RECORDED
        return tuple(records)


@dataclass(frozen=True)
class RunResult:
    """Everything the reporter needs about a finished run"""

    records: tuple[TaskRecord, ...]
    dry_run: bool
    start_free: int = 0
    end_free: int = 0
    halted_task: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.halted_task is not None

    @property
    def total_estimated(self) -> int:
        # Records from one task share its estimate, so count each task once.
        per_task: dict[str, int] = {}
        for record in self.records:
            per_task.setdefault(record.task, record.estimated_bytes)
        return sum(per_task.values())

    @property
    def total_reclaimed(self) -> int:
        if self.dry_run:
            return 0
        return max(self.end_free - self.start_free, 0)


class RunCoordinator:
    """Drives the selected tasks one at a time in the given order."""

    def __init__(self, tasks: Mapping[str, object], ctx, free_space: Optional[Callable[[], int]] = None):
        self.tasks = tasks
        self.ctx = ctx
        self._free_space = free_space or (lambda: free_bytes(ctx.home))

    @property
    def dry_run(self) -> bool:
        return self.ctx.config.dry_run

    def run(self, task_names: Iterable[str]) -> RunResult:
        start_free = self._free_space()
        records: list[TaskRecord] = []
        halted_task = None

        for name in task_names:
            task = self.tasks.get(name)
            if task is None:
                logger.warning("Unknown task: %s", name)
                continue

            task_run = self.run_task(task)
            records.extend(task_run.finalize())

            if task_run.failed and self.ctx.config.strict:
                logger.error("Strict mode stopping on failed task: %s", name)
                halted_task = name
                break

        end_free = self._free_space()
        return RunResult(
            records=tuple(records),
            dry_run=self.dry_run,
            start_free=start_free,
            end_free=end_free,
            halted_task=halted_task,
        )

    def run_task(self, task) -> TaskRun:
        """Estimate, execute and measure one task; returns its unfinalized buffer."""
        task_run = TaskRun(task.name, self.ctx)

        task_run.state = TaskState.ESTIMATING
        task_run.estimated_bytes = self._estimate(task)
        logger.info("Task %s: estimated %s reclaimable", task.name, format_bytes(task_run.estimated_bytes))

        before = self._free_space() if not self.dry_run else 0

        task_run.state = TaskState.EXECUTING
        self._execute(task, task_run)

        if not self.dry_run:
            after = self._free_space()
            task_run.actual_bytes = max(after - before, 0)
        return task_run

    def _estimate(self, task) -> int:
        try:
            return max(int(task.estimate(self.ctx)), 0)
        except Exception as e:
            logger.warning("Could not estimate %s: %s", task.name, e)
            return 0

    def _execute(self, task, task_run: TaskRun):
        reason = task.skip_reason(self.ctx)
        if reason is not None:
            task_run.record(TaskStatus.SKIP, reason)
            return
        try:
            task.execute(self.ctx, task_run)
        except Exception as e:
            logger.exception("Task %s raised", task.name)
            task_run.failed = True
            if not task_run.has_records:
                task_run.record(TaskStatus.FAIL, f"task raised: {e}")
