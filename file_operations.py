#!/usr/bin/env python3
"""
Directory Removal Operations Module

Removes directory trees either irreversibly (shutil.rmtree) or reversibly by
handing them to the `trash` command. One strategy is chosen per batch. Every
operation re-checks, right before acting, that its directory still exists and
still lies under the scan root.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from reinstallable_scanner import Match, is_under_root

logger = logging.getLogger(__name__)

TRASH_COMMAND = "trash"


class OperationType(Enum):
    """How a directory is removed"""

    REMOVE = "remove"
    TRASH = "trash"

    @property
    def reversible(self) -> bool:
        return self is OperationType.TRASH


class TrashUnavailableError(RuntimeError):
    """--trash was requested but the trash command is not installed"""


@dataclass
class RemovalOperation:
    """Represents a planned directory removal"""

    match: Match
    root: str
    operation_type: OperationType


@dataclass
class OperationResult:
    """Result of a removal operation"""

    operation: RemovalOperation
    success: bool
    skipped: bool = False
    error_message: Optional[str] = None


@dataclass
class BatchResult:
    removed: list[OperationResult]
    skipped: list[OperationResult]
    failed: list[OperationResult]

    @property
    def removed_kb(self) -> int:
        return sum(r.operation.match.size_kb for r in self.removed)


class FileOperations:
    """Removal handler with a single strategy for the whole batch"""

    def __init__(
        self,
        operation_type: OperationType = OperationType.REMOVE,
        progress_callback: Optional[Callable[[str], None]] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.operation_type = operation_type
        self.progress_callback = progress_callback
        self._which = which
        self._runner = runner

    def ensure_available(self):
        """Fail early when the chosen strategy cannot work on this machine"""
        if self.operation_type is OperationType.TRASH and self._which(TRASH_COMMAND) is None:
            raise TrashUnavailableError(f"--trash requested but '{TRASH_COMMAND}' not found (brew install trash)")

    def plan_operations(self, matches: list[Match], root: str) -> list[RemovalOperation]:
        return [RemovalOperation(match=m, root=root, operation_type=self.operation_type) for m in matches]

    def execute_operation(self, operation: RemovalOperation) -> OperationResult:
        """Execute a single removal after re-verifying the target"""
        path = operation.match.path

        if os.path.islink(path) or not os.path.isdir(path):
            return OperationResult(operation, success=False, skipped=True, error_message="no longer a directory")

        if not is_under_root(path, operation.root):
            logger.warning("Skipping (outside root?): %s", path)
            return OperationResult(operation, success=False, skipped=True, error_message="outside root")

        try:
            if operation.operation_type is OperationType.TRASH:
                result = self._runner([TRASH_COMMAND, "--", path], check=False)
                if result.returncode != 0:
                    raise OSError(f"{TRASH_COMMAND} exited with {result.returncode}")
            else:
                shutil.rmtree(path)
        except OSError as e:
            logger.error("Could not delete %s: %s", path, e)
            return OperationResult(operation, success=False, error_message=str(e))

        logger.debug("Deleted %s", path)
        return OperationResult(operation, success=True)

    def execute_batch_operations(self, operations: list[RemovalOperation]) -> BatchResult:
        """Execute removals in order; a failure never stops the rest"""
        batch = BatchResult(removed=[], skipped=[], failed=[])

        for i, operation in enumerate(operations):
            if self.progress_callback:
                self.progress_callback(f"Deleting {operation.match.label} ({i + 1}/{len(operations)})")

            result = self.execute_operation(operation)

            if result.success:
                batch.removed.append(result)
            elif result.skipped:
                batch.skipped.append(result)
            else:
                batch.failed.append(result)

        return batch
