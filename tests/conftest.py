"""Pytest configuration for the `tests/` suite.

The tools are flat top-level modules at the repository root, so the root is
prepended to `sys.path` for test runs that do not install the project first.
"""

from __future__ import annotations

import io
import logging
import subprocess
import sys
from pathlib import Path

import pytest
from rich.console import Console

_REPO_ROOT = Path(__file__).resolve().parents[1]

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from console_ui import ConsoleUI  # noqa: E402


class FakeRunner:
    """Stands in for subprocess.run; records every argv it receives.

    *outputs* maps a joined command line to its stdout, *failing* lists
    command lines that exit non-zero.
    """

    def __init__(self, outputs=None, failing=()):
        self.outputs = outputs or {}
        self.failing = set(failing)
        self.calls: list[list[str]] = []

    def __call__(self, argv, check=False, **kwargs):
        self.calls.append(list(argv))
        cmdline = " ".join(argv)
        code = 1 if cmdline in self.failing else 0
        return subprocess.CompletedProcess(argv, code, stdout=self.outputs.get(cmdline, ""), stderr="")

    @property
    def cmdlines(self) -> list[str]:
        return [" ".join(c) for c in self.calls]


def fake_which(*installed):
    tools = set(installed)
    return lambda name: f"/usr/local/bin/{name}" if name in tools else None


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def ui():
    """ConsoleUI writing into memory; read back with ui.console.file.getvalue()"""
    console_ui = ConsoleUI(console=Console(file=io.StringIO(), width=160, highlight=False))
    console_ui.error_console = Console(file=io.StringIO(), width=160, highlight=False)
    return console_ui


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put the previous ones back"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
