#!/usr/bin/env python3
"""
Process-level plumbing shared by the kenosis tools

setup_logging() wires the root logger to the rich console and to a log file
(preferred location first, temp directory as fallback). RunLock keeps two
runs of the same tool from touching the same caches at once.
"""

import fcntl
import logging
import os
import pathlib
import tempfile
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LockError(RuntimeError):
    """Another run already holds the lock"""


def log_file_candidates(tool_name: str, home: Optional[pathlib.Path] = None) -> list[pathlib.Path]:
    home = home or pathlib.Path.home()
    return [
        home / "Library" / "Logs" / f"{tool_name}.log",
        pathlib.Path(tempfile.gettempdir()) / f"{tool_name}.log",
    ]


def _open_log_handler(candidates: list[pathlib.Path]) -> tuple[Optional[logging.Handler], Optional[pathlib.Path]]:
    for path in candidates:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError:
            continue
        return handler, path
    return None, None


def setup_logging(
    tool_name: str,
    console: Optional[Console] = None,
    home: Optional[pathlib.Path] = None,
) -> Optional[pathlib.Path]:
    """Configure console + file logging and return the log file in use (or None)"""
    console_handler = RichHandler(
        console=console,
        show_path=False,
        show_time=False,
        markup=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(logging.INFO)
    handlers: list[logging.Handler] = [console_handler]

    file_handler, log_path = _open_log_handler(log_file_candidates(tool_name, home))
    if file_handler is not None:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    return log_path


class RunLock:
    """Advisory exclusive lock on <tmpdir>/<name>.lock, released on exit.

    Acquisition never waits: if another process holds the lock, LockError is
    raised immediately.
    """

    def __init__(self, name: str, lock_dir: Optional[pathlib.Path] = None):
        self.path = pathlib.Path(lock_dir or tempfile.gettempdir()) / f"{name}.lock"
        self._fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self):
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            os.close(fd)
            raise LockError(f"Another run appears to be active: {self.path}") from None

        # A lock taken on a file that was unlinked by the previous holder does not count.
        try:
            current = os.stat(self.path).st_ino
        except FileNotFoundError:
            current = None
        if current != os.fstat(fd).st_ino:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
            raise LockError(f"Another run appears to be active: {self.path}")

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        self._fd = fd

    def release(self):
        if self._fd is None:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
