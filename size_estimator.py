#!/usr/bin/env python3
"""
Size estimation helpers

Converts filesystem paths and tool-reported size strings ("1.2GB") into
byte counts, and samples free space on the volume holding the user's home
directory. Every function here degrades to 0 instead of raising, so a bad
reading never aborts a cleanup run.
"""

import os
import pathlib
import re
import shutil
from typing import Optional, Union

PathLike = Union[str, os.PathLike]

_SIZE_PATTERN = re.compile(r"^([0-9]*\.?[0-9]+)([A-Za-z]+)$")

UNIT_MULTIPLIERS = {
    "B": 1,
    "kB": 1024,
    "KB": 1024,
    "KiB": 1024,
    "MB": 1024**2,
    "MiB": 1024**2,
    "GB": 1024**3,
    "GiB": 1024**3,
    "TB": 1024**4,
    "TiB": 1024**4,
}


def parse_size_to_bytes(text: Optional[str]) -> int:
    """Parse a size string of the form <number><unit> into bytes.

    Thousands separators are ignored. Returns 0 for anything that does not
    conform, including unknown units and a space between number and unit.
    """
    if not isinstance(text, str):
        return 0
    match = _SIZE_PATTERN.match(text.strip().replace(",", ""))
    if not match:
        return 0
    multiplier = UNIT_MULTIPLIERS.get(match.group(2))
    if multiplier is None:
        return 0
    return int(round(float(match.group(1)) * multiplier))


def _walk_size(path: pathlib.Path) -> int:
    """Sum file sizes under *path* without following symlinks."""
    try:
        if path.is_symlink() or not path.is_dir():
            return path.lstat().st_size
    except OSError:
        return 0

    total = 0
    for dirpath, _dirnames, filenames in os.walk(path, followlinks=False, onerror=lambda _err: None):
        for f in filenames:
            try:
                total += os.lstat(os.path.join(dirpath, f)).st_size
            except OSError:
                pass
    return total


def path_size_bytes(path: Optional[PathLike]) -> int:
    """Return total size of a file or directory tree in bytes (0 if missing)."""
    if not path:
        return 0
    p = pathlib.Path(path)
    if not os.path.lexists(p):
        return 0
    return _walk_size(p)


def path_size_kb(path: Optional[PathLike]) -> int:
    """Return total size of a directory tree in whole kilobytes, rounded up."""
    return (path_size_bytes(path) + 1023) // 1024


def free_bytes(anchor: Optional[PathLike] = None) -> int:
    """Return free bytes on the volume that holds *anchor* (default: home)."""
    if anchor is None:
        anchor = pathlib.Path.home()
    try:
        return shutil.disk_usage(anchor).free
    except OSError:
        return 0
