#!/usr/bin/env python3
"""
Auxiliary utility functions for the Kenosis project

Provides presentation helpers shared by the kenosis and aphairesis tools.
"""

import pathlib
from typing import Optional

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB", "PB"]


def format_bytes(size_bytes: int) -> str:
    """Format byte size into human-readable string

    Args:
        size_bytes: Size in bytes to format

    Returns:
        Formatted string like "1.20 GB", "345.00 MB" or "789 B"
    """
    value = float(max(size_bytes, 0))
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(value)} {BYTE_UNITS[unit]}"
    return f"{value:.2f} {BYTE_UNITS[unit]}"


def format_kb(size_kb: int) -> str:
    """Format a size given in kilobytes"""
    return format_bytes(size_kb * 1024)


def format_path_for_display(path: str, home_path: Optional[str] = None) -> str:
    """Format file path for display by replacing home directory with ~

    Args:
        path: File path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Path with home directory replaced by ~ if applicable
    """
    if home_path is None:
        home_path = str(pathlib.Path.home())

    if path == home_path or path.startswith(home_path.rstrip("/") + "/"):
        return "~" + path[len(home_path.rstrip("/")) :]
    return path


def split_csv(value: Optional[str]) -> Optional[frozenset[str]]:
    """Split a comma-separated option value into a set of names

    Returns None for an empty or missing value so callers can tell
    "not given" apart from "given but empty".
    """
    if not value:
        return None
    names = frozenset(part.strip() for part in value.split(",") if part.strip())
    return names or None
