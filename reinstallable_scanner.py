#!/usr/bin/env python3
"""
Reinstallable directory scanner

Finds dependency, build and cache directories under a workspace root that a
package manager or build tool can recreate (node_modules, .venv, target, ...).
Matched directories are pruned from the walk, so nothing nested inside a
match is reported separately, and .git directories are never entered.
"""

import os
import pathlib
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from size_estimator import path_size_kb

# JS/TS, Python and Rust build/dependency directories, matched by name
NAME_TARGETS = frozenset(
    {
        # JS/TS
        "node_modules",
        ".next",
        "dist",
        "build",
        "out",
        "coverage",
        ".turbo",
        ".parcel-cache",
        ".vite",
        ".cache",
        # Python
        ".venv",
        "venv",
        "env",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".tox",
        ".uv",
        # Rust
        "target",
    }
)

# Ruby directories, matched by trailing path components
PATH_SUFFIX_TARGETS = ("vendor/bundle", "vendor/cache", ".bundle/cache")

PRUNED_NAMES = frozenset({".git"})

UNSAFE_ROOTS = frozenset(
    {
        "/",
        "/System",
        "/Library",
        "/Applications",
        "/Users",
        "/Volumes",
        "/private",
        "/home",
        "/usr",
        "/etc",
        "/var",
        "/bin",
        "/sbin",
        "/opt",
    }
)


class PurgeError(Exception):
    """Base error for scan-and-purge problems"""


class InvalidRootError(PurgeError):
    """The root is missing or not a directory"""


class UnsafeRootError(PurgeError):
    """The root is a system location or the home directory"""


@dataclass
class Match:
    """A reinstallable directory found under the root"""

    path: str
    size_kb: int = 0
    label: str = field(default="")

    def __post_init__(self):
        if not self.label:
            self.label = target_label(self.path)


@dataclass
class TypeSummary:
    label: str
    count: int = 0
    size_kb: int = 0


def _suffix_parts(suffix: str) -> tuple[str, ...]:
    return tuple(suffix.split("/"))


_SUFFIXES = [(suffix, _suffix_parts(suffix)) for suffix in PATH_SUFFIX_TARGETS]


def _matching_suffix(path: str) -> Optional[str]:
    parts = pathlib.PurePath(path).parts
    for suffix, suffix_parts in _SUFFIXES:
        if parts[-len(suffix_parts) :] == suffix_parts:
            return suffix
    return None


def target_label(path: str) -> str:
    """Type label for a match: the matched suffix, else the directory name"""
    return _matching_suffix(path) or os.path.basename(os.path.normpath(path))


def is_target(path: str) -> bool:
    return os.path.basename(path) in NAME_TARGETS or _matching_suffix(path) is not None


def discover(root: str) -> list[str]:
    """Walk *root* and return matched directory paths in discovery order.

    Symlinked directories are never followed or matched, and the root itself
    is never a match.
    """
    matches: list[str] = []
    for dirpath, dirs, _files in os.walk(root, topdown=True, followlinks=False):
        dirs.sort()
        keep = []
        for d in dirs:
            full = os.path.join(dirpath, d)
            if d in PRUNED_NAMES or os.path.islink(full):
                continue
            if is_target(full):
                matches.append(full)
                continue
            keep.append(d)

        # Prune matched dirs so we don't descend into them
        dirs[:] = keep
    return matches


def size_matches(
    paths: Iterable[str],
    sizer: Callable[[str], int] = path_size_kb,
    progress: Optional[Callable[[str], None]] = None,
) -> list[Match]:
    """Size every match once, keeping discovery order"""
    matches = []
    for path in paths:
        matches.append(Match(path=path, size_kb=max(sizer(path), 0)))
        if progress is not None:
            progress(path)
    return matches


def total_kb(matches: Iterable[Match]) -> int:
    return sum(m.size_kb for m in matches)


def summarize_by_type(matches: Iterable[Match]) -> list[TypeSummary]:
    """Count and size per label, largest first (ties keep first appearance)"""
    by_label: dict[str, TypeSummary] = {}
    for match in matches:
        summary = by_label.setdefault(match.label, TypeSummary(match.label))
        summary.count += 1
        summary.size_kb += match.size_kb
    return sorted(by_label.values(), key=lambda s: s.size_kb, reverse=True)


def largest(matches: Iterable[Match], limit: Optional[int] = None) -> list[Match]:
    """Matches by size, descending; sorted() is stable so ties keep discovery order"""
    ranked = sorted(matches, key=lambda m: m.size_kb, reverse=True)
    return ranked if limit is None else ranked[:limit]


def canonical(path: str) -> str:
    return os.path.realpath(path)


def validate_root(root: Optional[str], home: Optional[str] = None) -> str:
    """Return the canonical root, refusing missing, system and home roots"""
    if not root:
        raise InvalidRootError("Missing --root PATH (use --help)")
    if not os.path.isdir(root):
        raise InvalidRootError(f"--root is not a directory: {root}")

    resolved = canonical(root)
    home_resolved = canonical(home or str(pathlib.Path.home()))
    if resolved in UNSAFE_ROOTS or resolved == home_resolved:
        raise UnsafeRootError(f"Refusing unsafe root: {resolved}")
    return resolved


def is_under_root(path: str, root: str) -> bool:
    """True if *path* (parent canonicalized, name kept) lies strictly under *root*.

    The final component is not resolved, so a match that has since been
    replaced by a symlink is still judged by where it sits, not where it
    points.
    """
    parent = canonical(os.path.dirname(os.path.abspath(path)))
    located = os.path.join(parent, os.path.basename(path))
    root = canonical(root)
    prefix = root if root.endswith(os.sep) else root + os.sep
    return located.startswith(prefix) and located != root
