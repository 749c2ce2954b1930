#!/usr/bin/env python3
"""
Run configuration for kenosis

Holds the immutable settings of one cleanup run, the profile catalogue and
the task filter that turns a profile plus --only/--skip into the ordered list
of tasks to run.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Profile(Enum):
    SAFE = "safe"
    AGGRESSIVE = "aggressive"
    DEV = "dev"


# Catalogue order is execution order.
TASK_CATALOGUE = ("docker", "go", "node", "python", "ruby", "brew", "xcode", "ios_sim", "gradle", "cargo")

_SAFE_TASKS = ("docker", "go", "node", "python", "ruby", "brew")
_DEV_TASKS = _SAFE_TASKS + ("xcode", "ios_sim", "gradle")
_AGGRESSIVE_TASKS = _DEV_TASKS + ("cargo",)

PROFILE_TASKS: dict[Profile, tuple[str, ...]] = {
    Profile.SAFE: _SAFE_TASKS,
    Profile.DEV: _DEV_TASKS,
    Profile.AGGRESSIVE: _AGGRESSIVE_TASKS,
}


@dataclass(frozen=True)
class RunConfig:
    """Settings for a single cleanup run, fixed once arguments are parsed"""

    profile: Profile = Profile.SAFE
    dry_run: bool = True
    assume_yes: bool = False
    interactive: bool = False
    strict: bool = True
    include_volumes: bool = False
    include_global_caches: bool = False
    only: Optional[frozenset[str]] = None
    skip: Optional[frozenset[str]] = None

    @property
    def global_caches_enabled(self) -> bool:
        """Registry-wide caches are in scope for aggressive runs or on request"""
        return self.include_global_caches or self.profile is Profile.AGGRESSIVE

    def settings_line(self) -> str:
        """One-line summary of the settings for the run log"""
        only = ",".join(sorted(self.only)) if self.only else "all"
        skip = ",".join(sorted(self.skip)) if self.skip else "none"
        return (
            f"Settings: profile={self.profile.value} dry_run={int(self.dry_run)} "
            f"yes={int(self.assume_yes)} strict={int(self.strict)} only={only} skip={skip}"
        )

    def as_display_dict(self) -> dict:
        return {
            "Profile": self.profile.value,
            "Mode": "dry-run" if self.dry_run else "apply",
            "Strict": "yes" if self.strict else "no",
            "Interactive": "yes" if self.interactive else "no",
            "Assume yes": "yes" if self.assume_yes else "no",
            "Docker volumes": "included" if self.include_volumes else "excluded",
            "Global caches": "included" if self.global_caches_enabled else "excluded",
            "Only": sorted(self.only) if self.only else "all",
            "Skip": sorted(self.skip) if self.skip else "none",
        }


def base_tasks(profile: Profile) -> tuple[str, ...]:
    """Return the profile's task set in catalogue order"""
    return PROFILE_TASKS[profile]


def select_tasks(config: RunConfig) -> list[str]:
    """Resolve the ordered task list for a run.

    --only keeps, then --skip drops; order always follows the catalogue.
    Names outside the catalogue are logged and ignored.
    """
    for name in sorted((config.only or frozenset()) | (config.skip or frozenset())):
        if name not in TASK_CATALOGUE:
            logger.warning("Unknown task: %s", name)

    candidates = base_tasks(config.profile)

    if config.only:
        for name in sorted(config.only):
            if name in TASK_CATALOGUE and name not in candidates:
                logger.info("Task %s is not part of the %s profile; not running it", name, config.profile.value)

    selected = []
    for name in candidates:
        if config.only and name not in config.only:
            continue
        if config.skip and name in config.skip:
            continue
        selected.append(name)
    return selected
