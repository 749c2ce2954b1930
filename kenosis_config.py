#!/usr/bin/env python3
"""
Kenosis Configuration Manager

Optional user defaults shared by the kenosis tools, read from
~/.kenosis/config.json. The file is only ever read; command line flags
always take precedence over anything it contains.

Example:
    {
      "version": "1.0",
      "cleanup": {"profile": "dev", "strict": false, "skip": ["docker"]},
      "purge": {"use_trash": true}
    }
"""

import json
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

PROFILE_NAMES = ("safe", "aggressive", "dev")

_BOOL_KEYS = ("strict", "include_volumes", "include_global_caches")


@dataclass
class KenosisConfig:
    """Main configuration container for all kenosis tools"""

    version: str = "1.0"
    cleanup: dict = field(default_factory=dict)
    purge: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "KenosisConfig":
        """Create from dictionary"""
        cleanup = data.get("cleanup", {})
        purge = data.get("purge", {})
        return cls(
            version=str(data.get("version", "1.0")),
            cleanup=cleanup if isinstance(cleanup, dict) else {},
            purge=purge if isinstance(purge, dict) else {},
        )

    def cleanup_defaults(self) -> dict[str, Any]:
        """Validated argparse defaults for the kenosis CLI

        Unknown keys are dropped and invalid values are skipped with a warning.
        """
        section = self.cleanup
        defaults: dict[str, Any] = {}

        profile = section.get("profile")
        if profile is not None:
            if profile in PROFILE_NAMES:
                defaults["profile"] = profile
            else:
                logger.warning("Ignoring invalid profile in config: %r", profile)

        for key in _BOOL_KEYS:
            if key not in section:
                continue
            if isinstance(section[key], bool):
                defaults[key] = section[key]
            else:
                logger.warning("Ignoring non-boolean %s in config: %r", key, section[key])

        skip = section.get("skip")
        if skip is not None:
            if isinstance(skip, list) and all(isinstance(s, str) for s in skip):
                defaults["skip"] = ",".join(skip)
            else:
                logger.warning("Ignoring invalid skip list in config: %r", skip)

        return defaults

    def purge_defaults(self) -> dict[str, Any]:
        """Validated argparse defaults for the aphairesis CLI"""
        use_trash = self.purge.get("use_trash")
        if isinstance(use_trash, bool):
            return {"trash": use_trash}
        if use_trash is not None:
            logger.warning("Ignoring non-boolean use_trash in config: %r", use_trash)
        return {}


class SharedConfigManager:
    """Loads the shared configuration for all kenosis tools"""

    def __init__(self, config_dir: Optional[pathlib.Path] = None):
        """Initialize configuration manager

        Args:
            config_dir: Override default .kenosis directory location
        """
        if config_dir:
            self.config_dir = config_dir
        else:
            self.config_dir = pathlib.Path.home() / ".kenosis"

        self.config_file = self.config_dir / "config.json"

    def load(self) -> KenosisConfig:
        """Load configuration from file"""
        if not self.config_file.exists():
            return KenosisConfig()
        try:
            with self.config_file.open() as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            # If config is unreadable, fall back to defaults
            logger.warning("Ignoring unreadable config %s: %s", self.config_file, e)
            return KenosisConfig()
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a JSON object", self.config_file)
            return KenosisConfig()
        return KenosisConfig.from_dict(data)
