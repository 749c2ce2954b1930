"""Tests for profiles, run settings and task selection"""

import logging

import pytest

from cleanup_config import PROFILE_TASKS, TASK_CATALOGUE, Profile, RunConfig, base_tasks, select_tasks


class TestProfiles:
    def test_profiles_nest(self):
        safe, dev, aggressive = (set(base_tasks(p)) for p in (Profile.SAFE, Profile.DEV, Profile.AGGRESSIVE))
        assert safe < dev < aggressive
        assert aggressive == set(TASK_CATALOGUE)

    def test_safe_profile_tasks(self):
        assert base_tasks(Profile.SAFE) == ("docker", "go", "node", "python", "ruby", "brew")

    @pytest.mark.parametrize("profile", list(Profile))
    def test_profile_order_follows_catalogue(self, profile):
        tasks = PROFILE_TASKS[profile]
        assert list(tasks) == [t for t in TASK_CATALOGUE if t in tasks]


class TestRunConfig:
    def test_defaults_are_safe(self):
        config = RunConfig()
        assert config.profile is Profile.SAFE
        assert config.dry_run is True
        assert config.strict is True
        assert config.assume_yes is False

    def test_global_caches_follow_profile_or_flag(self):
        assert not RunConfig(profile=Profile.DEV).global_caches_enabled
        assert RunConfig(profile=Profile.DEV, include_global_caches=True).global_caches_enabled
        assert RunConfig(profile=Profile.AGGRESSIVE).global_caches_enabled

    def test_settings_line(self):
        config = RunConfig(profile=Profile.DEV, dry_run=False, only=frozenset({"node", "brew"}))
        assert config.settings_line() == "Settings: profile=dev dry_run=0 yes=0 strict=1 only=brew,node skip=none"

    def test_settings_line_defaults(self):
        assert RunConfig().settings_line() == "Settings: profile=safe dry_run=1 yes=0 strict=1 only=all skip=none"

    def test_display_dict(self):
        shown = RunConfig(skip=frozenset({"docker"})).as_display_dict()
        assert shown["Mode"] == "dry-run"
        assert shown["Skip"] == ["docker"]
        assert shown["Only"] == "all"


class TestSelectTasks:
    def test_profile_tasks_by_default(self):
        assert select_tasks(RunConfig(profile=Profile.DEV)) == list(base_tasks(Profile.DEV))

    def test_only_keeps_catalogue_order(self):
        config = RunConfig(only=frozenset({"brew", "node"}))
        assert select_tasks(config) == ["node", "brew"]

    def test_skip_drops(self):
        config = RunConfig(skip=frozenset({"docker", "go"}))
        assert select_tasks(config) == ["node", "python", "ruby", "brew"]

    def test_skip_wins_over_only(self):
        config = RunConfig(only=frozenset({"node"}), skip=frozenset({"node"}))
        assert select_tasks(config) == []

    def test_only_cannot_widen_profile(self, caplog):
        caplog.set_level(logging.INFO, logger="cleanup_config")
        config = RunConfig(profile=Profile.SAFE, only=frozenset({"cargo", "node"}))
        assert select_tasks(config) == ["node"]
        assert "cargo is not part of the safe profile" in caplog.text

    def test_unknown_names_warn(self, caplog):
        config = RunConfig(only=frozenset({"npm"}), skip=frozenset({"bogus"}))
        assert select_tasks(config) == []
        assert "Unknown task: bogus" in caplog.text
        assert "Unknown task: npm" in caplog.text
