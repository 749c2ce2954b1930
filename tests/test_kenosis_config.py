"""Tests for the read-only shared configuration"""

import json

from kenosis_config import KenosisConfig, SharedConfigManager


def write_config(config_dir, data):
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text(json.dumps(data) if not isinstance(data, str) else data)


class TestSharedConfigManager:
    def test_missing_file_gives_defaults_without_creating_dir(self, tmp_path):
        config_dir = tmp_path / ".kenosis"
        config = SharedConfigManager(config_dir).load()
        assert config == KenosisConfig()
        assert not config_dir.exists()

    def test_loads_sections(self, tmp_path):
        write_config(tmp_path, {"cleanup": {"profile": "dev"}, "purge": {"use_trash": True}})
        config = SharedConfigManager(tmp_path).load()
        assert config.cleanup == {"profile": "dev"}
        assert config.purge == {"use_trash": True}

    def test_invalid_json_gives_defaults(self, tmp_path, caplog):
        write_config(tmp_path, "{not json")
        assert SharedConfigManager(tmp_path).load() == KenosisConfig()
        assert "Ignoring unreadable config" in caplog.text

    def test_non_object_gives_defaults(self, tmp_path):
        write_config(tmp_path, [1, 2])
        assert SharedConfigManager(tmp_path).load() == KenosisConfig()

    def test_malformed_sections_ignored(self):
        config = KenosisConfig.from_dict({"version": 2, "cleanup": ["profile"], "purge": None})
        assert config == KenosisConfig(version="2")


class TestCleanupDefaults:
    def test_valid_values_pass_through(self):
        config = KenosisConfig(
            cleanup={"profile": "aggressive", "strict": False, "include_volumes": True, "skip": ["docker", "go"]}
        )
        assert config.cleanup_defaults() == {
            "profile": "aggressive",
            "strict": False,
            "include_volumes": True,
            "skip": "docker,go",
        }

    def test_invalid_values_dropped(self, caplog):
        config = KenosisConfig(cleanup={"profile": "nuclear", "strict": "no", "skip": "docker", "colour": "red"})
        assert config.cleanup_defaults() == {}
        assert "invalid profile" in caplog.text
        assert "non-boolean strict" in caplog.text


class TestPurgeDefaults:
    def test_use_trash_maps_to_flag(self):
        assert KenosisConfig(purge={"use_trash": True}).purge_defaults() == {"trash": True}

    def test_missing_or_invalid(self):
        assert KenosisConfig().purge_defaults() == {}
        assert KenosisConfig(purge={"use_trash": "yes"}).purge_defaults() == {}
