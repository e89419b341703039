"""Tests for clubcalendar.config_loader and clubcalendar.config_manager."""

import json
import os
from pathlib import Path

import pytest

from clubcalendar.config_loader import Config, load_config
from clubcalendar.config_manager import ConfigManager
from clubcalendar.exceptions import ConfigError

pytestmark = pytest.mark.unit


class TestConfigFromDict:
    """Tests for Config.from_dict coercion."""

    def test_from_dict_when_empty_then_defaults(self) -> None:
        cfg = Config.from_dict({})

        assert cfg.server_bind == "0.0.0.0"
        assert cfg.server_port == 8080
        assert cfg.log_level == "INFO"
        assert cfg.timezone == "UTC"
        assert cfg.overflow_cap == 2
        assert cfg.events_file is None
        assert cfg.detail_paths == {"training": "/trainings/{id}", "match": "/matches/{id}"}

    def test_from_dict_when_none_then_defaults(self) -> None:
        assert Config.from_dict(None) == Config()

    def test_from_dict_when_numeric_strings_then_coerced(self) -> None:
        cfg = Config.from_dict({"server_port": "9000", "overflow_cap": "3", "log_level": "debug"})

        assert cfg.server_port == 9000
        assert cfg.overflow_cap == 3
        assert cfg.log_level == "DEBUG"

    def test_from_dict_when_bad_int_then_default(self) -> None:
        assert Config.from_dict({"server_port": "eighty"}).server_port == 8080

    @pytest.mark.parametrize(("raw", "expected"), [(-5, 0), (100, 20), (4, 4)])
    def test_from_dict_when_overflow_cap_out_of_range_then_clamped(self, raw: int, expected: int) -> None:
        assert Config.from_dict({"overflow_cap": raw}).overflow_cap == expected

    def test_from_dict_when_detail_paths_then_merged_over_defaults(self) -> None:
        cfg = Config.from_dict(
            {"detail_paths": {"Match": "/games/{id}", "tournament": "/cups/{id}", "bad": "/nope"}}
        )

        assert cfg.detail_paths == {
            "training": "/trainings/{id}",
            "match": "/games/{id}",
            "tournament": "/cups/{id}",
        }

    def test_from_dict_when_legacy_default_timezone_key_then_used(self) -> None:
        assert Config.from_dict({"default_timezone": "Europe/Berlin"}).timezone == "Europe/Berlin"


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_config_when_missing_file_then_defaults(self, tmp_path: Path) -> None:
        assert load_config(str(tmp_path / "missing.yaml")) == Config()

    def test_load_config_when_yaml_then_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("server_port: 9100\ntimezone: Europe/Berlin\nevents_file: data/events.json\n")

        cfg = load_config(str(path))

        assert cfg.server_port == 9100
        assert cfg.timezone == "Europe/Berlin"
        assert cfg.events_file == "data/events.json"

    def test_load_config_when_json_then_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"overflow_cap": 4}))

        assert load_config(str(path)).overflow_cap == 4

    def test_load_config_when_empty_yaml_then_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == Config()

    def test_load_config_when_top_level_list_then_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping at top level"):
            load_config(str(path))

    def test_load_config_when_invalid_yaml_then_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("server_port: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(str(path))


class TestConfigManager:
    """Tests for ConfigManager environment handling."""

    def test_load_env_file_when_present_then_sets_unset_keys_only(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\nCLUBCALENDAR_WEB_PORT=9200\nCLUBCALENDAR_LOG_LEVEL='DEBUG'\nnot a pair\n"
        )
        monkeypatch.setenv("CLUBCALENDAR_LOG_LEVEL", "WARNING")

        loaded = ConfigManager(env_file).load_env_file()

        assert loaded == ["CLUBCALENDAR_WEB_PORT"]
        assert os.environ["CLUBCALENDAR_WEB_PORT"] == "9200"
        assert os.environ["CLUBCALENDAR_LOG_LEVEL"] == "WARNING"

    def test_load_env_file_when_missing_then_nothing_loaded(self, tmp_path: Path) -> None:
        assert ConfigManager(tmp_path / ".env").load_env_file() == []

    def test_build_config_from_env_when_vars_set_then_mapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLUBCALENDAR_WEB_HOST", "127.0.0.1")
        monkeypatch.setenv("CLUBCALENDAR_WEB_PORT", "9300")
        monkeypatch.setenv("CLUBCALENDAR_DEFAULT_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("CLUBCALENDAR_OVERFLOW_CAP", "5")
        monkeypatch.setenv("CLUBCALENDAR_EVENTS_FILE", "/srv/events.json")

        cfg = ConfigManager(Path("/nonexistent/.env")).build_config_from_env()

        assert cfg == {
            "server_bind": "127.0.0.1",
            "server_port": 9300,
            "timezone": "Europe/Berlin",
            "overflow_cap": 5,
            "events_file": "/srv/events.json",
        }

    def test_build_config_from_env_when_invalid_values_then_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLUBCALENDAR_WEB_PORT", "http")
        monkeypatch.setenv("CLUBCALENDAR_OVERFLOW_CAP", "many")
        monkeypatch.setenv("CLUBCALENDAR_DEFAULT_TIMEZONE", "Not/AZone")

        cfg = ConfigManager(Path("/nonexistent/.env")).build_config_from_env()

        assert cfg == {"timezone": "UTC"}
