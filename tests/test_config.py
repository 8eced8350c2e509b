"""Tests for configuration loading and merging."""

import json

import pytest

from datasync.config import (
    SyncSettings,
    default_config_path,
    load_config_file,
    merge_settings,
    parse_config_data,
    save_config_file,
)
from datasync.exceptions import ConfigError
from datasync.sync.modes import SyncDirection


class TestParseConfigData:
    """Tests for parse_config_data."""

    def test_camel_case_keys(self):
        overrides = parse_config_data(
            {
                "direction": "Pull",
                "cleanRemote": True,
                "folderName": "models",
                "exclusions": ["*.tmp"],
                "maxRetries": 5,
                "retryDelay": 2,
            }
        )

        assert overrides == {
            "direction": SyncDirection.PULL,
            "clean_remote": True,
            "folder_name": "models",
            "exclusions": ["*.tmp"],
            "max_retries": 5,
            "retry_delay": 2.0,
        }

    def test_unknown_key_is_ignored(self, caplog):
        overrides = parse_config_data({"colour": "blue", "dryRun": True})

        assert overrides == {"dry_run": True}
        assert "Ignoring unknown config key: colour" in caplog.text

    def test_null_values_are_skipped(self):
        assert parse_config_data({"folderName": None}) == {}

    def test_single_exclusion_string(self):
        assert parse_config_data({"exclusions": "*.log"}) == {"exclusions": ["*.log"]}

    def test_relative_log_file_resolved_against_base(self, tmp_path):
        overrides = parse_config_data({"logFile": "sync.log"}, base_dir=tmp_path)

        assert overrides["log_file"] == tmp_path / "sync.log"

    @pytest.mark.parametrize(
        "data",
        [
            {"maxRetries": "3"},
            {"maxRetries": True},
            {"retryDelay": "fast"},
            {"cleanLocal": "yes"},
            {"exclusions": ["*.tmp", 3]},
            {"direction": "sideways"},
            {"folderName": 7},
        ],
    )
    def test_wrong_types_rejected(self, data):
        with pytest.raises(ConfigError):
            parse_config_data(data)


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_missing_file(self, tmp_path):
        assert load_config_file(tmp_path / ".datasync.json") == {}

    def test_valid_file(self, tmp_path):
        path = tmp_path / ".datasync.json"
        path.write_text(json.dumps({"cleanLocal": True, "logFile": "logs/run.log"}))

        overrides = load_config_file(path)

        assert overrides["clean_local"] is True
        assert overrides["log_file"] == tmp_path / "logs" / "run.log"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / ".datasync.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config_file(path)

    def test_non_object_root(self, tmp_path):
        path = tmp_path / ".datasync.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigError, match="JSON object"):
            load_config_file(path)


class TestMergeSettings:
    """Tests for merge_settings."""

    def test_defaults(self):
        settings = merge_settings()

        assert settings == SyncSettings()
        assert settings.folder_name == "data"
        assert settings.max_retries == 3
        assert settings.direction == SyncDirection.PUSH

    def test_cli_overrides_file(self):
        settings = merge_settings(
            {"max_retries": 5, "folder_name": "models"}, {"max_retries": 2}
        )

        assert settings.max_retries == 2
        assert settings.folder_name == "models"

    def test_none_does_not_override(self):
        settings = merge_settings({"clean_remote": True}, {"clean_remote": None})

        assert settings.clean_remote is True

    def test_exclusions_replaced_not_appended(self):
        settings = merge_settings({"exclusions": ["*.tmp"]}, {"exclusions": ["*.log"]})

        assert settings.exclusions == ["*.log"]

    def test_custom_defaults(self):
        base = SyncSettings(retry_delay=0.0)

        assert merge_settings(defaults=base).retry_delay == 0.0

    def test_direction_string_normalized(self):
        settings = merge_settings(cli_overrides={"direction": "pull"})

        assert settings.direction == SyncDirection.PULL

    def test_unknown_setting(self):
        with pytest.raises(ConfigError, match="Unknown setting"):
            merge_settings({"colour": "blue"})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_retries": 0},
            {"retry_delay": -1.0},
            {"folder_name": ""},
            {"folder_name": ".."},
            {"folder_name": "a/b"},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigError):
            merge_settings(cli_overrides=overrides)


class TestSaveConfigFile:
    """Tests for writing config files."""

    def test_default_config_path(self, tmp_path):
        assert default_config_path(tmp_path) == tmp_path / ".datasync.json"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / ".datasync.json"
        settings = SyncSettings(
            direction=SyncDirection.PULL, exclusions=["*.tmp"], max_retries=4
        )

        save_config_file(settings, path)

        data = json.loads(path.read_text())
        assert data["direction"] == "pull"
        assert data["exclusions"] == ["*.tmp"]
        assert data["logFile"] is None
        assert merge_settings(load_config_file(path)) == settings
