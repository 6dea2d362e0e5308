"""Tests for preferences, config loading and the config CLI commands.

This test suite validates:
- Preferences module functionality
- Config loader functionality and schema validation
- Dynamic config path resolution (no module-level caching)
- CLI commands for config management
"""
import json
from argparse import Namespace

import pytest
import yaml

from gsm2env.secrets.domains import preferences
from gsm2env.secrets.domains import config_loader
from gsm2env.secrets.domains.config_loader import ConfigError


def _write_config(path, content):
    with open(path, 'w') as f:
        yaml.dump(content, f)
    return path


class TestPreferencesModule:
    """Test suite for preferences module."""

    def test_get_preference_returns_none_when_not_set(self, temp_home):
        """Test that get_preference returns None when preference is not set."""
        assert preferences.get_preference(preferences.CONFIG_PATH) is None

    def test_set_preference_stores_value(self, temp_home):
        """Test that set_preference stores a value."""
        preferences.set_preference(preferences.CONFIG_PATH, "/path/to/config.yml")

        assert preferences.get_preference(preferences.CONFIG_PATH) == "/path/to/config.yml"

    def test_clear_preference_removes_value(self, temp_home):
        """Test that clear_preference removes a value and reports it."""
        preferences.set_preference(preferences.OUTPUT_FORMAT, "json")

        assert preferences.clear_preference(preferences.OUTPUT_FORMAT) is True
        assert preferences.get_preference(preferences.OUTPUT_FORMAT) is None

    def test_clear_nonexistent_preference(self, temp_home):
        """Test clearing a preference that doesn't exist."""
        assert preferences.clear_preference("nonexistent_key") is False

    def test_preferences_persisted_to_json_file(self, temp_home):
        """Test that preferences are persisted to the JSON file."""
        preferences.set_preference(preferences.OUTPUT_FORMAT, "yaml")

        with open(preferences.PREFERENCES_FILE, 'r') as f:
            data = json.load(f)

        assert data == {"output_format": "yaml"}

    def test_get_all_preferences(self, temp_home):
        """Test getting all preferences."""
        preferences.set_preference(preferences.CONFIG_PATH, "/path/to/config.yml")
        preferences.set_preference(preferences.OUTPUT_FORMAT, "csv")

        assert preferences.get_all_preferences() == {
            "config_path": "/path/to/config.yml",
            "output_format": "csv",
        }

    def test_corrupt_preferences_file_treated_as_empty(self, temp_config_dir):
        """Test that an unparseable preferences file is ignored."""
        preferences.PREFERENCES_FILE.write_text("{not json")

        assert preferences.get_all_preferences() == {}

    def test_non_object_preferences_file_treated_as_empty(self, temp_config_dir):
        """Test that a JSON file holding a list is ignored."""
        preferences.PREFERENCES_FILE.write_text("[1, 2]")

        assert preferences.get_preference(preferences.CONFIG_PATH) is None


class TestConfigLoader:
    """Test suite for config_loader module."""

    def test_get_config_path_with_preference_set(self, temp_home, tmp_path, sample_config_content):
        """Test _get_config_path returns preference path when set."""
        custom = _write_config(tmp_path / "custom.yml", sample_config_content)
        preferences.set_preference(preferences.CONFIG_PATH, str(custom))

        assert config_loader._get_config_path() == str(custom)

    def test_get_config_path_returns_default_location(self, temp_home, temp_config_file):
        """Test _get_config_path returns default location without a preference."""
        assert config_loader._get_config_path() == str(temp_config_file)

    def test_get_config_path_raises_when_file_missing(self, temp_home):
        """Test _get_config_path raises FileNotFoundError when config missing."""
        with pytest.raises(FileNotFoundError) as exc_info:
            config_loader._get_config_path()

        assert "Configuration file not found" in str(exc_info.value)
        assert "gsm2env config init" in str(exc_info.value)

    def test_preference_with_nonexistent_path_falls_back(self, temp_home, temp_config_file, tmp_path):
        """Test a stale preference falls back to the default location."""
        preferences.set_preference(preferences.CONFIG_PATH, str(tmp_path / "nonexistent.yml"))

        assert config_loader._get_config_path() == str(temp_config_file)

    def test_config_path_not_cached_at_module_level(self, temp_home, tmp_path, sample_config_content):
        """Test that changing preferences takes effect without a restart."""
        first = dict(sample_config_content, gcp={"project_id": "project-one"})
        second = dict(sample_config_content, gcp={"project_id": "project-two"})
        config1 = _write_config(tmp_path / "config1.yml", first)
        config2 = _write_config(tmp_path / "config2.yml", second)

        preferences.set_preference(preferences.CONFIG_PATH, str(config1))
        assert config_loader.load_config()["gcp"]["project_id"] == "project-one"

        preferences.set_preference(preferences.CONFIG_PATH, str(config2))
        assert config_loader.load_config()["gcp"]["project_id"] == "project-two"

    def test_load_config_success(self, temp_home, temp_config_file):
        """Test load_config succeeds with valid config."""
        config = config_loader.load_config()

        assert config["authentication"]["type"] == "service_account"
        assert config["gcp"]["project_id"] == "test-project"

    def test_load_config_accepts_application_default(self, temp_config_dir):
        """Test application_default authentication needs no key file."""
        _write_config(temp_config_dir / "config.yml", {
            "authentication": {"type": "application_default"},
            "gcp": {"project_id": "adc-project"},
        })

        assert config_loader.load_config()["gcp"]["project_id"] == "adc-project"

    def test_load_config_validates_missing_authentication(self, temp_config_dir):
        """Test load_config validates missing authentication section."""
        _write_config(temp_config_dir / "config.yml", {"gcp": {"project_id": "test"}})

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "authentication" in str(exc_info.value)

    def test_load_config_validates_missing_gcp_section(self, temp_config_dir, sample_config_content):
        """Test load_config validates missing GCP section."""
        del sample_config_content["gcp"]
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "gcp" in str(exc_info.value)

    def test_load_config_validates_service_account_file_exists(self, temp_config_dir, sample_config_content):
        """Test load_config validates service account file exists."""
        sample_config_content["authentication"]["service_account_path"] = "/nonexistent/sa.json"
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "Service account file not found" in str(exc_info.value)

    def test_unsupported_auth_type(self, temp_config_dir, sample_config_content):
        """Test handling of unsupported authentication type."""
        sample_config_content["authentication"]["type"] = "oauth2"
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "Unsupported authentication type" in str(exc_info.value)

    def test_invalid_output_format(self, temp_config_dir, sample_config_content):
        """Test that output.format must name a known format."""
        sample_config_content["output"] = {"format": "xml"}
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "output.format" in str(exc_info.value)

    def test_configured_output_format(self, temp_config_dir, sample_config_content):
        """Test the default format is read from the output section."""
        sample_config_content["output"] = {"format": "yaml"}
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        assert config_loader.configured_output_format() == "yaml"

    def test_configured_output_format_without_config(self, temp_home):
        """Test a missing config file yields no default format."""
        assert config_loader.configured_output_format() is None

    def test_empty_config_file(self, temp_config_dir):
        """Test handling of empty config file."""
        (temp_config_dir / "config.yml").write_text("")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "empty" in str(exc_info.value).lower()

    def test_invalid_yaml_config(self, temp_config_dir):
        """Test handling of invalid YAML."""
        (temp_config_dir / "config.yml").write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "parse" in str(exc_info.value).lower()


class TestCLICommands:
    """Test suite for config CLI commands."""

    def test_config_set_path_validates_file_exists(self, temp_home, tmp_path):
        """Test that config set-path validates file exists."""
        from gsm2env.cli.main import cmd_config_set_path

        with pytest.raises(SystemExit) as exc_info:
            cmd_config_set_path(Namespace(path=str(tmp_path / "nonexistent.yml")))

        assert exc_info.value.code == 1

    def test_config_set_path_stores_absolute_path(self, temp_home, temp_config_file):
        """Test that config set-path stores absolute path."""
        from gsm2env.cli.main import cmd_config_set_path

        cmd_config_set_path(Namespace(path=str(temp_config_file)))

        assert preferences.get_preference(preferences.CONFIG_PATH) == str(temp_config_file.resolve())

    def test_config_set_format_stores_preference(self, temp_home, capsys):
        """Test that config set-format stores the default output format."""
        from gsm2env.cli.main import cmd_config_set_format

        cmd_config_set_format(Namespace(format="csv"))

        assert preferences.get_preference(preferences.OUTPUT_FORMAT) == "csv"
        assert "csv" in capsys.readouterr().out

    def test_config_show_with_preference(self, temp_home, tmp_path, sample_config_content, capsys):
        """Test config show command with preferences set."""
        from gsm2env.cli.main import cmd_config_show

        custom = _write_config(tmp_path / "custom.yml", sample_config_content)
        preferences.set_preference(preferences.CONFIG_PATH, str(custom))
        preferences.set_preference(preferences.OUTPUT_FORMAT, "json")

        cmd_config_show(Namespace())

        out = capsys.readouterr().out
        assert str(custom) in out
        assert "Source: preference" in out
        assert "Default output format: json (preference)" in out

    def test_config_show_without_preference(self, temp_home, temp_config_file, capsys):
        """Test config show command without preference."""
        from gsm2env.cli.main import cmd_config_show

        cmd_config_show(Namespace())

        out = capsys.readouterr().out
        assert str(temp_config_file) in out
        assert "Source: default" in out
        assert "Default output format: env" in out

    def test_config_show_reports_config_output_format(self, temp_config_dir, sample_config_content, capsys):
        """Test output.format from the config file is shown when no preference is set."""
        from gsm2env.cli.main import cmd_config_show

        sample_config_content["output"] = {"format": "yaml"}
        _write_config(temp_config_dir / "config.yml", sample_config_content)

        cmd_config_show(Namespace())

        assert "Default output format: yaml (config)" in capsys.readouterr().out

    def test_config_clear_removes_preferences(self, temp_home, temp_config_file, capsys):
        """Test config clear command removes both preferences."""
        from gsm2env.cli.main import cmd_config_clear

        preferences.set_preference(preferences.CONFIG_PATH, str(temp_config_file))
        preferences.set_preference(preferences.OUTPUT_FORMAT, "yaml")

        cmd_config_clear(Namespace())

        assert preferences.get_all_preferences() == {}
        assert "cleared" in capsys.readouterr().out.lower()

    def test_config_init_writes_application_default_config(self, temp_home, monkeypatch):
        """Test config init writes a config file from prompts."""
        from gsm2env.cli.main import cmd_config_init

        answers = iter(["my-project", "", "json"])
        monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

        cmd_config_init(Namespace())

        config = config_loader.load_config()
        assert config["authentication"] == {"type": "application_default"}
        assert config["gcp"]["project_id"] == "my-project"
        assert config["output"]["format"] == "json"

    def test_config_init_keeps_existing_config(self, temp_home, temp_config_file, monkeypatch):
        """Test config init leaves an existing config alone unless confirmed."""
        from gsm2env.cli.main import cmd_config_init

        before = temp_config_file.read_text()
        monkeypatch.setattr("builtins.input", lambda prompt: "n")

        cmd_config_init(Namespace())

        assert temp_config_file.read_text() == before
