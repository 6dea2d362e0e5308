"""Shared fixtures: isolated home directory and a fresh lazy-config cache."""
import json
from pathlib import Path

import pytest
import yaml

from gsm2env.secrets.domains import gcp_client
from gsm2env.secrets.domains import preferences


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "gsm2env"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    return fake_home


@pytest.fixture
def temp_config_dir(temp_home):
    """Fixture to create temporary config directory."""
    config_dir = temp_home / ".config" / "gsm2env"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def service_account_file(tmp_path):
    sa_file = tmp_path / "test-sa.json"
    sa_file.write_text(json.dumps({"type": "service_account"}))
    return sa_file


@pytest.fixture
def sample_config_content(service_account_file):
    """Sample valid config content."""
    return {
        "authentication": {
            "type": "service_account",
            "service_account_path": str(service_account_file)
        },
        "gcp": {
            "project_id": "test-project"
        }
    }


@pytest.fixture
def temp_config_file(temp_config_dir, sample_config_content):
    """Fixture to create a config file with valid content at the default location."""
    config_file = temp_config_dir / "config.yml"
    with open(config_file, 'w') as f:
        yaml.dump(sample_config_content, f)
    return config_file


@pytest.fixture(autouse=True)
def reset_lazy_config(monkeypatch):
    """Each test starts without a cached config or ambient project."""
    monkeypatch.setattr(gcp_client, "_CONFIG", None)
    monkeypatch.setattr(gcp_client, "_CONFIG_LOADED", False)
    for name in ("GCP_PROJECT", "GOOGLE_APPLICATION_CREDENTIALS"):
        # setenv first so the original state is restored even if code sets it
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
