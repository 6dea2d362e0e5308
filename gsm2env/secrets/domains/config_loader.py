"""Configuration loader for gsm2env."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import OutputFormat
from .preferences import CONFIG_PATH, get_preference

logger = logging.getLogger(__name__)

AUTH_SERVICE_ACCOUNT = "service_account"
AUTH_APPLICATION_DEFAULT = "application_default"
AUTH_TYPES = (AUTH_SERVICE_ACCOUNT, AUTH_APPLICATION_DEFAULT)


class ConfigError(Exception):
    """Configuration error exception."""


def default_config_path() -> Path:
    return Path.home() / ".config" / "gsm2env" / "config.yml"


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/gsm2env/preferences.json)
    2. Default location: ~/.config/gsm2env/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference(CONFIG_PATH)
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   gsm2env config set-path /path/to/your/config.yml\n\n"
        "3. Run interactive setup:\n"
        "   gsm2env config init\n\n"
        "Alternatively set GCP_PROJECT and rely on Application Default Credentials."
    )


def _validate_authentication(auth: Any, config_path: str) -> None:
    if not isinstance(auth, dict) or 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")

    if auth['type'] not in AUTH_TYPES:
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Supported types: {', '.join(AUTH_TYPES)}."
        )

    if auth['type'] != AUTH_SERVICE_ACCOUNT:
        return

    if 'service_account_path' not in auth:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    service_account_path = auth['service_account_path']
    if not os.path.exists(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )
    if not os.path.isfile(service_account_path):
        raise ConfigError(f"Service account path is not a file: {service_account_path}")


def _validate_output(output: Any) -> None:
    if not isinstance(output, dict):
        raise ConfigError("'output' section in config must be a mapping")

    fmt = output.get('format')
    if fmt is None:
        return
    valid = [f.value for f in OutputFormat]
    if fmt not in valid:
        raise ConfigError(
            f"Invalid 'output.format' in config: {fmt}\n"
            f"Expected one of: {', '.join(valid)}"
        )


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - authentication: dict with type and, for service accounts, service_account_path
        - gcp: dict with project_id
        - output (optional): dict with default format

    Raises:
        FileNotFoundError: If no config file exists
        ConfigError: If the config file is unreadable or invalid
    """
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")
    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if 'authentication' not in config:
        raise ConfigError(
            f"Missing 'authentication' section in config at {config_path}\n"
            f"Required format:\n"
            f"authentication:\n"
            f"  type: service_account\n"
            f"  service_account_path: /path/to/service-account.json"
        )
    _validate_authentication(config['authentication'], config_path)

    if not isinstance(config.get('gcp'), dict):
        raise ConfigError(
            f"Missing 'gcp' section in config at {config_path}\n"
            f"Required format:\n"
            f"gcp:\n"
            f"  project_id: your-project-id"
        )
    if 'project_id' not in config['gcp']:
        raise ConfigError("Missing 'gcp.project_id' in config")

    if 'output' in config:
        _validate_output(config['output'])

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using authentication type: {config['authentication']['type']}")
    logger.debug(f"Using project ID: {config['gcp']['project_id']}")

    return config


def configured_output_format() -> Optional[str]:
    """Default output format from the config file, if one is set and readable."""
    try:
        config = load_config()
    except (FileNotFoundError, ConfigError) as e:
        logger.debug(f"No output format from config: {e}")
        return None
    return config.get('output', {}).get('format')
