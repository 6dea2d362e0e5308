"""GCP Secret Manager client wrapper."""
import logging
import os
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import secretmanager

from .config_loader import AUTH_SERVICE_ACCOUNT, ConfigError, load_config
from .errors import FetchError, FetchErrorKind
from .models import RawSecretResult

logger = logging.getLogger(__name__)

# Lazy loading: defer config loading until actually needed
# This allows CLI commands like --help to run without requiring a config file
_CONFIG: Optional[Dict[str, Any]] = None
_CONFIG_LOADED = False


def _get_config() -> Dict[str, Any]:
    """
    Lazy load configuration on first use.

    Sets GOOGLE_APPLICATION_CREDENTIALS when the config names a service
    account key file.

    Raises:
        FileNotFoundError: If no config file exists
        ConfigError: If config file is invalid
    """
    global _CONFIG, _CONFIG_LOADED

    if not _CONFIG_LOADED:
        _CONFIG = load_config()
        _CONFIG_LOADED = True

        auth = _CONFIG.get('authentication', {})
        if auth.get('type') == AUTH_SERVICE_ACCOUNT:
            os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = auth['service_account_path']
            logger.info(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {auth['service_account_path']}")

    return _CONFIG


def _fetch_error(secret_name: str, error: Exception) -> FetchError:
    """Translate an SDK exception into a FetchError."""
    if isinstance(error, api_exceptions.NotFound):
        kind = FetchErrorKind.NOT_FOUND
        message = f"secret '{secret_name}' not found"
    elif isinstance(error, (api_exceptions.PermissionDenied,
                            api_exceptions.Unauthenticated,
                            auth_exceptions.DefaultCredentialsError)):
        kind = FetchErrorKind.ACCESS_DENIED
        message = f"access denied to secret '{secret_name}': {error}"
    elif isinstance(error, (api_exceptions.ServiceUnavailable,
                            api_exceptions.DeadlineExceeded,
                            api_exceptions.RetryError)):
        kind = FetchErrorKind.NETWORK_ERROR
        message = f"could not reach Secret Manager for '{secret_name}': {error}"
    else:
        kind = FetchErrorKind.OTHER
        message = f"failed to fetch secret '{secret_name}': {error}"
    return FetchError(kind, message)


class GCPSecretClient:
    """Wrapper around GCP Secret Manager client."""

    def __init__(self, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """
        Lazy-initialize client.

        The config is loaded first so a configured service account key is in
        GOOGLE_APPLICATION_CREDENTIALS however the project id was chosen.

        Raises:
            ConfigError: If config file is invalid
        """
        if self._client is None:
            try:
                _get_config()
            except FileNotFoundError as e:
                logger.debug(f"No config file, using application default credentials: {e}")
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_project_id(self) -> Optional[str]:
        """
        Get GCP project ID from environment variable or config.

        Priority order:
        1. GCP_PROJECT environment variable (allows override)
        2. Config file (primary source)

        Returns:
            Project ID string, or None if not found
        """
        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
            return gcp_project_env

        try:
            config = _get_config()
            project_id = config['gcp']['project_id']
            logger.debug(f"Using project_id from config: {project_id}")
            return project_id
        except (FileNotFoundError, ConfigError) as e:
            logger.error(f"Failed to load config: {e}")

        logger.error("Project ID not found. Please set GCP_PROJECT environment variable or configure project_id in config file")
        return None

    def fetch_secret(self, secret_name: str, project_id: str, version: str = "latest") -> RawSecretResult:
        """
        Fetch a secret version's payload from GCP Secret Manager.

        Args:
            secret_name: Name of the secret
            project_id: GCP project ID
            version: Version number or alias

        Returns:
            Payload bytes, untouched

        Raises:
            FetchError: If the secret cannot be retrieved
        """
        name = f"projects/{project_id}/secrets/{secret_name}/versions/{version}"
        try:
            response = self.client.access_secret_version(request={"name": name})
        except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise _fetch_error(secret_name, e) from e

        data = response.payload.data
        logger.debug(f"Fetched {secret_name} ({len(data)} bytes)")
        return RawSecretResult.from_bytes(data)

    def list_secret_names(self, project_id: str, filter_text: Optional[str] = None) -> List[str]:
        """
        List secret names in a project, sorted alphabetically.

        Args:
            project_id: GCP project ID
            filter_text: Keep only names containing this text

        Raises:
            FetchError: If listing fails
        """
        names = []
        try:
            for secret in self.client.list_secrets(request={"parent": f"projects/{project_id}"}):
                name = secret.name.rsplit("/", 1)[-1]
                if filter_text is None or filter_text in name:
                    names.append(name)
        except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
            raise _fetch_error(f"projects/{project_id}", e) from e

        return sorted(names)
