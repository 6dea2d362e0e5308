"""Workflow for fetching secrets and rendering them to a destination."""
import logging
import os
from typing import List, Optional

from ..domains.classifier import classify
from ..domains.config_loader import ConfigError
from ..domains.encoders import encode
from ..domains.errors import EncodingError, RenderError
from ..domains.gcp_client import GCPSecretClient
from ..domains.models import OutputFormat, OutputRequest, RawSecretResult, RenderResult
from ..domains.output_router import OutputRouter

logger = logging.getLogger(__name__)


def render(
    secret_name: str,
    raw: RawSecretResult,
    output_format: OutputFormat,
    explicit_path: Optional[str] = None,
    router: Optional[OutputRouter] = None,
) -> RenderResult:
    """
    Classify a fetched payload, encode it and deliver it.

    Args:
        secret_name: Name of the secret (for messages only)
        raw: Payload returned by the secret service
        output_format: Selected output format
        explicit_path: File path overriding the format's default destination
        router: Output router (defaults to console/current directory)

    Returns:
        RenderResult describing the destination

    Raises:
        RenderError: If encoding or writing fails, tagged with the stage
    """
    request = OutputRequest(secret_name, OutputFormat(output_format), explicit_path)
    router = router or OutputRouter()

    value = classify(raw)
    logger.debug(f"Secret '{request.secret_name}' classified as {type(value).__name__}")

    try:
        encoded = encode(value, request.output_format)
    except EncodingError as e:
        raise RenderError(RenderError.ENCODE, e) from e

    try:
        destination = router.route(value, encoded, request.output_format, request.explicit_path)
    except EncodingError as e:
        raise RenderError(RenderError.ENCODE, e) from e
    except OSError as e:
        path = request.explicit_path or os.path.join(router.cwd or "", encoded.default_filename)
        raise RenderError(RenderError.WRITE, e, path=path) from e

    return RenderResult(destination=destination, success=True, value=value)


def _resolve_project(client: GCPSecretClient, project_id: Optional[str]) -> str:
    project_id = project_id or client.get_project_id()
    if not project_id:
        raise ConfigError(
            "Project ID not found. Set GCP_PROJECT, pass --project-id, "
            "or configure gcp.project_id in the config file"
        )
    return project_id


def get_secret(
    secret_name: str,
    output_format: OutputFormat,
    explicit_path: Optional[str] = None,
    project_id: Optional[str] = None,
    version: str = "latest",
    client: Optional[GCPSecretClient] = None,
    router: Optional[OutputRouter] = None,
) -> RenderResult:
    """
    Fetch a secret from GCP Secret Manager and render it.

    Raises:
        ConfigError: If no project ID can be determined
        FetchError: If the secret cannot be retrieved
        RenderError: If encoding or writing fails
    """
    client = client or GCPSecretClient()
    project_id = _resolve_project(client, project_id)

    raw = client.fetch_secret(secret_name, project_id, version=version)
    return render(secret_name, raw, output_format, explicit_path, router=router)


def list_secrets(
    filter_text: Optional[str] = None,
    project_id: Optional[str] = None,
    client: Optional[GCPSecretClient] = None,
) -> List[str]:
    """Names of the project's secrets, optionally filtered by substring."""
    client = client or GCPSecretClient()
    project_id = _resolve_project(client, project_id)
    return client.list_secret_names(project_id, filter_text)
