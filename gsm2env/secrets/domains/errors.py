"""Error types raised while fetching and rendering secrets."""
from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    ACCESS_DENIED = "AccessDenied"
    NETWORK_ERROR = "NetworkError"
    OTHER = "Other"


class FetchError(Exception):
    """Secret could not be retrieved from the secret service."""

    def __init__(self, kind: FetchErrorKind, message: str):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message


class EncodingError(Exception):
    """Content cannot be represented in the target format, even escaped."""

    def __init__(self, field: str, output_format: str, reason: str):
        super().__init__(f"Cannot encode field '{field}' as {output_format}: {reason}")
        self.field = field
        self.output_format = output_format
        self.reason = reason


class RenderError(Exception):
    """
    Failure during rendering, tagged with the stage that failed.

    Args:
        stage: "encode" or "write"
        cause: The underlying EncodingError or OSError
        path: Destination path for write failures
    """

    ENCODE = "encode"
    WRITE = "write"

    def __init__(self, stage: str, cause: Exception, path: Optional[str] = None):
        if stage == self.WRITE and path:
            message = f"Failed to write {path}: {cause}"
        else:
            message = f"Failed to {stage} secret: {cause}"
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.path = path
