"""Domain models for secret rendering."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union


class OutputFormat(str, Enum):
    """Supported output formats."""
    STDOUT = "stdout"
    JSON = "json"
    ENV = "env"
    YAML = "yaml"
    CSV = "csv"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class KeyValueMap:
    """Secret payload that is a JSON object; values are already stringified."""
    entries: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PlainText:
    """Secret payload with no key/value structure."""
    text: str


@dataclass(frozen=True)
class Binary:
    """Secret payload that is not valid UTF-8."""
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


SecretValue = Union[KeyValueMap, PlainText, Binary]


@dataclass(frozen=True)
class RawSecretResult:
    """
    Payload exactly as returned by the secret service.

    Exactly one of ``text`` or ``data`` is set. ``data`` carries the raw
    bytes when the service hands back bytes (Secret Manager always does).
    """
    text: Optional[str] = None
    data: Optional[bytes] = None

    @classmethod
    def from_text(cls, text: str) -> "RawSecretResult":
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes) -> "RawSecretResult":
        return cls(data=data)


@dataclass(frozen=True)
class OutputRequest:
    """One render operation, built once from validated CLI input."""
    secret_name: str
    output_format: OutputFormat
    explicit_path: Optional[str] = None


@dataclass(frozen=True)
class EncodedOutput:
    """Encoder result: bytes plus the filename used when no path is given."""
    content: bytes
    default_filename: str


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a render: where the output went."""
    destination: str
    success: bool
    value: SecretValue
