"""Resolve where rendered output goes and write it there."""
import logging
import os
import sys
import tempfile
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, TextIO, Tuple

from .encoders import raw_content
from .models import EncodedOutput, OutputFormat, SecretValue

logger = logging.getLogger(__name__)

CONSOLE = "stdout"


class Route(Enum):
    RAW_TO_FILE = "raw_to_file"
    CONSOLE = "console"
    ENCODED_TO_FILE = "encoded_to_file"
    ENCODED_TO_DEFAULT_FILE = "encoded_to_default_file"


# (format is stdout, explicit path given) -> route
ROUTES: Dict[Tuple[bool, bool], Route] = {
    (True, True): Route.RAW_TO_FILE,
    (True, False): Route.CONSOLE,
    (False, True): Route.ENCODED_TO_FILE,
    (False, False): Route.ENCODED_TO_DEFAULT_FILE,
}


def resolve_route(output_format: OutputFormat, explicit_path: Optional[str]) -> Route:
    """Look up the route for a format and an optional ``--file`` path."""
    return ROUTES[(OutputFormat(output_format) is OutputFormat.STDOUT, bool(explicit_path))]


def write_file(path: str, content: bytes) -> None:
    """
    Replace ``path`` with ``content`` in one step.

    Bytes are written to a temporary file beside the destination and renamed
    over it, so a failed write leaves no partial file behind. The file is
    created readable by the owner only.

    Raises:
        OSError: If the directory is missing or not writable
    """
    target = Path(path)
    fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.replace(tmp_path, target)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class OutputRouter:
    """Write encoded secrets to the console or a file.

    Precedence:
        1. Explicit path: write the encoded bytes there. With stdout format,
           write the unformatted secret content instead.
        2. stdout format: print the console presentation.
        3. Otherwise: write the format's default filename in ``cwd``.
    """

    def __init__(self, cwd: Optional[str] = None, stream: Optional[TextIO] = None):
        self.cwd = cwd
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # resolved late so redirected/captured stdout is honoured
        return self._stream or sys.stdout

    def route(
        self,
        value: SecretValue,
        encoded: EncodedOutput,
        output_format: OutputFormat,
        explicit_path: Optional[str] = None,
    ) -> str:
        """
        Deliver ``encoded`` and return a description of the destination.

        Raises:
            OSError: If writing the destination file fails
        """
        route = resolve_route(output_format, explicit_path)

        if route is Route.CONSOLE:
            print(encoded.content.decode("utf-8"), file=self.stream)
            return CONSOLE

        if route is Route.RAW_TO_FILE:
            path, content = explicit_path, raw_content(value)
        elif route is Route.ENCODED_TO_FILE:
            path, content = explicit_path, encoded.content
        else:
            path = os.path.join(self.cwd, encoded.default_filename) if self.cwd else encoded.default_filename
            content = encoded.content

        logger.debug(f"Writing {len(content)} bytes to {path} ({route.value})")
        write_file(path, content)
        return path
