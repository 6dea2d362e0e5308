"""Encoders rendering a SecretValue into each output format.

Every encoder is a pure function ``SecretValue -> EncodedOutput``. Output is
UTF-8 without a byte-order mark. Encoders raise EncodingError only when the
content has no representation in the format after escaping was attempted.
"""
import csv
import io
import json
import logging
from typing import Callable, Dict, Iterable, Tuple

import yaml

from .errors import EncodingError
from .models import Binary, EncodedOutput, KeyValueMap, OutputFormat, PlainText, SecretValue

logger = logging.getLogger(__name__)

DEFAULT_FILENAMES = {
    OutputFormat.STDOUT: ".env",
    OutputFormat.ENV: ".env",
    OutputFormat.JSON: "secret.json",
    OutputFormat.YAML: "secret.yaml",
    OutputFormat.CSV: "secret.csv",
}

SIZE_FIELD = "size_bytes"
PLAIN_TEXT_KEY = "value"
CSV_HEADER = ("key", "value")


def binary_summary(value: Binary) -> str:
    """Human-readable line shown instead of binary content."""
    return f"Binary secret data ({value.size} bytes)"


def _fields(value: SecretValue) -> Iterable[Tuple[str, str]]:
    if isinstance(value, KeyValueMap):
        for key, item in value.entries.items():
            yield key, key
            yield key, item
    elif isinstance(value, PlainText):
        yield PLAIN_TEXT_KEY, value.text


def _check_encodable(value: SecretValue, output_format: OutputFormat) -> None:
    """Raise EncodingError naming the first field that is not valid UTF-8 text."""
    for name, text in _fields(value):
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(name, output_format.value, e.reason)


def _output(text: str, output_format: OutputFormat) -> EncodedOutput:
    return EncodedOutput(
        content=text.encode("utf-8"),
        default_filename=DEFAULT_FILENAMES[output_format],
    )


def encode_env(value: SecretValue, output_format: OutputFormat = OutputFormat.ENV) -> EncodedOutput:
    """
    KEY=VALUE lines joined by a newline, values verbatim and unquoted.

    Plain text is emitted as-is; binary secrets become a size report line.
    Also serves the stdout presentation.
    """
    if isinstance(value, Binary):
        return _output(binary_summary(value), output_format)

    _check_encodable(value, output_format)
    if isinstance(value, PlainText):
        return _output(value.text, output_format)
    return _output("\n".join(f"{key}={item}" for key, item in value.entries.items()), output_format)


def encode_stdout(value: SecretValue) -> EncodedOutput:
    return encode_env(value, OutputFormat.STDOUT)


def _json_document(value: SecretValue):
    if isinstance(value, KeyValueMap):
        return value.entries
    if isinstance(value, PlainText):
        return value.text
    return {SIZE_FIELD: value.size}


def encode_json(value: SecretValue) -> EncodedOutput:
    """
    Pretty-printed JSON, keys in secret order.

    Text that is not valid UTF-8 (lone surrogates) is written with
    \\u escapes instead.
    """
    document = _json_document(value)
    try:
        _check_encodable(value, OutputFormat.JSON)
        text = json.dumps(document, indent=2, ensure_ascii=False)
    except EncodingError as e:
        logger.debug(f"Falling back to ASCII-escaped JSON: {e}")
        text = json.dumps(document, indent=2, ensure_ascii=True)
    return _output(text, OutputFormat.JSON)


class _BlockStyleDumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    # the emitter downgrades to a double-quoted scalar when a block is not allowed
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


_BlockStyleDumper.add_representer(str, _represent_str)


def encode_yaml(value: SecretValue) -> EncodedOutput:
    """Block-style YAML mirroring the JSON document structure."""
    try:
        text = yaml.dump(
            _json_document(value),
            Dumper=_BlockStyleDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as e:
        raise EncodingError("<document>", OutputFormat.YAML.value, str(e))
    return _output(text, OutputFormat.YAML)


def _csv_rows(value: SecretValue) -> Iterable[Tuple[str, str]]:
    if isinstance(value, KeyValueMap):
        return list(value.entries.items())
    if isinstance(value, PlainText):
        return [(PLAIN_TEXT_KEY, value.text)]
    return [(SIZE_FIELD, str(value.size))]


def encode_csv(value: SecretValue) -> EncodedOutput:
    """
    RFC 4180 document with a ``key,value`` header and ``\\n`` line endings.

    Fields containing a comma, double quote or line break are quoted, with
    embedded quotes doubled. No line ending follows the last record.
    """
    _check_encodable(value, OutputFormat.CSV)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    # QUOTE_MINIMAL only quotes \r when it is part of the line terminator
    quoted_writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_ALL)
    writer.writerow(CSV_HEADER)
    for row in _csv_rows(value):
        if any("\r" in field for field in row):
            quoted_writer.writerow(row)
        else:
            writer.writerow(row)
    return _output(buffer.getvalue()[:-1], OutputFormat.CSV)


ENCODERS: Dict[OutputFormat, Callable[[SecretValue], EncodedOutput]] = {
    OutputFormat.STDOUT: encode_stdout,
    OutputFormat.ENV: encode_env,
    OutputFormat.JSON: encode_json,
    OutputFormat.YAML: encode_yaml,
    OutputFormat.CSV: encode_csv,
}


def encode(value: SecretValue, output_format: OutputFormat) -> EncodedOutput:
    """Encode a secret with the encoder registered for ``output_format``."""
    return ENCODERS[OutputFormat(output_format)](value)


def raw_content(value: SecretValue) -> bytes:
    """
    Unformatted payload written when stdout output is redirected to a file.

    Binary secrets keep their exact bytes and plain text its exact text.
    Key/value secrets use the same KEY=VALUE lines shown on the console.
    """
    if isinstance(value, Binary):
        return value.data
    return encode_stdout(value).content
