"""Classify raw secret payloads into key/value, plain text or binary."""
import json
import logging
import math
from typing import Any

from .models import Binary, KeyValueMap, PlainText, RawSecretResult, SecretValue

logger = logging.getLogger(__name__)


class _JSONFloat(float):
    """Float that remembers how it was written in the payload."""

    def __new__(cls, text: str):
        number = super().__new__(cls, text)
        # 1e400 overflows to inf, which has no JSON spelling
        if math.isinf(number):
            raise ValueError(f"number out of range: {text}")
        number.text = text
        return number


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are not JSON; treat the payload as plain text
    raise ValueError(f"non-standard JSON constant: {name}")


def _stringify(value: Any) -> str:
    """Canonical string form of a JSON member value."""
    if isinstance(value, str):
        return value
    if isinstance(value, _JSONFloat):
        return value.text
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    # integers, booleans and null keep their JSON spelling: 5432, true, null
    return json.dumps(value)


def classify(raw: RawSecretResult) -> SecretValue:
    """
    Decide which SecretValue variant a fetched payload represents.

    Rules, in order:
        1. Bytes that are not valid UTF-8 -> Binary
        2. Text that parses as a JSON object -> KeyValueMap, members in
           parse order, non-string values stringified (numbers as written,
           nested values as compact JSON)
        3. Anything else -> PlainText, verbatim

    Numbers too large for a float make the payload plain text. Classification
    never fails.
    """
    if raw.text is not None:
        text = raw.text
    else:
        data = raw.data or b""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Payload is not UTF-8, classifying as binary ({len(data)} bytes)")
            return Binary(data=data)

    try:
        parsed = json.loads(text, parse_float=_JSONFloat, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return PlainText(text=text)

    if not isinstance(parsed, dict):
        return PlainText(text=text)

    return KeyValueMap(entries={key: _stringify(value) for key, value in parsed.items()})
