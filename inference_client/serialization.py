"""JSON encode/decode helpers used for request and response bodies."""

from __future__ import annotations

import json
from typing import Any

from pydantic import JsonValue, TypeAdapter, ValidationError

from .exceptions import DecodeError

_JSON_VALUE: TypeAdapter[JsonValue] = TypeAdapter(JsonValue)


def encode(value: Any) -> bytes:
    """Encode a value as compact UTF-8 JSON."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode(payload: bytes | str) -> JsonValue:
    """
    Decode a JSON document into a plain value tree (dict/list/str/int/float/bool/None).

    Raises:
        DecodeError: If the payload is not valid JSON.
    """
    try:
        return _JSON_VALUE.validate_json(payload)
    except ValidationError as e:
        raise DecodeError(f"Malformed JSON in the response body: {e.errors()[0]['msg']}") from e
