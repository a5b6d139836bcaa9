"""JSON value helpers shared by the protocol layer and the tools."""

import json
from typing import Any

from pydantic import JsonValue

__all__ = [
    "JsonValue",
    "parse_json",
    "serialize_json",
    "as_string",
    "as_int",
    "as_float",
    "as_bool",
    "as_array",
    "as_object",
]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite number is not valid JSON: {name}")


def parse_json(raw: str | bytes) -> JsonValue:
    """
    Parse raw JSON text into plain Python values.

    Raises ValueError for undecodable bytes, malformed or too deeply nested
    JSON, and the NaN/Infinity extensions that the json module would
    otherwise accept.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"Invalid UTF-8: {e}") from e
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except RecursionError as e:
        raise ValueError("JSON nesting is too deep") from e


def serialize_json(value: Any, pretty: bool = True) -> bytes:
    """Serialize a value to UTF-8 JSON with sorted keys."""
    text = json.dumps(
        value,
        indent=2 if pretty else None,
        sort_keys=True,
        ensure_ascii=False,
        allow_nan=False,
    )
    # Lone surrogates can only sit inside JSON strings; emit them as \uXXXX escapes
    return text.encode("utf-8", errors="backslashreplace")


# Typed accessors return None on a type mismatch instead of raising, so callers
# can treat "missing" and "unusable" the same way.


def as_string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def as_int(value: Any) -> int | None:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def as_array(value: Any) -> list[Any] | None:
    return value if isinstance(value, list) else None


def as_object(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None
