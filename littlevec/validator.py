"""Validation of JSON request bodies."""

from __future__ import annotations

import json
from typing import Any

from .distance import get_index
from .units import DbMeta, deserialize_vector, serialize_vector
from .vecdb import VecDb


class RequestError(Exception):
    """A rejected request; ``message`` is None when the reply carries no body."""

    def __init__(self, message: str | None = None, code: int = 422) -> None:
        super().__init__(message or "")
        self.message = message
        self.code = code


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid constant {name}")


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_request(body: str | bytes | None) -> tuple[dict[str, Any], str]:
    """Parse a request body; return the JSON object and its ``db_name``."""
    if not body:
        raise RequestError()
    try:
        js = json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        raise RequestError("Invalid JSON.") from None
    if not isinstance(js, dict):
        raise RequestError("Invalid JSON.")
    db_name = js.get("db_name")
    if not isinstance(db_name, str) or not db_name:
        raise RequestError("Missing or invalid 'db_name' key.")
    return js, db_name


def parse_request_meta(
    body: str | bytes | None, db: VecDb
) -> tuple[dict[str, Any], str, DbMeta]:
    """Parse a request body for an existing database and look up its metadata."""
    js, db_name = parse_request(body)
    meta = db.get_meta(db_name)
    if meta is None:
        raise RequestError("Data base doesn't exist.")
    return js, db_name, meta


def top_k(js: dict[str, Any], default: int) -> int:
    """Return the requested ``top_k``, or ``default`` when absent."""
    if "top_k" not in js:
        return default
    value = js["top_k"]
    if not _is_integer(value):
        raise RequestError("Value of 'top_k' must be integer.")
    if value <= 0:
        raise RequestError("Invalid 'top_k' value. Must be more than 0.")
    return value


def dist(js: dict[str, Any], default_index: int) -> int:
    """Return the index of the requested distance function, or ``default_index``."""
    if "dist" not in js:
        return default_index
    name = js["dist"]
    if not isinstance(name, str):
        raise RequestError("Invalid 'dist' key: type must be 'string'.")
    index = get_index(name)
    if index == 0:
        raise RequestError("Invalid 'dist' value. Unsupported distance function")
    return index


def dim(js: dict[str, Any]) -> int:
    """Return the requested positive dimension."""
    value = js.get("dim")
    if not _is_integer(value):
        raise RequestError("Missing or invalid 'dim' key.")
    if value <= 0:
        raise RequestError("Invalid 'dim' value.")
    return value


def data_array(js: dict[str, Any]) -> list[Any]:
    """Return the non-empty ``data`` array."""
    data = js.get("data")
    if not isinstance(data, list) or not data:
        raise RequestError("Missing or invalid 'data' key. Must be a non-empty array.")
    return data


def vector(js: dict[str, Any], dim: int) -> list[float]:
    """Return the ``vector`` field as single-precision floats of length ``dim``."""
    values = js.get("vector")
    if not isinstance(values, list) or len(values) != dim:
        raise RequestError("Vector must be a numeric array with correct dimension.")
    if not all(_is_number(value) for value in values):
        raise RequestError("All elements of 'vector' must be numeric.")
    return deserialize_vector(serialize_vector(values), dim)