"""Request handlers: each takes a JSON body and returns the reply body."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from . import validator
from .distance import DEFAULT_INDEX
from .units import serialize_vector
from .validator import RequestError
from .vecdb import VecDb, VecDbError

SUCCESS = '{"success": true}'


@contextmanager
def _db_errors() -> Iterator[None]:
    try:
        yield
    except VecDbError as exc:
        raise RequestError(str(exc)) from exc


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, sort_keys=True)


def _dump(db: VecDb, value: Any) -> str:
    indent = db.opts.json_indent
    if indent < 0:
        return _compact(value)
    return json.dumps(value, indent=indent, ensure_ascii=False, sort_keys=True)


def create_db(db: VecDb, body: str | bytes | None) -> str:
    """Create a database named by ``db_name`` with dimension ``dim``."""
    js, db_name = validator.parse_request(body)
    dim = validator.dim(js)
    dist_index = validator.dist(js, DEFAULT_INDEX)
    with _db_errors():
        db.create_db(db_name, dim, dist_index)
    return SUCCESS


def update_db(db: VecDb, body: str | bytes | None) -> str:
    """Change the distance function of an existing database."""
    js, db_name, meta = validator.parse_request_meta(body, db)
    dist_index = validator.dist(js, meta.dist)
    with _db_errors():
        db.update_db(db_name, dist_index, meta)
    return SUCCESS


def delete_db(db: VecDb, body: str | bytes | None) -> str:
    """Delete an existing database with all its vectors."""
    _, db_name, meta = validator.parse_request_meta(body, db)
    with _db_errors():
        db.delete_db(db_name, meta)
    return SUCCESS


def set_vectors(db: VecDb, body: str | bytes | None) -> str:
    """Store the vectors (and optional payloads) listed in ``data``.

    Items are stored one by one; an invalid item stops processing, leaving
    earlier items stored.
    """
    js, _, meta = validator.parse_request_meta(body, db)
    items = validator.data_array(js)
    for item in items:
        if not isinstance(item, dict):
            raise RequestError("Each item in 'data' array must be an object.")
        vec_id = item.get("id")
        if not isinstance(vec_id, str):
            raise RequestError("Missing or invalid 'id' key in 'data' item.")
        if not vec_id:
            raise RequestError("'id' must not be empty.")
        payload = _compact(item["payload"]) if "payload" in item else ""
        values = item.get("vector")
        if not isinstance(values, list):
            raise RequestError("Missing or invalid 'vector' key in 'data' item.")
        if not values:
            raise RequestError("Value of 'vector' must not be empty.")
        if len(values) != meta.dim:
            raise RequestError("Dimension of 'vector' must match db dimension.")
        if not all(_is_number(value) for value in values):
            raise RequestError("All elements of 'vector' must be numeric.")
        with _db_errors():
            db.set_vec(meta, vec_id, serialize_vector(values), payload)
    return SUCCESS


def delete_vectors(db: VecDb, body: str | bytes | None) -> str:
    """Delete the vectors whose ids are listed in ``data``."""
    js, _, meta = validator.parse_request_meta(body, db)
    items = validator.data_array(js)
    ids: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            raise RequestError("Invalid item in 'data': expected object.")
        vec_id = item.get("id")
        if not isinstance(vec_id, str):
            raise RequestError("Missing or invalid 'id' key in 'data' item.")
        if not vec_id:
            raise RequestError("'id' in 'data' item must not be empty.")
        ids.append(vec_id)
    with _db_errors():
        db.del_vec(meta, ids)
    return SUCCESS


def search_vector(db: VecDb, body: str | bytes | None) -> str:
    """Find the stored vectors nearest to ``vector``."""
    js, _, meta = validator.parse_request_meta(body, db)
    top_k = validator.top_k(js, db.opts.top_k)
    meta = dataclasses.replace(meta, dist=validator.dist(js, meta.dist))
    query = validator.vector(js, meta.dim)
    with _db_errors():
        found = db.search_vec(meta, query, top_k)
    return _dump(db, {"nearest": [item.to_json() for item in found]})


def search_vectors(db: VecDb, body: str | bytes | None) -> str:
    """Find the nearest stored vectors for every query listed in ``data``."""
    js, _, meta = validator.parse_request_meta(body, db)
    top_k = validator.top_k(js, db.opts.top_k)
    meta = dataclasses.replace(meta, dist=validator.dist(js, meta.dist))
    items = validator.data_array(js)
    queries = []
    for item in items:
        if not isinstance(item, dict):
            raise RequestError("Each item in 'data' must be an object.")
        queries.append(validator.vector(item, meta.dim))
    with _db_errors():
        found = db.search_batch_vec(meta, queries, top_k)
    results = []
    for item, hits in zip(items, found):
        entry: dict[str, Any] = {"nearest": [hit.to_json() for hit in hits]}
        if "extra" in item:
            entry["extra"] = item["extra"]
        results.append(entry)
    return _dump(db, {"results": results})