"""The vector database: metadata, vector storage and nearest-neighbour search."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Sequence
from itertools import chain, takewhile
from typing import Union

from sortedcontainers import SortedDict

from .distance import DEFAULT_INDEX, DistFunc, get_func
from .keys import merge_key, prefixed_keys
from .options import VecDbOpts
from .units import DbMeta, MaxHeap, SearchResult, deserialize_vector, serialize_vector

Value = Union[str, bytes]

_KEY_DELIM = ":"
_ID_DELIM_COUNT = 2


class VecDbError(Exception):
    """Raised when a database operation cannot be carried out."""


class MemoryStore:
    """An ordered in-memory key-value store with prefix iteration."""

    def __init__(self) -> None:
        self._data: SortedDict = SortedDict()

    def key_exists(self, key: str) -> bool:
        """Return whether ``key`` is stored."""
        return key in self._data

    def get(self, key: str) -> Value | None:
        """Return the value for ``key``, or None when absent."""
        return self._data.get(key)

    def set(self, key: str, value: Value) -> None:
        """Store ``value`` under ``key``."""
        self._data[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is ignored."""
        self._data.pop(key, None)

    def incr(self, key: str) -> int:
        """Increment the integer counter under ``key`` (starting from 0) and return it."""
        current = self._data.get(key)
        value = 1 if current is None else int(current) + 1
        self._data[key] = str(value)
        return value

    def iter_prefix(self, prefix: str) -> Iterator[tuple[str, Value]]:
        """Iterate over ``(key, value)`` pairs whose key starts with ``prefix``, in key order."""
        keys = takewhile(
            lambda key: key.startswith(prefix), self._data.irange(minimum=prefix)
        )
        items = [(key, self._data[key]) for key in keys]
        return iter(items)

    def delete_many(self, keys: Iterable[str]) -> None:
        """Remove every key in ``keys``; missing keys are ignored."""
        for key in keys:
            self._data.pop(key, None)


def turn_to_id(key: str) -> str:
    """Strip the ``<prefix>:<index>:`` part of a stored key, leaving the vector id.

    Returns an empty string when the key holds fewer than two delimiters.
    """
    parts = key.split(_KEY_DELIM, _ID_DELIM_COUNT)
    if len(parts) <= _ID_DELIM_COUNT:
        return ""
    return parts[_ID_DELIM_COUNT]


def _as_text(value: Value | None) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


class VecDb:
    """Named vector databases kept in a key-value store."""

    def __init__(self, opts: VecDbOpts | None = None, store: MemoryStore | None = None) -> None:
        self.opts = opts if opts is not None else VecDbOpts()
        self.store = store if store is not None else MemoryStore()

    def _meta_key(self, db_name: str) -> str:
        return merge_key(self.opts.db_key, db_name)

    def _require_meta(self, db_name: str, meta: DbMeta | None) -> DbMeta:
        if meta is not None:
            return meta
        found = self.get_meta(db_name)
        if found is None:
            raise VecDbError("Data Base doesn't exist.")
        return found

    def create_db(self, db_name: str, dim: int, dist_index: int = DEFAULT_INDEX) -> DbMeta:
        """Create a database and return its metadata."""
        if dim > self.opts.max_dim:
            raise VecDbError("The maximum dimension size has been exceeded.")
        key = self._meta_key(db_name)
        if self.store.key_exists(key):
            raise VecDbError("Data Base already exists.")
        try:
            index = self.store.incr(self.opts.db_counter_key)
        except ValueError as exc:
            raise VecDbError("Internal RocksDB error: couldn't increment counter.") from exc
        meta = DbMeta(dim=dim, dist=dist_index, index=index)
        self.store.set(key, meta.serialize())
        return meta

    def update_db(self, db_name: str, dist_index: int, meta: DbMeta | None = None) -> DbMeta:
        """Change the distance function of a database and return the new metadata."""
        meta = self._require_meta(db_name, meta)
        if meta.dist == dist_index:
            raise VecDbError("Nothing changed.")
        updated = dataclasses.replace(meta, dist=dist_index)
        self.store.set(self._meta_key(db_name), updated.serialize())
        return updated

    def delete_db(self, db_name: str, meta: DbMeta | None = None) -> None:
        """Delete a database together with all its vectors and payloads."""
        meta = self._require_meta(db_name, meta)
        vec_prefix = merge_key(self.opts.vec_key, meta.index, None)
        payload_prefix = merge_key(self.opts.payload_key, meta.index, None)
        doomed = [
            key
            for key, _ in chain(
                self.store.iter_prefix(vec_prefix), self.store.iter_prefix(payload_prefix)
            )
        ]
        self.store.delete_many(doomed)
        self.store.delete(self._meta_key(db_name))

    def get_meta(self, db_name: str) -> DbMeta | None:
        """Return the metadata of a database, or None when it does not exist."""
        value = self.store.get(self._meta_key(db_name))
        if value is None:
            return None
        return DbMeta.deserialize(value)

    def set_vec(
        self,
        meta: DbMeta,
        vec_id: str,
        vector: bytes | Sequence[float],
        payload: str = "",
    ) -> None:
        """Store a vector and its payload under ``vec_id``."""
        data = bytes(vector) if isinstance(vector, (bytes, bytearray)) else serialize_vector(vector)
        self.store.set(merge_key(self.opts.vec_key, meta.index, vec_id), data)
        self.store.set(merge_key(self.opts.payload_key, meta.index, vec_id), payload)

    def del_vec(self, meta: DbMeta, ids: Iterable[str]) -> None:
        """Delete the vectors and payloads of the given ids."""
        ids = list(ids)
        self.store.delete_many(
            chain(
                prefixed_keys(self.opts.vec_key, meta.index, ids),
                prefixed_keys(self.opts.payload_key, meta.index, ids),
            )
        )

    def _dist_func(self, meta: DbMeta) -> DistFunc:
        func = get_func(meta.dist)
        if func is None:
            raise VecDbError("Unsupported distance function.")
        return func

    def search_vec(self, meta: DbMeta, vector: Sequence[float], top_k: int) -> list[SearchResult]:
        """Return up to ``top_k`` stored vectors nearest to ``vector``."""
        return self.search_batch_vec(meta, [vector], top_k)[0]

    def search_batch_vec(
        self, meta: DbMeta, vectors: Sequence[Sequence[float]], top_k: int
    ) -> list[list[SearchResult]]:
        """Search for several query vectors in a single pass over the database."""
        dist_func = self._dist_func(meta)
        heaps = [MaxHeap(top_k) for _ in vectors]
        vec_prefix = merge_key(self.opts.vec_key, meta.index, None)
        for key, value in self.store.iter_prefix(vec_prefix):
            stored = deserialize_vector(value, meta.dim)
            for query, heap in zip(vectors, heaps):
                heap.update(dist_func(query, stored), key)
        return [self._finish(heap, meta) for heap in heaps]

    def _finish(self, heap: MaxHeap, meta: DbMeta) -> list[SearchResult]:
        heap.shrink()
        heap.sort()
        results = heap.results()
        for item in results:
            item.id = turn_to_id(item.id)
            payload_key = merge_key(self.opts.payload_key, meta.index, item.id)
            item.payload = _as_text(self.store.get(payload_key))
        return results