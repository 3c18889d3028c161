"""Database metadata, search results, the top-k tracker and vector encoding."""

from __future__ import annotations

import json
import math
import re
import struct
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .keys import merge_key

FLT_MAX = 3.4028234663852886e38
FLOAT_SIZE = 4
_UINT_MAX = 0xFFFFFFFF
_LEADING_DIGITS = re.compile(r"[0-9]+")


def _parse_uint(text: str) -> int | None:
    match = _LEADING_DIGITS.match(text)
    if match is None:
        return None
    value = int(match.group())
    if value > _UINT_MAX:
        return None
    return value


@dataclass
class DbMeta:
    """Metadata of one vector database: dimension, distance index, counter index."""

    dim: int = 0
    dist: int = 0
    index: int = 0

    @classmethod
    def deserialize(cls, data: str | bytes) -> DbMeta | None:
        """Parse ``dim:dist:index``; return None when malformed."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        parts = data.split(":", 2)
        if len(parts) < 3:
            return None
        values = [_parse_uint(part) for part in parts]
        if any(value is None for value in values):
            return None
        dim, dist, index = values
        return cls(dim=dim, dist=dist, index=index)

    def serialize(self) -> str:
        """Encode as ``dim:dist:index``."""
        return merge_key(self.dim, self.dist, self.index)


@dataclass
class SearchResult:
    """One nearest-neighbour hit."""

    id: str = ""
    distance: float = FLT_MAX
    payload: str = ""

    def to_json(self) -> dict[str, Any]:
        """Return the JSON-ready form; an unparsable or empty payload is omitted."""
        result: dict[str, Any] = {"id": self.id, "distance": self.distance}
        if self.payload:
            try:
                result["payload"] = json.loads(self.payload)
            except ValueError:
                pass
        return result


class MaxHeap:
    """Keeps the ``top_k`` entries with the smallest distances seen so far."""

    def __init__(self, top_k: int) -> None:
        if top_k < 1:
            raise ValueError("top_k must be positive")
        self._container = [SearchResult() for _ in range(top_k)]
        self._top_index = 0
        self._top_dist = FLT_MAX

    def update(self, distance: float, key: str) -> None:
        """Replace the current worst entry if ``distance`` is strictly smaller."""
        if not distance < self._top_dist:
            return
        slot = self._container[self._top_index]
        slot.id = key
        slot.distance = distance
        self._top_index, self._top_dist = 0, self._container[0].distance
        for idx, item in enumerate(self._container):
            if item.distance > self._top_dist:
                self._top_index, self._top_dist = idx, item.distance

    def shrink(self) -> None:
        """Drop slots that were never filled."""
        self._container = [item for item in self._container if item.id]

    def sort(self) -> None:
        """Order entries by increasing distance."""
        self._container.sort(key=lambda item: item.distance)

    def results(self) -> list[SearchResult]:
        """Return the held entries."""
        return self._container


def _float32_bytes(value: float) -> bytes:
    try:
        return struct.pack("<f", value)
    except OverflowError:
        return struct.pack("<f", math.copysign(math.inf, value))


def serialize_vector(values: Iterable[float]) -> bytes:
    """Encode values as consecutive little-endian 32-bit floats."""
    return b"".join(_float32_bytes(float(v)) for v in values)


def deserialize_vector(data: bytes, dim: int) -> list[float]:
    """Decode the first ``dim`` 32-bit floats from ``data``."""
    size = dim * FLOAT_SIZE
    if dim < 0 or len(data) < size:
        raise ValueError(f"expected at least {size} bytes for {dim} floats, got {len(data)}")
    return list(struct.unpack(f"<{dim}f", bytes(data[:size])))