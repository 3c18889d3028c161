"""Distance functions between vectors and their registry by name and index."""

from __future__ import annotations

import math
import struct
from collections.abc import Callable, Sequence

DistFunc = Callable[[Sequence[float], Sequence[float]], float]

DEFAULT_INDEX = 1

_FLT_EPSILON = 1.1920928955078125e-07
_EPS = _FLT_EPSILON * 100


def q_rsqrt(number: float) -> float:
    """Approximate 1/sqrt(number) with the fast inverse square root trick."""
    (bits,) = struct.unpack("<I", struct.pack("<f", number))
    bits = (0x5F3759DF - (bits >> 1)) & 0xFFFFFFFF
    (y,) = struct.unpack("<f", struct.pack("<I", bits))
    return y * (1.5 - (number * 0.5 * y * y))


def _dot_and_norms(a: Sequence[float], b: Sequence[float]) -> tuple[float, float, float]:
    dot = norm_a = norm_b = 0.0
    for x, y in zip(a, b, strict=True):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    return dot, norm_a, norm_b


def _degenerate(norm_a: float, norm_b: float) -> float | None:
    if norm_a <= _EPS and norm_b <= _EPS:
        return 0.0
    if norm_a <= _EPS or norm_b <= _EPS:
        return 1.0
    return None


def qcos_dist(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine distance using the fast inverse square root."""
    dot, norm_a, norm_b = _dot_and_norms(a, b)
    special = _degenerate(norm_a, norm_b)
    if special is not None:
        return special
    return 1.0 - dot * q_rsqrt(norm_a * norm_b)


def cos_dist(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine distance: one minus the cosine of the angle between a and b."""
    dot, norm_a, norm_b = _dot_and_norms(a, b)
    special = _degenerate(norm_a, norm_b)
    if special is not None:
        return special
    return 1.0 - dot / math.sqrt(norm_a * norm_b)


def dot_prod_dist(a: Sequence[float], b: Sequence[float]) -> float:
    """Negated dot product, so that larger products rank closer."""
    return -sum(x * y for x, y in zip(a, b, strict=True))


def l1_dist(a: Sequence[float], b: Sequence[float]) -> float:
    """Manhattan distance."""
    return sum(abs(x - y) for x, y in zip(a, b, strict=True))


def l2_dist(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance."""
    return math.sqrt(sum((x - y) * (x - y) for x, y in zip(a, b, strict=True)))


_NAMES: tuple[str | None, ...] = (None, "qcos", "cos", "dot_prod", "l1", "l2")
_FUNCS: tuple[DistFunc | None, ...] = (
    None,
    qcos_dist,
    cos_dist,
    dot_prod_dist,
    l1_dist,
    l2_dist,
)


def get_index(name: str) -> int:
    """Return the index of a distance function by name, or 0 if unknown."""
    for idx, known in enumerate(_NAMES):
        if known is not None and known == name:
            return idx
    return 0


def get_name(index: int) -> str | None:
    """Return the name for an index, or None when out of range."""
    if 0 <= index < len(_NAMES):
        return _NAMES[index]
    return None


def get_func(index: int) -> DistFunc | None:
    """Return the distance function for an index, or None when out of range."""
    if 0 <= index < len(_FUNCS):
        return _FUNCS[index]
    return None