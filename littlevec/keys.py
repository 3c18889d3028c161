"""Storage key construction: colon-separated parts and prefixed key streams."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

SEPARATOR = ":"


def _part(arg: object) -> str:
    if arg is None:
        return ""
    if isinstance(arg, str):
        return arg
    if isinstance(arg, (bytes, bytearray)):
        return bytes(arg).decode("utf-8")
    if isinstance(arg, int):
        return str(int(arg))
    raise TypeError(f"unsupported key part type: {type(arg).__name__}")


def merge_key(*args: object) -> str:
    """Join the arguments with ':'; ``None`` contributes an empty part."""
    return SEPARATOR.join(_part(arg) for arg in args)


def prefixed_keys(prefix: str, index: int, ids: Iterable[str]) -> Iterator[str]:
    """Yield ``prefix:index:id`` for every id, lazily."""
    for vec_id in ids:
        yield merge_key(prefix, index, vec_id)