"""Settings of the vector database: key prefixes and limits."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class VecDbOpts:
    """Key prefixes and options.

    Storage layout:
      ``<db_counter_key>`` -> last database counter value
      ``<db_key>:<db_name>`` -> ``<dim>:<dist_index>:<counter_index>``
      ``<vec_key>:<counter_index>:<vec_id>`` -> serialized vector
      ``<payload_key>:<counter_index>:<vec_id>`` -> payload
    """

    db_counter_key: str = "db_counter"
    db_key: str = "db"
    vec_key: str = "vec"
    payload_key: str = "pld"
    max_dim: int = 10000
    top_k: int = 5
    json_indent: int = 2

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> VecDbOpts:
        """Build options from a mapping; missing keys keep their defaults."""
        values: dict[str, Any] = {}
        for field in fields(cls):
            if field.name not in cfg:
                continue
            raw = cfg[field.name]
            if field.default.__class__ is int:
                try:
                    values[field.name] = int(raw)
                except (TypeError, ValueError) as exc:
                    raise ValueError(f"invalid integer for {field.name!r}: {raw!r}") from exc
            else:
                values[field.name] = str(raw)
        return cls(**values)