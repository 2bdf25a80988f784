from __future__ import annotations
from typing import Any, NamedTuple


class Vector2(NamedTuple):
    x: float
    y: float


class Vector3(NamedTuple):
    x: float
    y: float
    z: float


class Record(dict):
    """Decoded fields in schema order, tagged with the schema name."""

    __slots__ = ("schema_name",)

    def __init__(self, schema_name: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.schema_name = schema_name

    def __repr__(self) -> str:
        return f"Record({self.schema_name!r}, {dict.__repr__(self)})"

    def to_plain(self) -> dict[str, Any]:
        """Recursively convert to JSON-friendly dicts and lists."""
        return {k: _plain(v) for k, v in self.items()}


def _plain(v: Any) -> Any:
    if isinstance(v, Record):
        return v.to_plain()
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    return v
