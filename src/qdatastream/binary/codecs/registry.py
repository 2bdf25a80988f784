from __future__ import annotations
from typing import Dict, Iterator, List

from ..errors import SchemaError, UnsupportedType
from .schema import FieldType, Schema


class SchemaRegistry:
    """Name -> Schema lookup used to resolve record fields declared by name."""

    def __init__(self, schemas=()):
        self._schemas: Dict[str, Schema] = {}
        for s in schemas:
            self.register(s)

    def register(self, schema: Schema) -> Schema:
        if schema.name in self._schemas:
            raise SchemaError(f"schema {schema.name!r} already registered")
        self._schemas[schema.name] = schema
        return schema

    def get(self, name: str) -> Schema:
        try:
            return self._schemas[name]
        except KeyError:
            raise UnsupportedType(f"no schema registered as {name!r}") from None

    def names(self) -> List[str]:
        return list(self._schemas)

    def __contains__(self, name: object) -> bool: return name in self._schemas
    def __iter__(self) -> Iterator[Schema]: return iter(self._schemas.values())
    def __len__(self) -> int: return len(self._schemas)

    def validate(self) -> None:
        """Validate every schema and check that record references by name resolve."""
        for schema in self._schemas.values():
            schema.validate()
            for fd in schema.fields:
                self._check_refs(fd.type, f"{schema.name}.{fd.name}")

    def _check_refs(self, ftype: FieldType, path: str) -> None:
        if isinstance(ftype.schema, str) and ftype.schema not in self._schemas:
            raise UnsupportedType(f"record reference {ftype.schema!r} is not registered", field_path=path)
        if isinstance(ftype.schema, Schema):
            for fd in ftype.schema.fields:
                self._check_refs(fd.type, f"{path}.{fd.name}")
        if ftype.element is not None:
            self._check_refs(ftype.element, path)
