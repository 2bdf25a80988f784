from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Optional, Tuple, Union

from ..errors import InvalidSizeReference, MissingSizeSource, SchemaError, UnsupportedType


class TypeTag(str, Enum):
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    FLOAT32 = "float32"
    STRING = "string"
    VECTOR2 = "vector2"
    VECTOR3 = "vector3"
    ARRAY = "array"
    RECORD = "record"


# tag -> (width in bits, signed, floating)
PRIMITIVES = {
    TypeTag.INT8: (8, True, False),
    TypeTag.UINT8: (8, False, False),
    TypeTag.INT16: (16, True, False),
    TypeTag.UINT16: (16, False, False),
    TypeTag.INT32: (32, True, False),
    TypeTag.UINT32: (32, False, False),
    TypeTag.FLOAT32: (32, True, True),
}

INTEGER_TAGS = frozenset(t for t, (_, _, floating) in PRIMITIVES.items() if not floating)
SIZED_TAGS = frozenset({TypeTag.STRING, TypeTag.ARRAY})


@dataclass(frozen=True)
class FieldType:
    tag: TypeTag
    element: Optional["FieldType"] = None
    # Schema object, or a name resolved through a SchemaRegistry
    schema: Union["Schema", str, None] = None

    def __post_init__(self):
        try:
            object.__setattr__(self, "tag", TypeTag(self.tag))
        except ValueError:
            pass  # unknown tags surface as UnsupportedType when decoded

    @property
    def is_integer(self) -> bool:
        return self.tag in INTEGER_TAGS

    def fixed_size(self) -> Optional[int]:
        if self.tag in PRIMITIVES:
            return PRIMITIVES[self.tag][0] // 8
        if self.tag is TypeTag.VECTOR2:
            return 8
        if self.tag is TypeTag.VECTOR3:
            return 12
        if self.tag is TypeTag.RECORD and isinstance(self.schema, Schema):
            return self.schema.fixed_size()
        return None

    def describe(self) -> str:
        if self.tag is TypeTag.ARRAY:
            return f"array<{self.element.describe() if self.element else '?'}>"
        if self.tag is TypeTag.RECORD:
            name = self.schema.name if isinstance(self.schema, Schema) else self.schema
            return f"record<{name}>"
        return self.tag.value if isinstance(self.tag, TypeTag) else str(self.tag)


INT8 = FieldType(TypeTag.INT8)
UINT8 = FieldType(TypeTag.UINT8)
INT16 = FieldType(TypeTag.INT16)
UINT16 = FieldType(TypeTag.UINT16)
INT32 = FieldType(TypeTag.INT32)
UINT32 = FieldType(TypeTag.UINT32)
FLOAT32 = FieldType(TypeTag.FLOAT32)
STRING = FieldType(TypeTag.STRING)
VECTOR2 = FieldType(TypeTag.VECTOR2)
VECTOR3 = FieldType(TypeTag.VECTOR3)


def array_of(element: FieldType) -> FieldType:
    return FieldType(TypeTag.ARRAY, element=element)


def record_of(schema: Union["Schema", str]) -> FieldType:
    return FieldType(TypeTag.RECORD, schema=schema)


@dataclass(frozen=True)
class LiteralSize:
    count: int

    def __post_init__(self):
        if not isinstance(self.count, int) or self.count < 0:
            raise SchemaError(f"literal size must be a non-negative int, got {self.count!r}")


@dataclass(frozen=True)
class FieldRef:
    name: str


SizeSource = Union[LiteralSize, FieldRef]


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: FieldType
    size: Optional[SizeSource] = None
    ignore: bool = False


def field(name: str, ftype: FieldType, *, size: Union[int, str, SizeSource, None] = None,
          ignore: bool = False) -> FieldDescriptor:
    """Build a descriptor; ``size`` is a literal count or the name of an earlier integer field."""
    if isinstance(size, bool):
        raise SchemaError(f"size of {name!r} must be int or field name, got bool")
    if isinstance(size, int):
        size = LiteralSize(size)
    elif isinstance(size, str):
        size = FieldRef(size)
    return FieldDescriptor(name=name, type=ftype, size=size, ignore=ignore)


@dataclass(frozen=True)
class Schema:
    name: str
    fields: Tuple[FieldDescriptor, ...] = dc_field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        seen = set()
        for fd in self.fields:
            if fd.name in seen:
                raise SchemaError(f"duplicate field {fd.name!r} in schema {self.name!r}")
            seen.add(fd.name)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(fd.name for fd in self.fields)

    def get(self, name: str) -> Optional[FieldDescriptor]:
        for fd in self.fields:
            if fd.name == name:
                return fd
        return None

    def index_of(self, name: str) -> int:
        for i, fd in enumerate(self.fields):
            if fd.name == name:
                return i
        return -1

    def fixed_size(self) -> Optional[int]:
        """Byte size of one record, or None if any field is variable-length."""
        total = 0
        for fd in self.fields:
            if fd.ignore:
                continue
            if fd.type.tag is TypeTag.ARRAY:
                elem = fd.type.element.fixed_size() if fd.type.element else None
                if elem is None or not isinstance(fd.size, LiteralSize):
                    return None
                total += elem * fd.size.count
            elif fd.type.tag is TypeTag.STRING:
                if not isinstance(fd.size, LiteralSize):
                    return None
                total += fd.size.count
            else:
                n = fd.type.fixed_size()
                if n is None:
                    return None
                total += n
        return total

    def size_ref_problem(self, fd: FieldDescriptor) -> Optional[str]:
        """Why ``fd``'s size reference is not an earlier integer field, or None if it is."""
        ref = fd.size.name
        idx = self.index_of(ref)
        if idx < 0:
            return f"size reference {ref!r} names no field of {self.name!r}"
        if idx >= self.index_of(fd.name):
            return f"size reference {ref!r} is not declared before {fd.name!r}"
        target = self.fields[idx]
        if target.ignore:
            return f"size reference {ref!r} names an ignored field"
        if not target.type.is_integer:
            return f"size reference {ref!r} has type {target.type.describe()}, expected an integer"
        return None

    def validate(self) -> None:
        """Static checks for everything a decode of this schema could trip over.

        Record fields naming a registry schema are checked by ``SchemaRegistry.validate``.
        """
        for fd in self.fields:
            if fd.ignore:
                continue
            tag, path = fd.type.tag, f"{self.name}.{fd.name}"
            if not isinstance(tag, TypeTag):
                raise UnsupportedType(f"unknown type tag {tag!r}", field_path=path)
            if tag in SIZED_TAGS:
                if fd.size is None:
                    raise MissingSizeSource(f"{tag.value} field has no size source", field_path=path)
                if isinstance(fd.size, FieldRef):
                    problem = self.size_ref_problem(fd)
                    if problem:
                        raise InvalidSizeReference(problem, field_path=path)
            if tag is TypeTag.ARRAY:
                elem = fd.type.element
                if elem is None or elem.tag is TypeTag.ARRAY:
                    raise UnsupportedType(f"unsupported element type for {fd.type.describe()}", field_path=path)
                if elem.tag is TypeTag.STRING:
                    raise MissingSizeSource("string array elements have no size source", field_path=path)
            if tag is TypeTag.RECORD and fd.type.schema is None:
                raise UnsupportedType("record field has no schema", field_path=path)
            for sub in _nested_schemas(fd.type):
                sub.validate()


def _nested_schemas(ftype: FieldType):
    if isinstance(ftype.schema, Schema):
        yield ftype.schema
    if ftype.element is not None:
        yield from _nested_schemas(ftype.element)
