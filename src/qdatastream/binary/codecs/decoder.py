from __future__ import annotations
from typing import Any, List, Optional, Union

from ..errors import DecodeError, InvalidSizeReference, MissingSizeSource, SchemaError, UnsupportedType
from ...config import DEFAULT_CONFIG, DecoderConfig
from ...log import log
from ...models.record import Record
from .cursor import Cursor
from .registry import SchemaRegistry
from .schema import PRIMITIVES, SIZED_TAGS, FieldDescriptor, FieldRef, FieldType, LiteralSize, Schema, TypeTag


class Decoder:
    """
    Interprets a Schema against a Cursor, one field at a time in declared order.

    Each decoded value lands in the record before the next field is read, so
    STRING and ARRAY fields can take their length from an earlier sibling.
    The decoder holds only its config and registry; nothing survives a call.
    """

    def __init__(self, config: Optional[DecoderConfig] = None, registry: Optional[SchemaRegistry] = None):
        self.config = config or DEFAULT_CONFIG
        self.registry = registry

    # -----------------------------
    # Public entry points
    # -----------------------------

    def decode(self, schema: Union[Schema, str], cur: Cursor) -> Record:
        """
        Decode one record. On failure the cursor is put back where the
        record started and the error carries the failing field path/offset.
        """
        self._check_byteorder(cur)
        schema = self._schema(schema)
        if self.config.validate_schemas:
            schema.validate()
        start = cur.tell()
        try:
            return self._record(schema, cur, 1, "")
        except DecodeError:
            cur.seek(start)
            raise

    read_struct = decode

    def read_array(self, element: FieldType, count: int, cur: Cursor) -> List[Any]:
        """Read ``count`` values of ``element`` back to back."""
        self._check_byteorder(cur)
        if count < 0:
            raise InvalidSizeReference(f"negative array length {count}", offset=cur.tell())
        start = cur.tell()
        try:
            return self._array(element, count, cur, 1, "")
        except DecodeError:
            cur.seek(start)
            raise

    def read_value(self, ftype: FieldType, cur: Cursor, size: Optional[int] = None) -> Any:
        self._check_byteorder(cur)
        start = cur.tell()
        try:
            return self._value(ftype, cur, size, 1, "")
        except DecodeError:
            cur.seek(start)
            raise

    # -----------------------------
    # Interpreter
    # -----------------------------

    def _check_byteorder(self, cur: Cursor) -> None:
        if cur.byteorder != self.config.byteorder:
            raise ValueError(f"cursor byte order {cur.byteorder!r} does not match config byteorder "
                             f"{self.config.byteorder!r}")

    def _schema(self, ref: Union[Schema, str, None]) -> Schema:
        if isinstance(ref, Schema):
            return ref
        if isinstance(ref, str):
            if self.registry is None:
                raise UnsupportedType(f"record {ref!r} given by name but no registry is configured")
            return self.registry.get(ref)
        raise UnsupportedType(f"record field has no schema (got {ref!r})")

    def _record(self, schema: Schema, cur: Cursor, depth: int, path: str) -> Record:
        if depth > self.config.max_depth:
            raise SchemaError(f"record nesting exceeds max_depth={self.config.max_depth} at {schema.name!r}",
                              field_path=path or schema.name, offset=cur.tell())
        rec = Record(schema.name)
        for fd in schema.fields:
            if fd.ignore:
                continue
            fpath = f"{path}.{fd.name}" if path else fd.name
            start = cur.tell()
            try:
                size = self._size(schema, fd, rec)
                rec[fd.name] = self._value(fd.type, cur, size, depth, fpath)
            except DecodeError as e:
                raise e.annotate(fpath, start)
            log.debug("%s @%d..%d = %r", fpath, start, cur.tell(), rec[fd.name])
        return rec

    def _size(self, schema: Schema, fd: FieldDescriptor, rec: Record) -> Optional[int]:
        """Effective length of a STRING/ARRAY field; resolved before any of its bytes are read."""
        if fd.type.tag not in SIZED_TAGS:
            return None
        src = fd.size
        if src is None:
            raise MissingSizeSource(f"{fd.type.describe()} field declares no size")
        if isinstance(src, LiteralSize):
            return src.count
        if not isinstance(src, FieldRef):
            raise MissingSizeSource(f"unrecognised size source {src!r}")
        if src.name not in rec:
            # not decoded yet: unknown, later in the schema, or ignored
            raise InvalidSizeReference(schema.size_ref_problem(fd) or f"size reference {src.name!r} has no value")
        target = schema.get(src.name)
        value = rec[src.name]
        if not target.type.is_integer or not isinstance(value, int):
            raise InvalidSizeReference(
                f"size reference {src.name!r} has type {target.type.describe()}, expected an integer")
        if value < 0:
            raise InvalidSizeReference(f"size reference {src.name!r} holds negative length {value}")
        return value

    def _value(self, ftype: FieldType, cur: Cursor, size: Optional[int], depth: int, path: str) -> Any:
        tag = ftype.tag
        prim = PRIMITIVES.get(tag) if isinstance(tag, TypeTag) else None
        if prim is not None:
            width, signed, floating = prim
            return cur.read_primitive(width, signed, floating=floating)
        if tag is TypeTag.STRING:
            if size is None:
                raise MissingSizeSource("string has no length")
            return cur.read_ascii(size)
        if tag is TypeTag.VECTOR2:
            return cur.read_vector2()
        if tag is TypeTag.VECTOR3:
            return cur.read_vector3()
        if tag is TypeTag.ARRAY:
            if size is None:
                raise MissingSizeSource("array has no length")
            return self._array(ftype.element, size, cur, depth, path)
        if tag is TypeTag.RECORD:
            return self._record(self._schema(ftype.schema), cur, depth + 1, path)
        raise UnsupportedType(f"unsupported type tag {tag!r}")

    def _array(self, element: Optional[FieldType], count: int, cur: Cursor, depth: int, path: str) -> List[Any]:
        if element is None or element.tag is TypeTag.ARRAY:
            raise UnsupportedType("arrays of arrays are not supported" if element else "array has no element type")
        if element.tag is TypeTag.STRING:
            raise MissingSizeSource("string array elements have no size source")
        out = []
        for i in range(count):
            epath = f"{path}[{i}]"
            start = cur.tell()
            try:
                out.append(self._value(element, cur, None, depth, epath))
            except DecodeError as e:
                raise e.annotate(epath, start)
        return out


def decode(schema: Union[Schema, str], cur: Cursor, *, registry: Optional[SchemaRegistry] = None,
           config: Optional[DecoderConfig] = None) -> Record:
    return Decoder(config=config, registry=registry).decode(schema, cur)


def decode_bytes(schema: Union[Schema, str], data: bytes, *, registry: Optional[SchemaRegistry] = None,
                 config: Optional[DecoderConfig] = None) -> Record:
    """Decode one record from the start of ``data`` using the configured byte order."""
    config = config or DEFAULT_CONFIG
    return decode(schema, Cursor(data, byteorder=config.byteorder), registry=registry, config=config)
