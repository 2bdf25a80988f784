from __future__ import annotations
import struct
from typing import Any, Mapping, Optional, Union

from .codecs.cursor import PRIMITIVE_FORMATS
from .codecs.registry import SchemaRegistry
from .codecs.schema import PRIMITIVES, SIZED_TAGS, FieldRef, FieldType, LiteralSize, Schema, TypeTag
from .errors import EncodeError
from ..config import DEFAULT_CONFIG, DecoderConfig


class Writer:
    """Append-only counterpart of Cursor."""

    def __init__(self, byteorder: str = "<"):
        if byteorder not in ("<", ">"):
            raise ValueError(f"byteorder must be '<' or '>', got {byteorder!r}")
        self.byteorder = byteorder
        self._out = bytearray()

    def tell(self) -> int: return len(self._out)
    def getvalue(self) -> bytes: return bytes(self._out)

    def write_bytes(self, data: bytes) -> None:
        self._out += data

    def write_primitive(self, value: int | float, width: int, signed: bool = False, *, floating: bool = False) -> None:
        code = PRIMITIVE_FORMATS.get((width, signed or floating, floating))
        if code is None:
            raise EncodeError(f"no {width}-bit primitive for {'float' if floating else 'int'}")
        try:
            self._out += struct.pack(self.byteorder + code, value)
        except struct.error as e:
            raise EncodeError(f"cannot pack {value!r} as {width}-bit {'signed' if signed else 'unsigned'}: {e}") from e

    def u8(self, v: int) -> None:  self.write_primitive(v, 8)
    def s8(self, v: int) -> None:  self.write_primitive(v, 8, True)
    def u16(self, v: int) -> None: self.write_primitive(v, 16)
    def s16(self, v: int) -> None: self.write_primitive(v, 16, True)
    def u32(self, v: int) -> None: self.write_primitive(v, 32)
    def s32(self, v: int) -> None: self.write_primitive(v, 32, True)
    def f32(self, v: float) -> None: self.write_primitive(v, 32, floating=True)

    def write_ascii(self, text: str, length: Optional[int] = None) -> None:
        try:
            raw = text.encode("ascii")
        except UnicodeEncodeError as e:
            raise EncodeError(f"non-ASCII text {text!r}") from e
        if length is not None and len(raw) != length:
            raise EncodeError(f"string {text!r} is {len(raw)} bytes, field expects {length}")
        self._out += raw

    def _components(self, v, n: int) -> tuple:
        try:
            comps = tuple(v)
        except TypeError as e:
            raise EncodeError(f"expected a {n}-component vector, got {v!r}") from e
        if len(comps) != n:
            raise EncodeError(f"expected a {n}-component vector, got {len(comps)} components")
        return comps

    def write_vector2(self, v) -> None:
        x, y = self._components(v, 2)
        self.f32(x); self.f32(y)

    def write_vector3(self, v) -> None:
        x, y, z = self._components(v, 3)
        self.f32(x); self.f32(y); self.f32(z)


class _Encoder:
    def __init__(self, w: Writer, registry: Optional[SchemaRegistry]):
        self.w = w
        self.registry = registry

    def _schema(self, ref: Union[Schema, str, None]) -> Schema:
        if isinstance(ref, Schema):
            return ref
        if isinstance(ref, str) and self.registry is not None and ref in self.registry:
            return self.registry.get(ref)
        raise EncodeError(f"cannot resolve record schema {ref!r}")

    def record(self, schema: Schema, rec: Mapping[str, Any], path: str) -> None:
        for fd in schema.fields:
            if fd.ignore:
                continue
            fpath = f"{path}.{fd.name}" if path else fd.name
            if fd.name not in rec:
                raise EncodeError(f"{fpath}: missing from record")
            size = None
            if fd.type.tag in SIZED_TAGS:
                if isinstance(fd.size, LiteralSize):
                    size = fd.size.count
                elif isinstance(fd.size, FieldRef) and isinstance(rec.get(fd.size.name), int):
                    size = rec[fd.size.name]
                else:
                    raise EncodeError(f"{fpath}: no usable size source")
            self.value(fd.type, rec[fd.name], size, fpath)

    def value(self, ftype: FieldType, v: Any, size: Optional[int], path: str) -> None:
        tag = ftype.tag
        if tag in PRIMITIVES:
            width, signed, floating = PRIMITIVES[tag]
            try:
                self.w.write_primitive(v, width, signed, floating=floating)
            except EncodeError as e:
                raise EncodeError(f"{path}: {e}") from e
        elif tag is TypeTag.STRING:
            try:
                self.w.write_ascii(v, size)
            except EncodeError as e:
                raise EncodeError(f"{path}: {e}") from e
        elif tag in (TypeTag.VECTOR2, TypeTag.VECTOR3):
            write = self.w.write_vector2 if tag is TypeTag.VECTOR2 else self.w.write_vector3
            try:
                write(v)
            except EncodeError as e:
                raise EncodeError(f"{path}: {e}") from e
        elif tag is TypeTag.ARRAY:
            if ftype.element is None or ftype.element.tag in SIZED_TAGS:
                raise EncodeError(f"{path}: unsupported element type {ftype.describe()}")
            if size is not None and len(v) != size:
                raise EncodeError(f"{path}: {len(v)} elements, field expects {size}")
            for i, item in enumerate(v):
                self.value(ftype.element, item, None, f"{path}[{i}]")
        elif tag is TypeTag.RECORD:
            self.record(self._schema(ftype.schema), v, path)
        else:
            raise EncodeError(f"{path}: unsupported type tag {tag!r}")


def encode(schema: Union[Schema, str], record: Mapping[str, Any], *, registry: Optional[SchemaRegistry] = None,
           config: Optional[DecoderConfig] = None) -> bytes:
    """Serialize ``record`` so that decoding the result with ``schema`` yields an equal record."""
    config = config or DEFAULT_CONFIG
    w = Writer(config.byteorder)
    enc = _Encoder(w, registry)
    enc.record(enc._schema(schema), record, "")
    return w.getvalue()
