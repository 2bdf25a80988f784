import pytest

from qdatastream.binary.codecs.cursor import Cursor
from qdatastream.binary.codecs.decoder import decode, decode_bytes
from qdatastream.binary.codecs.registry import SchemaRegistry
from qdatastream.binary.codecs.schema import (
    FLOAT32, INT8, INT16, INT32, STRING, UINT8, UINT16, UINT32, VECTOR2, VECTOR3,
    Schema, array_of, field, record_of,
)
from qdatastream.binary.errors import EncodeError
from qdatastream.binary.writer import Writer, encode
from qdatastream.config import DecoderConfig

POINT = Schema("point", (field("x", INT16), field("y", INT16)))

EVERYTHING = Schema("everything", (
    field("i8", INT8),
    field("u8", UINT8),
    field("i16", INT16),
    field("u16", UINT16),
    field("i32", INT32),
    field("u32", UINT32),
    field("f", FLOAT32),
    field("name_len", UINT8),
    field("name", STRING, size="name_len"),
    field("tag", STRING, size=4),
    field("uv", VECTOR2),
    field("pos", VECTOR3),
    field("n", UINT16),
    field("values", array_of(INT32), size="n"),
    field("pts", array_of(record_of(POINT)), size=2),
    field("origin", record_of(POINT)),
    field("normals", array_of(VECTOR3), size=1),
))

SAMPLE = {
    "i8": -7,
    "u8": 250,
    "i16": -30000,
    "u16": 60000,
    "i32": -2_000_000_000,
    "u32": 4_000_000_000,
    "f": 0.125,
    "name_len": 5,
    "name": "start",
    "tag": "ab\x00\x00",
    "uv": (0.5, -0.5),
    "pos": (1.0, 2.0, 3.0),
    "n": 3,
    "values": [1, -1, 65536],
    "pts": [{"x": 1, "y": 2}, {"x": -3, "y": -4}],
    "origin": {"x": 0, "y": 100},
    "normals": [(0.0, 0.0, 1.0)],
}


def test_round_trip_every_field_type():
    data = encode(EVERYTHING, SAMPLE)
    cur = Cursor(data)
    rec = decode(EVERYTHING, cur)
    assert rec == SAMPLE
    assert cur.remaining() == 0


def test_round_trip_big_endian():
    cfg = DecoderConfig(byteorder=">")
    data = encode(EVERYTHING, SAMPLE, config=cfg)
    assert data != encode(EVERYTHING, SAMPLE)
    assert decode_bytes(EVERYTHING, data, config=cfg) == SAMPLE


def test_encode_counted_layout():
    schema = Schema("counted", (field("count", UINT8), field("items", array_of(UINT8), size="count")))
    assert encode(schema, {"count": 3, "items": [10, 11, 12]}) == bytes([3, 10, 11, 12])


def test_ignored_fields_are_not_written():
    schema = Schema("s", (field("a", UINT8), field("gap", UINT32, ignore=True), field("b", UINT8)))
    assert encode(schema, {"a": 1, "b": 2}) == b"\x01\x02"


def test_named_records_through_registry():
    node = Schema("node", (
        field("value", UINT8),
        field("n", UINT8),
        field("children", array_of(record_of("node")), size="n"),
    ))
    reg = SchemaRegistry((node,))
    tree = {"value": 1, "n": 1, "children": [{"value": 2, "n": 0, "children": []}]}
    data = encode("node", tree, registry=reg)
    assert data == bytes([1, 1, 2, 0])
    assert decode("node", Cursor(data), registry=reg) == tree


def test_encode_errors():
    schema = Schema("counted", (field("count", UINT8), field("items", array_of(UINT8), size="count")))
    with pytest.raises(EncodeError, match="expects 3"):
        encode(schema, {"count": 3, "items": [1, 2]})
    with pytest.raises(EncodeError, match="items"):
        encode(schema, {"count": 1, "items": [300]})
    with pytest.raises(EncodeError, match="missing"):
        encode(schema, {"count": 0})

    label = Schema("label", (field("text", STRING, size=4),))
    with pytest.raises(EncodeError):
        encode(label, {"text": "abc"})
    with pytest.raises(EncodeError):
        encode(label, {"text": "café"})


def test_writer_primitives():
    w = Writer()
    w.u8(1)
    w.s16(-2)
    w.f32(1.5)
    w.write_ascii("hi")
    w.write_vector2((0.0, 1.0))
    assert w.tell() == 1 + 2 + 4 + 2 + 8
    cur = Cursor(w.getvalue())
    assert (cur.u8(), cur.s16(), cur.f32(), cur.read_ascii(2), cur.read_vector2()) == (1, -2, 1.5, "hi", (0.0, 1.0))


def test_encode_round_trip_through_big_endian_cursor():
    cfg = DecoderConfig(byteorder=">")
    data = encode(EVERYTHING, SAMPLE, config=cfg)
    assert decode(EVERYTHING, Cursor(data, byteorder=">"), config=cfg) == SAMPLE


def test_encode_vector_with_wrong_arity():
    with pytest.raises(EncodeError, match="uv"):
        encode(EVERYTHING, dict(SAMPLE, uv=(1.0, 2.0, 3.0)))
    with pytest.raises(EncodeError, match=r"normals\[0\]"):
        encode(EVERYTHING, dict(SAMPLE, normals=[(0.0, 1.0)]))
    with pytest.raises(EncodeError):
        Writer().write_vector3(7)
