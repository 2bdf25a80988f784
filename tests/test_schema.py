import pytest

from qdatastream.binary.codecs.registry import SchemaRegistry
from qdatastream.binary.codecs.schema import (
    INT32, STRING, UINT8, UINT16, VECTOR3,
    FieldRef, LiteralSize, Schema, TypeTag, array_of, field, record_of,
)
from qdatastream.binary.errors import InvalidSizeReference, MissingSizeSource, SchemaError, UnsupportedType
from qdatastream.formats import quake1


def test_field_helper_builds_size_sources():
    assert field("a", STRING, size=4).size == LiteralSize(4)
    assert field("b", STRING, size="n").size == FieldRef("n")
    assert field("c", UINT8).size is None
    with pytest.raises(SchemaError):
        field("d", STRING, size=-1)
    with pytest.raises(SchemaError):
        field("e", STRING, size=True)


def test_field_type_helpers():
    assert field("a", array_of(UINT8), size=1).type.tag is TypeTag.ARRAY
    assert record_of("x").describe() == "record<x>"
    assert array_of(VECTOR3).describe() == "array<vector3>"


def test_duplicate_field_names_rejected():
    with pytest.raises(SchemaError):
        Schema("dup", (field("a", UINT8), field("a", UINT16)))


def test_quake_record_sizes():
    assert quake1.PLANE.fixed_size() == 20
    assert quake1.VERTEX.fixed_size() == 12
    assert quake1.EDGE.fixed_size() == 4
    assert quake1.FACE.fixed_size() == 20
    assert quake1.TEXINFO.fixed_size() == 40
    assert quake1.MODEL.fixed_size() == 64
    assert quake1.NODE.fixed_size() == 24
    assert quake1.LEAF.fixed_size() == 28
    assert quake1.CLIPNODE.fixed_size() == 8
    assert quake1.MIPTEX.fixed_size() == 40
    assert quake1.HEADER.fixed_size() == 4 + 15 * 8
    assert quake1.MIPTEX_HEADER.fixed_size() is None


def test_validate_accepts_well_formed_schema():
    Schema("ok", (
        field("n", UINT16),
        field("items", array_of(INT32), size="n"),
        field("label", STRING, size=8),
        field("skipped", STRING, ignore=True),
    )).validate()


def test_validate_reports_schema_defects():
    bad = [
        (Schema("s", (field("x", STRING),)), MissingSizeSource),
        (Schema("s", (field("x", array_of(UINT8), size="later"), field("later", UINT8))), InvalidSizeReference),
        (Schema("s", (field("v", VECTOR3), field("x", array_of(UINT8), size="v"))), InvalidSizeReference),
        (Schema("s", (field("x", array_of(array_of(UINT8)), size=1),)), UnsupportedType),
        (Schema("s", (field("x", record_of(None)),)), UnsupportedType),
    ]
    for schema, exc in bad:
        with pytest.raises(exc) as ei:
            schema.validate()
        assert ei.value.field_path.startswith("s.")


def test_validate_descends_into_nested_schemas():
    inner = Schema("inner", (field("x", STRING),))
    with pytest.raises(MissingSizeSource) as ei:
        Schema("outer", (field("in", record_of(inner)),)).validate()
    assert ei.value.field_path == "inner.x"


def test_registry_lookup_and_duplicates():
    reg = SchemaRegistry()
    s = reg.register(Schema("a", (field("x", UINT8),)))
    assert reg.get("a") is s
    assert "a" in reg and "b" not in reg
    assert len(reg) == 1
    with pytest.raises(SchemaError):
        reg.register(Schema("a", ()))
    with pytest.raises(UnsupportedType):
        reg.get("b")


def test_registry_validate_checks_name_references():
    reg = SchemaRegistry((Schema("holder", (field("x", array_of(record_of("ghost")), size=1),)),))
    with pytest.raises(UnsupportedType) as ei:
        reg.validate()
    assert ei.value.field_path == "holder.x"


def test_quake_registry():
    reg = quake1.build_registry()
    assert {"header", "lump", "miptex_header", "miptex", "vertex"} <= set(reg.names())
    assert reg.get("plane") is quake1.PLANE
