from __future__ import annotations
from ..binary.codecs.registry import SchemaRegistry
from ..binary.codecs.schema import (
    FLOAT32, INT16, INT32, STRING, UINT16, UINT32, UINT8, VECTOR3,
    Schema, array_of, field, record_of,
)

BSP_VERSION = 29

# Lump directory order in a version 29 header
LUMP_NAMES = (
    "entities",
    "planes",
    "textures",
    "vertices",
    "visibility",
    "nodes",
    "texinfo",
    "faces",
    "lighting",
    "clipnodes",
    "leaves",
    "marksurfaces",
    "edges",
    "surfedges",
    "models",
)

LUMP = Schema("lump", (
    field("offset", INT32),
    field("length", INT32),
))

HEADER = Schema("header", (
    field("version", INT32),
    field("lumps", array_of(record_of(LUMP)), size=len(LUMP_NAMES)),
))

PLANE = Schema("plane", (
    field("normal", VECTOR3),
    field("dist", FLOAT32),
    field("type", INT32),
))

VERTEX = Schema("vertex", (
    field("point", VECTOR3),
))

EDGE = Schema("edge", (
    field("v0", UINT16),
    field("v1", UINT16),
))

SURFEDGE = Schema("surfedge", (
    field("edge", INT32),
))

MARKSURFACE = Schema("marksurface", (
    field("face", UINT16),
))

FACE = Schema("face", (
    field("plane", INT16),
    field("side", INT16),
    field("first_edge", INT32),
    field("num_edges", INT16),
    field("texinfo", INT16),
    field("styles", array_of(UINT8), size=4),
    field("light_offset", INT32),
))

TEXINFO = Schema("texinfo", (
    field("s", VECTOR3),
    field("s_offset", FLOAT32),
    field("t", VECTOR3),
    field("t_offset", FLOAT32),
    field("miptex", INT32),
    field("flags", INT32),
))

MODEL = Schema("model", (
    field("mins", VECTOR3),
    field("maxs", VECTOR3),
    field("origin", VECTOR3),
    field("head_nodes", array_of(INT32), size=4),
    field("vis_leafs", INT32),
    field("first_face", INT32),
    field("num_faces", INT32),
))

NODE = Schema("node", (
    field("plane", INT32),
    field("children", array_of(INT16), size=2),
    field("mins", array_of(INT16), size=3),
    field("maxs", array_of(INT16), size=3),
    field("first_face", UINT16),
    field("num_faces", UINT16),
))

CLIPNODE = Schema("clipnode", (
    field("plane", INT32),
    field("children", array_of(INT16), size=2),
))

LEAF = Schema("leaf", (
    field("contents", INT32),
    field("vis_offset", INT32),
    field("mins", array_of(INT16), size=3),
    field("maxs", array_of(INT16), size=3),
    field("first_marksurface", UINT16),
    field("num_marksurfaces", UINT16),
    field("ambient_levels", array_of(UINT8), size=4),
))

MIPTEX_HEADER = Schema("miptex_header", (
    field("count", INT32),
    field("offsets", array_of(INT32), size="count"),
))

MIPTEX = Schema("miptex", (
    field("name", STRING, size=16),
    field("width", UINT32),
    field("height", UINT32),
    field("offsets", array_of(UINT32), size=4),
))

# Lumps stored as packed arrays of one fixed-size record
RECORD_LUMPS = {
    "planes": PLANE,
    "vertices": VERTEX,
    "nodes": NODE,
    "texinfo": TEXINFO,
    "faces": FACE,
    "clipnodes": CLIPNODE,
    "leaves": LEAF,
    "marksurfaces": MARKSURFACE,
    "edges": EDGE,
    "surfedges": SURFEDGE,
    "models": MODEL,
}


def build_registry() -> SchemaRegistry:
    reg = SchemaRegistry((LUMP, HEADER, MIPTEX_HEADER, MIPTEX))
    for schema in RECORD_LUMPS.values():
        reg.register(schema)
    reg.validate()
    return reg
