"""
Pytest configuration and shared fixtures.
"""

import pytest

from qdatastream.binary.writer import Writer, encode
from qdatastream.formats import quake1

ENTITIES = '{\n"classname" "worldspawn"\n"wad" "gfx/base.wad"\n}\n'
VERTICES = [(1.0, 2.0, 3.0), (-4.5, 0.25, 128.0)]


def _textures_lump() -> bytes:
    # directory: 2 entries, the second one missing (-1)
    directory = encode(quake1.MIPTEX_HEADER, {"count": 2, "offsets": [12, -1]})
    miptex = encode(quake1.MIPTEX, {
        "name": "wall1".ljust(16, "\x00"),
        "width": 64,
        "height": 32,
        "offsets": [40, 40 + 64 * 32, 0, 0],
    })
    return directory + miptex


def build_bsp(lumps: dict, version: int = quake1.BSP_VERSION) -> bytes:
    header_size = 4 + 8 * len(quake1.LUMP_NAMES)
    body = bytearray()
    entries = []
    for name in quake1.LUMP_NAMES:
        data = lumps.get(name, b"")
        entries.append((header_size + len(body), len(data)))
        body += data
    w = Writer()
    w.s32(version)
    for off, length in entries:
        w.s32(off)
        w.s32(length)
    return w.getvalue() + bytes(body)


@pytest.fixture()
def bsp_lumps() -> dict:
    return {
        "entities": ENTITIES.encode("ascii") + b"\x00",
        "planes": encode(quake1.PLANE, {"normal": (0.0, 0.0, 1.0), "dist": 64.0, "type": 2}),
        "textures": _textures_lump(),
        "vertices": b"".join(encode(quake1.VERTEX, {"point": v}) for v in VERTICES),
        "edges": encode(quake1.EDGE, {"v0": 0, "v1": 1}) * 3,
    }


@pytest.fixture()
def bsp_bytes(bsp_lumps) -> bytes:
    return build_bsp(bsp_lumps)


@pytest.fixture()
def bsp_path(tmp_path, bsp_bytes):
    p = tmp_path / "e1m1.bsp"
    p.write_bytes(bsp_bytes)
    return p
