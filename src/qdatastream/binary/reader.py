from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .codecs.cursor import Cursor
from .codecs.decoder import Decoder
from .errors import BspFormatError
from ..config import DEFAULT_CONFIG, DecoderConfig
from ..formats import quake1
from ..log import log
from ..models.bsp import BspFile, BspHeader, LumpEntry, Texture
from ..models.record import Record

BytesLike = Union[str, Path, bytes, bytearray, memoryview]

_REGISTRY = quake1.build_registry()


# -----------------------------
# Helpers
# -----------------------------

def _load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    return Path(str(inp)).read_bytes()


def _decoder(config: Optional[DecoderConfig]) -> Decoder:
    return Decoder(config=config or DEFAULT_CONFIG, registry=_REGISTRY)


def _cursor(raw: bytes, config: Optional[DecoderConfig]) -> Cursor:
    return Cursor(raw, byteorder=(config or DEFAULT_CONFIG).byteorder)


# -----------------------------
# Header / lump directory
# -----------------------------

def _read_header(cur: Cursor, dec: Decoder) -> BspHeader:
    cur.seek(0)
    rec = dec.decode(quake1.HEADER, cur)
    if rec["version"] != quake1.BSP_VERSION:
        raise BspFormatError(f"unsupported BSP version {rec['version']} (expected {quake1.BSP_VERSION})",
                             field_path="version", offset=0)
    lumps = []
    for name, entry in zip(quake1.LUMP_NAMES, rec["lumps"]):
        off, length = entry["offset"], entry["length"]
        if off < 0 or length < 0 or off + length > cur.length:
            raise BspFormatError(f"lump {name!r} [{off}, {off + length}) overruns file of {cur.length} bytes",
                                 field_path=f"lumps.{name}", offset=off)
        lumps.append(LumpEntry(name=name, offset=off, length=length))
    return BspHeader(version=rec["version"], lumps=lumps)


def read_header(data: BytesLike, *, config: Optional[DecoderConfig] = None) -> BspHeader:
    raw = _load_bytes(data)
    return _read_header(_cursor(raw, config), _decoder(config))


# -----------------------------
# Lump contents
# -----------------------------

def iter_lump(
    data: BytesLike,
    name: str,
    *,
    limit: Optional[int] = None,
    config: Optional[DecoderConfig] = None,
) -> Iterator[Record]:
    """
    Stream records of a fixed-size record lump (planes, vertices, faces, ...).
    Seeks to the lump offset from the header, then decodes back to back.
    """
    schema = quake1.RECORD_LUMPS.get(name)
    if schema is None:
        raise BspFormatError(f"{name!r} is not a record lump; expected one of {sorted(quake1.RECORD_LUMPS)}")
    raw = _load_bytes(data)
    cur = _cursor(raw, config)
    dec = _decoder(config)
    entry = _read_header(cur, dec).lump(name)

    size = schema.fixed_size()
    if entry.length % size:
        raise BspFormatError(f"lump {name!r} length {entry.length} is not a multiple of {size}",
                             field_path=f"lumps.{name}", offset=entry.offset)
    count = entry.length // size
    if limit is not None:
        count = min(count, limit)
    log.info("lump %s: %d records of %d bytes at %d", name, count, size, entry.offset)

    cur.seek(entry.offset)
    for _ in range(count):
        yield dec.decode(schema, cur)


def read_lump(data: BytesLike, name: str, *, limit: Optional[int] = None,
              config: Optional[DecoderConfig] = None) -> List[Record]:
    return list(iter_lump(data, name, limit=limit, config=config))


def read_entities(data: BytesLike, *, config: Optional[DecoderConfig] = None) -> str:
    raw = _load_bytes(data)
    cur = _cursor(raw, config)
    entry = _read_header(cur, _decoder(config)).lump("entities")
    cur.seek(entry.offset)
    text = cur.read_ascii(entry.length)
    return text.split("\x00", 1)[0]


def read_textures(data: BytesLike, *, config: Optional[DecoderConfig] = None) -> List[Texture]:
    """Texture headers from the miptex lump; offsets of -1 mark missing textures."""
    raw = _load_bytes(data)
    cur = _cursor(raw, config)
    dec = _decoder(config)
    entry = _read_header(cur, dec).lump("textures")
    if entry.length == 0:
        return []

    cur.seek(entry.offset)
    directory = dec.decode("miptex_header", cur)
    textures = []
    for i, rel in enumerate(directory["offsets"]):
        if rel < 0:
            continue
        if rel + quake1.MIPTEX.fixed_size() > entry.length:
            raise BspFormatError(f"texture {i} at offset {rel} runs past the textures lump ({entry.length} bytes)",
                                 field_path=f"textures.offsets[{i}]", offset=entry.offset)
        cur.seek(entry.offset + rel)
        mt = dec.decode("miptex", cur)
        textures.append(Texture(
            name=mt["name"].split("\x00", 1)[0],
            width=mt["width"],
            height=mt["height"],
            offsets=mt["offsets"],
        ))
    return textures


# -----------------------------
# Whole file
# -----------------------------

def parse_file(data: BytesLike, *, config: Optional[DecoderConfig] = None) -> BspFile:
    """Full parse: header, entity text, texture headers and every record lump."""
    raw = _load_bytes(data)
    header = read_header(raw, config=config)
    lumps = {
        name: [rec.to_plain() for rec in iter_lump(raw, name, config=config)]
        for name in quake1.LUMP_NAMES
        if name in quake1.RECORD_LUMPS
    }
    return BspFile(
        header=header,
        entities=read_entities(raw, config=config),
        textures=read_textures(raw, config=config),
        lumps=lumps,
    )


def summarize_file(data: BytesLike, *, config: Optional[DecoderConfig] = None) -> Dict[str, int]:
    """Record counts per record lump, from the directory alone."""
    header = read_header(data, config=config)
    out = {}
    for entry in header.lumps:
        schema = quake1.RECORD_LUMPS.get(entry.name)
        if schema is not None:
            out[entry.name] = entry.length // schema.fixed_size()
    return out
