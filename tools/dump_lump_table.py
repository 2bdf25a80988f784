#!/usr/bin/env python3
from pathlib import Path
from qdatastream.binary.reader import _load_bytes, read_header
from qdatastream.binary.codecs.cursor import Cursor
from qdatastream.formats import quake1

def main(path: Path, peek: int = 16):
    raw = _load_bytes(str(path))
    hdr = read_header(raw)
    cur = Cursor(raw)
    print(f"{path}: version={hdr.version} size={len(raw)}")
    for e in hdr.lumps:
        schema = quake1.RECORD_LUMPS.get(e.name)
        rec_size = schema.fixed_size() if schema else None
        count = f"{e.length // rec_size:6d} x {rec_size:2d}B" if rec_size else " " * 13
        cur.seek(e.offset)
        head = cur.peek(min(peek, e.length)).hex()
        print(f"  {e.name:13s} off={e.offset:8d} len={e.length:8d} {count}  {head}")

if __name__ == "__main__":
    import sys
    main(Path(sys.argv[1] if len(sys.argv) > 1 else "maps/e1m1.bsp"))
