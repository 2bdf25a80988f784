from __future__ import annotations
import argparse, json, sys

from .config import DecoderConfig
from .log import configure_logging, log


def _config(args) -> DecoderConfig:
    return DecoderConfig(byteorder=">" if args.big_endian else "<", max_depth=args.max_depth)


def _dump(obj) -> None:
    print(json.dumps(obj, indent=2))


def cmd_info(args):
    from .binary.reader import read_header
    _dump(read_header(args.input, config=_config(args)).model_dump(mode="json"))


def cmd_summary(args):
    from .binary.reader import summarize_file
    counts = summarize_file(args.input, config=_config(args))
    for name, n in counts.items():
        print(f"{name}={n}")


def cmd_lump(args):
    from .binary.reader import iter_lump
    _dump([rec.to_plain() for rec in iter_lump(args.input, args.name, limit=args.limit, config=_config(args))])


def cmd_entities(args):
    from .binary.reader import read_entities
    print(read_entities(args.input, config=_config(args)))


def cmd_textures(args):
    from .binary.reader import read_textures
    _dump([t.model_dump(mode="json") for t in read_textures(args.input, config=_config(args))])


def cmd_plot(args):
    from .binary.reader import iter_lump
    from .viz import plot_vertices
    plot_vertices(iter_lump(args.input, "vertices", config=_config(args)), title=args.input)


def build_parser():
    p = argparse.ArgumentParser(prog="qdatastream", description="Schema-driven reader for Quake BSP files")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every decoded field (DEBUG)")
    p.add_argument("--big-endian", action="store_true", help="Read multi-byte values big-endian")
    p.add_argument("--max-depth", type=int, default=64, help="Maximum nested record depth")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("info", help="print header and lump directory as JSON")
    sp.add_argument("input", help="Path to .bsp file")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("summary", help="record count per lump")
    sp.add_argument("input")
    sp.set_defaults(func=cmd_summary)

    sp = sub.add_parser("lump", help="decode one record lump as JSON")
    sp.add_argument("input")
    sp.add_argument("name", help="Lump name, e.g. vertices, planes, faces")
    sp.add_argument("--limit", type=int, default=None, help="Decode at most N records")
    sp.set_defaults(func=cmd_lump)

    sp = sub.add_parser("entities", help="print the entity lump text")
    sp.add_argument("input")
    sp.set_defaults(func=cmd_entities)

    sp = sub.add_parser("textures", help="texture headers as JSON")
    sp.add_argument("input")
    sp.set_defaults(func=cmd_textures)

    sp = sub.add_parser("plot", help="top-down vertex scatter (needs matplotlib)")
    sp.add_argument("input")
    sp.set_defaults(func=cmd_plot)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    configure_logging(ns.verbose)
    try:
        ns.func(ns)
    except (ValueError, OSError) as e:
        log.debug("command %s failed", ns.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
