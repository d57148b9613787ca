"""grin CLI.

This is the stable CLI entrypoint (console-script: ``grin``).

    grin encode <infile> <outfile> [--stats]
    grin decode <infile> <outfile> [--strict]
    grin verify <infile> [--lenient]

UX policy:
  - Any other invocation prints usage on stdout and main() returns 0.
  - Typed errors map to stable exit codes (see grin_codec.errors).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from grin_codec import __version__
from grin_codec.errors import EXIT_GENERIC, EXIT_OK, GrinError


class _UsageParser(argparse.ArgumentParser):
    """Bad invocations print usage and exit 0 instead of argparse's exit 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stdout)
        raise SystemExit(EXIT_OK)


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def print_stats(original_path: Path, compressed_path: Path, stats) -> None:
    print("=== grin stats ===")
    print(f"original       : {original_path} ({stats.input_size} byte)")
    print(f"compressed     : {compressed_path} ({stats.output_size} byte)")
    print(f"header bits    : {stats.header_bits} ({stats.leaves} leaves)")
    print(f"longest code   : {stats.max_code_len} bit")

    if stats.ratio is None:
        print("empty input: no meaningful ratio")
        print("==================")
        return

    print(f"ratio          : {stats.ratio:.3f} (1.0 = no compression)")
    print(f"bits/byte      : {stats.bits_per_byte:.3f} (8.0 = uncompressed)")
    print("==================")


def _encode(input_path: Path, output_path: Path, *, stats: bool) -> int:
    from grin_codec.engine.container import encode_file

    st = encode_file(input_path, output_path)
    if stats:
        print_stats(input_path, output_path, st)
    return EXIT_OK


def _decode(input_path: Path, output_path: Path, *, strict: bool) -> int:
    from grin_codec.engine.container import decode_file

    decode_file(input_path, output_path, strict=strict)
    return EXIT_OK


def _verify(input_path: Path, *, strict: bool) -> int:
    from grin_codec.verify import verify_file

    report = verify_file(input_path, strict=strict)
    print("OK")
    for line in report.lines():
        print(line)
    if not report.eof_reached:
        print(f"[grin] warning: {input_path}: payload ended before the EOF code", file=sys.stderr)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = _UsageParser(prog="grin", description="Static Huffman compressor for .grin files")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True, parser_class=_UsageParser)

    p_e = sub.add_parser("encode", help="Compress a file into .grin")
    p_e.add_argument("infile", type=Path)
    p_e.add_argument("outfile", type=Path)
    p_e.add_argument("--stats", action="store_true", help="Print size/ratio statistics")
    _add_common_args(p_e)

    p_d = sub.add_parser("decode", help="Decompress a .grin file")
    p_d.add_argument("infile", type=Path)
    p_d.add_argument("outfile", type=Path)
    p_d.add_argument(
        "--strict",
        action="store_true",
        help="Fail if the payload ends before the EOF code (default: stop silently)",
    )
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Check a .grin file without writing output")
    p_v.add_argument("infile", type=Path)
    p_v.add_argument(
        "--lenient",
        action="store_true",
        help="Accept a payload that ends before the EOF code",
    )
    _add_common_args(p_v)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    try:
        ns = p.parse_args(argv)
    except SystemExit as e:
        # usage, --help, --version
        return e.code if isinstance(e.code, int) else EXIT_OK

    try:
        if ns.cmd == "encode":
            return _encode(ns.infile, ns.outfile, stats=bool(ns.stats))
        if ns.cmd == "decode":
            return _decode(ns.infile, ns.outfile, strict=bool(ns.strict))
        if ns.cmd == "verify":
            return _verify(ns.infile, strict=not ns.lenient)
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except GrinError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[grin] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[grin] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
