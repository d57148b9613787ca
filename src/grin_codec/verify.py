"""Verification of .grin files.

A file verifies when:
  - the magic number matches
  - the tree header decodes and validates (symbols in range, no duplicates, one EOF leaf)
  - the payload decodes up to the EOF code (strict by default; lenient
    runs report eof_reached=False instead of failing)

Decoded bytes are counted, never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from grin_codec.core.bitio import BitReader
from grin_codec.core.huffman_tree import build_code_table
from grin_codec.core.stream_codec import decode_stream
from grin_codec.engine.container import read_header


class _CountingSink:
    def __init__(self) -> None:
        self.n = 0

    def write(self, b: bytes) -> int:
        self.n += len(b)
        return len(b)


@dataclass(frozen=True)
class VerifyReport:
    path: Path
    file_size: int
    header_bits: int
    leaves: int
    max_code_len: int
    decoded_size: int
    eof_reached: bool

    def lines(self) -> list[str]:
        return [
            f"file         : {self.path} ({self.file_size} byte)",
            f"header bits  : {self.header_bits}",
            f"leaves       : {self.leaves} (EOF included)",
            f"longest code : {self.max_code_len} bit",
            f"decoded size : {self.decoded_size} byte",
            f"EOF reached  : {'yes' if self.eof_reached else 'no (payload cut short)'}",
        ]


def verify_file(path: str | Path, *, strict: bool = True) -> VerifyReport:
    path = Path(path)
    sink = _CountingSink()
    with BitReader.open(path) as reader:
        root = read_header(reader)
        header_bits = reader.bits_read
        _, eof_reached = decode_stream(root, reader, sink, strict=strict)

    codes = build_code_table(root)
    return VerifyReport(
        path=path,
        file_size=path.stat().st_size,
        header_bits=header_bits,
        leaves=len(codes),
        max_code_len=max(len(c) for c in codes.values()),
        decoded_size=sink.n,
        eof_reached=eof_reached,
    )
