from __future__ import annotations

import io
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from grin_codec.core.bitio import BitReader, BitWriter
from grin_codec.core.huffman_tree import (
    EOF_SYMBOL,
    HuffmanNode,
    build_code_table,
    build_huffman_tree,
)
from grin_codec.core.stream_codec import decode_stream, encode_stream
from grin_codec.core.tree_codec import read_tree, write_tree
from grin_codec.errors import BadMagic, EndOfBits, InvalidInput

MAGIC = 0x736
MAGIC_BITS = 32


# -------------------
# Container .grin
# [MAGIC(u32 big-endian)|TREE(preorder, bit-packed)|PAYLOAD(codes..., EOF)|pad]
# -------------------
@dataclass(frozen=True)
class EncodeStats:
    input_size: int
    output_size: int
    header_bits: int
    leaves: int
    max_code_len: int

    @property
    def ratio(self) -> float | None:
        if self.input_size == 0:
            return None
        return self.output_size / self.input_size

    @property
    def bits_per_byte(self) -> float | None:
        if self.input_size == 0:
            return None
        return (self.output_size * 8) / self.input_size


def count_frequencies(data: bytes) -> Dict[int, int]:
    """Byte counts plus the EOF symbol (empty input -> {256: 1})."""
    freqs: Dict[int, int] = dict(Counter(data))
    freqs[EOF_SYMBOL] = 1
    return freqs


def _write_container(data: bytes, writer: BitWriter) -> tuple[int, HuffmanNode]:
    root = build_huffman_tree(count_frequencies(data))
    writer.write_bits(MAGIC, MAGIC_BITS)
    write_tree(root, writer)
    header_bits = writer.bits_written
    encode_stream(root, data, writer)
    return header_bits, root


def _reject_same_file(input_path: Path, output_path: Path) -> None:
    if input_path.resolve() == output_path.resolve():
        raise InvalidInput(f"input and output are the same file: {input_path}")


def read_header(reader: BitReader) -> HuffmanNode:
    """Check the magic number and rebuild the tree."""
    try:
        magic = reader.read_bits(MAGIC_BITS)
    except EndOfBits as err:
        raise BadMagic("not a grin file (shorter than the magic number)") from err
    if magic != MAGIC:
        raise BadMagic(f"not a grin file (magic 0x{magic:08x}, expected 0x{MAGIC:08x})")
    return read_tree(reader)


def encode_bytes(data: bytes) -> bytes:
    buf = io.BytesIO()
    with BitWriter(buf) as writer:
        _write_container(bytes(data), writer)
    return buf.getvalue()


def decode_bytes(blob: bytes, *, strict: bool = False) -> bytes:
    out = io.BytesIO()
    with BitReader(io.BytesIO(blob)) as reader:
        root = read_header(reader)
        decode_stream(root, reader, out, strict=strict)
    return out.getvalue()


def encode_file(input_path: str | Path, output_path: str | Path) -> EncodeStats:
    input_path = Path(input_path)
    output_path = Path(output_path)
    _reject_same_file(input_path, output_path)

    data = input_path.read_bytes()
    with BitWriter.open(output_path) as writer:
        header_bits, root = _write_container(data, writer)

    codes = build_code_table(root)
    return EncodeStats(
        input_size=len(data),
        output_size=output_path.stat().st_size,
        header_bits=header_bits,
        leaves=len(codes),
        max_code_len=max(len(c) for c in codes.values()),
    )


def decode_file(input_path: str | Path, output_path: str | Path, *, strict: bool = False) -> int:
    """
    Decode ``input_path`` into ``output_path``; returns the decoded size.

    Input and output must be different files. The header is validated
    before the output file is created, so a bad magic or a broken tree
    leaves nothing behind. A payload failure removes the partial output.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    _reject_same_file(input_path, output_path)
    with BitReader.open(input_path) as reader:
        root = read_header(reader)
        with open(output_path, "wb") as fp:
            try:
                written, _ = decode_stream(root, reader, fp, strict=strict)
                return written
            except BaseException:
                fp.close()
                output_path.unlink(missing_ok=True)
                raise

