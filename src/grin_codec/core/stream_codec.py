from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO, Dict, Tuple

from grin_codec.core.bitio import CHUNK_SIZE, BitReader, BitWriter
from grin_codec.core.huffman_tree import EOF_SYMBOL, HuffmanNode, build_code_table
from grin_codec.errors import FormatError, InvalidInput, TruncatedStream


def _code_bits(root: HuffmanNode) -> Dict[int, Tuple[int, ...]]:
    return {sym: tuple(int(c) for c in code) for sym, code in build_code_table(root).items()}


def encode_stream(root: HuffmanNode, data: Iterable[int], writer: BitWriter) -> None:
    """
    Write the code of every byte in ``data``, then the EOF code.

    No alignment here: padding the last byte is BitWriter.close()'s job.
    """
    codes = _code_bits(root)
    for b in data:
        try:
            bits = codes[b]
        except KeyError:
            raise InvalidInput(f"byte {b} has no code (tree built from different data?)") from None
        for bit in bits:
            writer.write_bit(bit)
    for bit in codes[EOF_SYMBOL]:
        writer.write_bit(bit)


def decode_stream(root: HuffmanNode, reader: BitReader, out: BinaryIO, *, strict: bool = False) -> Tuple[int, bool]:
    """
    Walk the tree one bit at a time, emitting a byte at every non-EOF leaf.

    Stops at the EOF leaf (never written) or when the reader runs dry.
    Running dry before EOF is silent by default; with strict=True it raises
    TruncatedStream. Returns (bytes written to ``out``, whether EOF was reached).
    """
    if root.is_leaf:
        # zero-length code: nothing to read
        if root.symbol != EOF_SYMBOL:
            raise FormatError(f"single-leaf tree must hold EOF, got symbol {root.symbol}")
        return 0, True

    buf = bytearray()
    written = 0
    eof = False
    node = root
    while reader.has_bits():
        node = node.right if reader.read_bit() else node.left
        if not node.is_leaf:
            continue
        if node.symbol == EOF_SYMBOL:
            eof = True
            break
        buf.append(node.symbol)
        node = root
        if len(buf) >= CHUNK_SIZE:
            out.write(buf)
            written += len(buf)
            buf.clear()
    else:
        if strict:
            where = "at a code boundary" if node is root else "mid-code"
            raise TruncatedStream(f"payload ended {where} without EOF after {reader.bits_read} bits")

    if buf:
        out.write(buf)
        written += len(buf)
    return written, eof
