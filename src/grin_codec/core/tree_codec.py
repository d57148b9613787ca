"""Preorder tree serialization.

    leaf     -> 0 + symbol (9 bits)
    internal -> 1 + left + right

No length prefix: the shape terminates itself.
"""

from __future__ import annotations

from typing import List

from grin_codec.core.bitio import BitReader, BitWriter
from grin_codec.core.huffman_tree import EOF_SYMBOL, SYMBOL_BITS, HuffmanNode
from grin_codec.errors import EndOfBits, FormatError, TruncatedHeader

# 257 distinct symbols at most -> at most 256 internal nodes
MAX_INTERNAL_NODES = EOF_SYMBOL


def write_tree(root: HuffmanNode, writer: BitWriter) -> None:
    if root.is_leaf:
        writer.write_bit(0)
        writer.write_bits(root.symbol, SYMBOL_BITS)
        return
    writer.write_bit(1)
    write_tree(root.left, writer)
    write_tree(root.right, writer)


def _read_node(reader: BitReader) -> HuffmanNode:
    if reader.read_bit() == 0:
        sym = reader.read_bits(SYMBOL_BITS)
        if sym > EOF_SYMBOL:
            raise FormatError(f"tree header: symbol out of range: {sym}")
        return HuffmanNode(freq=0, symbol=sym)
    return HuffmanNode(freq=0)


def read_tree(reader: BitReader) -> HuffmanNode:
    """
    Rebuild a tree written by write_tree().

    Explicit stack instead of recursion: ``pending`` holds internal nodes
    that still have a free child slot, innermost last.
    """
    seen: set[int] = set()
    pending: List[HuffmanNode] = []
    internal = 0
    root: HuffmanNode | None = None

    try:
        while True:
            node = _read_node(reader)
            if node.symbol is None:
                internal += 1
                if internal > MAX_INTERNAL_NODES:
                    raise FormatError("tree header: too many internal nodes")
            else:
                if node.symbol in seen:
                    raise FormatError(f"tree header: duplicate symbol {node.symbol}")
                seen.add(node.symbol)

            if root is None:
                root = node
            else:
                parent = pending[-1]
                if parent.left is None:
                    parent.left = node
                else:
                    parent.right = node
                    pending.pop()

            if node.symbol is None:
                pending.append(node)
            if not pending:
                break
    except EndOfBits as err:
        raise TruncatedHeader(f"tree header truncated ({err})") from err

    if EOF_SYMBOL not in seen:
        raise FormatError("tree header: no EOF leaf")
    return root
