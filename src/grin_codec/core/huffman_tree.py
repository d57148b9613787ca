from __future__ import annotations

import heapq
import itertools
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from grin_codec.errors import InvalidInput

EOF_SYMBOL = 256
SYMBOL_BITS = 9  # 0..255 + EOF


# -------------------
# Nodes and builder
# -------------------
@dataclass
class HuffmanNode:
    freq: int
    symbol: Optional[int] = None  # 0..256 on leaves, None on internal nodes
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def _is_int(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def augment_with_eof(freqs: Mapping[int, int]) -> Dict[int, int]:
    """Copy of ``freqs`` with the EOF symbol forced to frequency 1."""
    out: Dict[int, int] = {}
    for sym, f in freqs.items():
        if not _is_int(sym):
            raise InvalidInput(f"symbol must be an int, got {sym!r}")
        if not _is_int(f):
            raise InvalidInput(f"frequency for symbol {sym} must be an int, got {f!r}")
        out[sym] = f
    out[EOF_SYMBOL] = 1
    return out


def build_huffman_tree(freqs: Mapping[int, int]) -> HuffmanNode:
    """
    Classic Huffman merge over an EOF-augmented frequency map.

    Ties are broken by insertion order: leaves enter the heap sorted by
    symbol, merged nodes get a fresh sequence number, and the heap key is
    (freq, seq). The first node popped becomes the left child.
    """
    if not freqs:
        raise InvalidInput("frequency map is empty")

    augmented = augment_with_eof(freqs)
    for sym, f in augmented.items():
        if not (0 <= sym <= EOF_SYMBOL):
            raise InvalidInput(f"symbol out of range 0..{EOF_SYMBOL}: {sym}")
        if f < 0:
            raise InvalidInput(f"negative frequency for symbol {sym}: {f}")

    heap: List[Tuple[int, int, HuffmanNode]] = []
    counter = itertools.count()
    for sym in sorted(augmented):
        f = augmented[sym]
        heapq.heappush(heap, (f, next(counter), HuffmanNode(freq=f, symbol=sym)))

    while len(heap) > 1:
        f1, _, n1 = heapq.heappop(heap)
        f2, _, n2 = heapq.heappop(heap)
        parent = HuffmanNode(freq=f1 + f2, symbol=None, left=n1, right=n2)
        heapq.heappush(heap, (parent.freq, next(counter), parent))

    return heap[0][2]


def build_code_table(root: HuffmanNode) -> Dict[int, str]:
    """symbol -> bit string ("0" = left, "1" = right). A lone leaf root gets ""."""
    codes: Dict[int, str] = {}

    def dfs(node: HuffmanNode, path: str) -> None:
        if node.is_leaf:
            codes[node.symbol] = path
            return
        dfs(node.left, path + "0")
        dfs(node.right, path + "1")

    dfs(root, "")
    return codes


def iter_leaves(root: HuffmanNode):
    """Leaves left to right."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def trees_equal(a: HuffmanNode, b: HuffmanNode) -> bool:
    """Same shape and same leaf symbols in the same positions (freq ignored)."""
    stack = [(a, b)]
    while stack:
        x, y = stack.pop()
        if x.is_leaf != y.is_leaf:
            return False
        if x.is_leaf:
            if x.symbol != y.symbol:
                return False
            continue
        stack.append((x.left, y.left))
        stack.append((x.right, y.right))
    return True
