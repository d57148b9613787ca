from __future__ import annotations

import io
import random

import pytest

from grin_codec.core.bitio import BitReader, BitWriter
from grin_codec.core.huffman_tree import EOF_SYMBOL, build_huffman_tree, trees_equal
from grin_codec.core.tree_codec import read_tree, write_tree
from grin_codec.errors import FormatError, TruncatedHeader


def _serialize(root) -> bytes:
    buf = io.BytesIO()
    with BitWriter(buf) as w:
        write_tree(root, w)
    return buf.getvalue()


def _bits(pattern: str) -> BitReader:
    """Reader over a '0'/'1' string (spaces ignored), zero padded."""
    buf = io.BytesIO()
    with BitWriter(buf) as w:
        for c in pattern.replace(" ", ""):
            w.write_bit(int(c))
    return BitReader(io.BytesIO(buf.getvalue()))


# Golden vectors: preorder, leaf = 0 + 9-bit symbol, internal = 1.
def test_golden_single_eof_leaf() -> None:
    # 0 100000000 -> 0100000000 + pad
    assert _serialize(build_huffman_tree({EOF_SYMBOL: 1})).hex() == "4000"


def test_golden_aaaa() -> None:
    # 1 | 0 100000000 | 0 001000001 -> 21 bits
    assert _serialize(build_huffman_tree({65: 4})).hex() == "a00208"


def test_golden_aab() -> None:
    # 1 | 0 001000001 | 1 | 0 001000010 | 0 100000000 -> exactly 32 bits
    assert _serialize(build_huffman_tree({65: 2, 66: 1})).hex() == "88310900"


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_tree_roundtrip_random_maps(seed: int) -> None:
    rng = random.Random(seed)
    syms = rng.sample(range(256), rng.randint(1, 256))
    root = build_huffman_tree({s: rng.randint(1, 50) for s in syms})

    back = read_tree(BitReader(io.BytesIO(_serialize(root))))
    assert trees_equal(root, back)


def test_read_tree_leaves_have_zero_freq() -> None:
    back = read_tree(BitReader(io.BytesIO(_serialize(build_huffman_tree({65: 4})))))
    assert back.left.freq == 0 and back.right.freq == 0
    assert back.freq == 0


def test_read_tree_stops_at_end_of_shape() -> None:
    r = BitReader(io.BytesIO(_serialize(build_huffman_tree({65: 4})) + b"\xff"))
    read_tree(r)
    assert r.bits_read == 21


def test_truncated_header() -> None:
    blob = _serialize(build_huffman_tree({i: 1 for i in range(10)}))
    with pytest.raises(TruncatedHeader):
        read_tree(BitReader(io.BytesIO(blob[:3])))


def test_empty_header_is_truncated() -> None:
    with pytest.raises(TruncatedHeader):
        read_tree(BitReader(io.BytesIO(b"")))


def test_symbol_out_of_range() -> None:
    # leaf with 9-bit value 300
    with pytest.raises(FormatError, match="out of range"):
        read_tree(_bits("0 100101100"))


def test_duplicate_symbol() -> None:
    with pytest.raises(FormatError, match="duplicate"):
        read_tree(_bits("1 0 001000001 0 001000001"))


def test_missing_eof_leaf() -> None:
    with pytest.raises(FormatError, match="EOF"):
        read_tree(_bits("1 0 001000001 0 001000010"))


def test_too_many_internal_nodes() -> None:
    with pytest.raises(FormatError, match="internal"):
        read_tree(_bits("1" * 300))
