"""Bit-level I/O over binary streams (MSB-first).

BitWriter packs bits into bytes with a rack/mask pair; the last partial byte
is zero padded on close(). BitReader is the mirror image, with has_bits() for
end-of-data detection. Both are context managers: a stream opened through
``open()`` is always closed on exit, exceptions included.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from grin_codec.errors import EndOfBits

CHUNK_SIZE = 64 * 1024
MAX_FIELD_BITS = 32


def _check_width(n: int) -> None:
    if not (0 <= n <= MAX_FIELD_BITS):
        raise ValueError(f"bit field width must be 0..{MAX_FIELD_BITS}, got {n}")


class BitWriter:
    def __init__(self, fp: BinaryIO, *, owns_fp: bool = False):
        self._fp = fp
        self._owns_fp = owns_fp
        self._buf = bytearray()
        self._rack = 0
        self._mask = 0x80
        self._closed = False
        self.bits_written = 0

    @classmethod
    def open(cls, path: str | Path) -> "BitWriter":
        return cls(open(path, "wb"), owns_fp=True)

    def write_bit(self, bit: int) -> None:
        if bit:
            self._rack |= self._mask
        self._mask >>= 1
        self.bits_written += 1
        if self._mask == 0:
            self._buf.append(self._rack)
            self._rack = 0
            self._mask = 0x80
            if len(self._buf) >= CHUNK_SIZE:
                self._fp.write(self._buf)
                self._buf.clear()

    def write_bits(self, value: int, n: int) -> None:
        _check_width(n)
        if value < 0 or value >> n:
            raise ValueError(f"value {value} does not fit in {n} bits")
        for shift in range(n - 1, -1, -1):
            self.write_bit((value >> shift) & 1)

    def flush(self) -> None:
        """Write out whole bytes; the partial byte stays in the rack."""
        if self._buf:
            self._fp.write(self._buf)
            self._buf.clear()
        self._fp.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._mask != 0x80:
                # pad with zero bits
                self._buf.append(self._rack)
                self._rack = 0
                self._mask = 0x80
            self.flush()
        finally:
            if self._owns_fp:
                self._fp.close()

    def __enter__(self) -> "BitWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BitReader:
    def __init__(self, fp: BinaryIO, *, owns_fp: bool = False):
        self._fp = fp
        self._owns_fp = owns_fp
        self._buf = b""
        self._pos = 0
        self._rack = 0
        self._mask = 0
        self.bits_read = 0

    @classmethod
    def open(cls, path: str | Path) -> "BitReader":
        return cls(open(path, "rb"), owns_fp=True)

    def _load_byte(self) -> bool:
        if self._pos >= len(self._buf):
            self._buf = self._fp.read(CHUNK_SIZE)
            self._pos = 0
            if not self._buf:
                return False
        self._rack = self._buf[self._pos]
        self._pos += 1
        self._mask = 0x80
        return True

    def has_bits(self) -> bool:
        return self._mask != 0 or self._load_byte()

    def read_bit(self) -> int:
        if self._mask == 0 and not self._load_byte():
            raise EndOfBits(f"end of data after {self.bits_read} bits")
        bit = 1 if self._rack & self._mask else 0
        self._mask >>= 1
        self.bits_read += 1
        return bit

    def read_bits(self, n: int) -> int:
        _check_width(n)
        value = 0
        for _ in range(n):
            value = (value << 1) | self.read_bit()
        return value

    def close(self) -> None:
        if self._owns_fp:
            self._fp.close()

    def __enter__(self) -> "BitReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
