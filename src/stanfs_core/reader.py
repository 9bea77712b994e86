"""Sequential little-endian reader over a store file."""
from __future__ import annotations

import struct
from typing import BinaryIO

from .errors import SeekError, ShortRead
from .protocol import SIZE_MASK


def decode_u24(b: bytes) -> int:
    """Decode the 24-bit little-endian length held in the first 3 bytes of b."""
    return b[0] | (b[1] << 8) | (b[2] << 16)


def split_frame_header(header: bytes) -> tuple[int, int]:
    """Split a 4-byte frame header into (payload length, record type)."""
    word = struct.unpack("<I", header)[0]
    return word & SIZE_MASK, word >> 24


class ByteReader:
    """Forward cursor over a binary file.

    Seeking beyond the end of the file raises SeekError; seeking to the end
    itself is allowed and the next read reports ShortRead.
    """

    def __init__(self, f: BinaryIO):
        self.f = f

    def tell(self) -> int:
        return self.f.tell()

    def size(self) -> int:
        pos = self.f.tell()
        end = self.f.seek(0, 2)
        self.f.seek(pos)
        return end

    def seek(self, offset: int) -> None:
        end = self.size()
        if offset > end:
            raise SeekError(offset, end)
        self.f.seek(offset)

    def read_some(self, n: int) -> bytes:
        return self.f.read(n)

    def read_exact(self, n: int, what: str = "") -> bytes:
        start = self.f.tell()
        data = self.f.read(n)
        if len(data) != n:
            raise ShortRead(n, len(data), offset=start, what=what)
        return data

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_exact(4))[0]

    def read_u64(self) -> int:
        return struct.unpack("<Q", self.read_exact(8))[0]
