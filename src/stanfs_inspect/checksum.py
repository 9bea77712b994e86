"""Optional CRC-32 verification shared by the resolver and the frame decoder."""
from __future__ import annotations

import zlib
from warnings import warn

from stanfs_core.errors import ChecksumMismatch


def crc32(body: bytes) -> int:
    return zlib.crc32(body) & 0xFFFFFFFF


class ChecksumVerifier:
    """Checks stored IEEE CRC-32 values against record bodies for one scan.

    A stored value of zero means the store was written without CRCs; that
    record is left unverified and a single warning is issued per scan.
    """

    def __init__(self, source: str):
        self.source = source
        self.verified = 0
        self.unverified = 0
        self._warned = False

    def check(self, expected: int, body: bytes, offset: int) -> None:
        if expected == 0:
            self.unverified += 1
            if not self._warned:
                warn(f"{self.source}: zero checksum at offset {offset}; store may have been written without CRC")
                self._warned = True
            return

        computed = crc32(body)
        if computed != expected:
            raise ChecksumMismatch(expected, computed, offset=offset)
        self.verified += 1
