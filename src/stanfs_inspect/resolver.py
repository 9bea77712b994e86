"""Index/data resolver for message log file pairs.

The index file is the map, the data file is the territory:
- each 32-byte index record names a byte range in the data file,
- the record found there must declare the same size in its own header.
"""
from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator

from stanfs_core.errors import SizeMismatch, TruncatedIndex
from stanfs_core.protocol import (
    INDEX_REC_FMT,
    INDEX_REC_LEN,
    KIND_DATA,
    MAX_RECORD_SIZE,
    RECORD_HEADER_LEN,
    SIZE_FIELD_LEN,
)
from stanfs_core.reader import ByteReader, decode_u24

from .checksum import ChecksumVerifier, crc32

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_timestamp(ns: int) -> str:
    """Render nanoseconds since the epoch as ISO-8601 UTC with a Z suffix.

    The fraction keeps full nanosecond precision with trailing zeros trimmed.
    """
    secs, frac = divmod(ns, 1_000_000_000)
    t = _EPOCH + timedelta(seconds=secs)
    out = t.isoformat().replace("+00:00", "")
    if frac:
        out += f".{frac:09d}".rstrip("0")
    return out + "Z"


@dataclass(frozen=True)
class IndexRecord:
    sequence: int
    offset: int
    timestamp: int
    size: int
    checksum: int

    @property
    def time(self) -> str:
        return format_timestamp(self.timestamp)


def decode_index_record(raw: bytes) -> IndexRecord:
    seq, offset, timestamp, size, checksum = struct.unpack(INDEX_REC_FMT, raw)
    return IndexRecord(seq, offset, timestamp, size, checksum)


def encode_index_record(rec: IndexRecord) -> bytes:
    return struct.pack(INDEX_REC_FMT, rec.sequence, rec.offset, rec.timestamp, rec.size, rec.checksum)


def encode_data_record(body: bytes, tag: int = 0) -> bytes:
    """Build a data record whose 24-bit length covers the whole record.

    Layout: [Size(3) | Type(1) | CRC32(4) | Body]; the index entry for it
    carries size=len(record) and checksum=crc32(body).
    """
    size = RECORD_HEADER_LEN + len(body)
    if size > MAX_RECORD_SIZE:
        raise ValueError(f"record of {size} bytes does not fit a 24-bit length")
    return struct.pack("<II", size | (tag << 24), crc32(body)) + body


@dataclass(frozen=True)
class ResolvedMessage:
    index: IndexRecord
    payload: bytes

    @property
    def content_hash(self) -> str:
        return hashlib.sha256(self.payload).hexdigest()


class MessageResolver:
    """Walks an index file and resolves every entry against the data file.

    Both readers must already be past their version header.
    """

    def __init__(self, idx: ByteReader, dat: ByteReader, verify_checksum: bool = False):
        self.idx = idx
        self.dat = dat
        self.checksums = ChecksumVerifier(KIND_DATA) if verify_checksum else None

    def iter_messages(self) -> Iterator[ResolvedMessage]:
        while True:
            rec = self._next_index_record()
            if rec is None:
                return
            payload = self._read_payload(rec)
            if self.checksums is not None:
                self._verify_body(rec, payload)
            yield ResolvedMessage(rec, payload)

    def _next_index_record(self) -> IndexRecord | None:
        start = self.idx.tell()
        raw = self.idx.read_some(INDEX_REC_LEN)

        # Clean EOF
        if len(raw) == 0:
            return None

        if len(raw) < INDEX_REC_LEN:
            raise TruncatedIndex(INDEX_REC_LEN, len(raw), offset=start, what="index record")

        return decode_index_record(raw)

    def _read_payload(self, rec: IndexRecord) -> bytes:
        self.dat.seek(rec.offset)
        what = f"data record seq {rec.sequence}"

        if rec.size == 0:
            return b""
        if rec.size < SIZE_FIELD_LEN:
            raise SizeMismatch(rec.size, None, offset=rec.offset)

        # Check the self-declared length before reading the rest of the span.
        head = self.dat.read_exact(SIZE_FIELD_LEN, what=what)
        declared = decode_u24(head)
        if declared != rec.size:
            raise SizeMismatch(rec.size, declared, offset=rec.offset)
        return head + self.dat.read_exact(rec.size - SIZE_FIELD_LEN, what=what)

    def _verify_body(self, rec: IndexRecord, payload: bytes) -> None:
        # The CRC covers the span after its 8-byte record header.
        self.checksums.check(rec.checksum, payload[RECORD_HEADER_LEN:], rec.offset)
