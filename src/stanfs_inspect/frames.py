"""Framed record stream decoder for the subscription and client logs.

Frame layout: [Size(3) | Type(1) | CRC32(4) | Payload(Size)].
One decoder serves both logs; only the tag table differs.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Callable, Iterator, NamedTuple

from stanfs_core.errors import PayloadDecodeError, ShortRead, TruncatedFrame, UnknownRecordType
from stanfs_core.protocol import (
    CLIENT_REC_ADD,
    CLIENT_REC_DEL,
    FRAME_HEADER_LEN,
    FRAME_RESERVED_LEN,
    MAX_RECORD_SIZE,
    SUB_REC_ACK,
    SUB_REC_DEL,
    SUB_REC_MSG,
    SUB_REC_NEW,
    SUB_REC_UPDATE,
)
from stanfs_core.reader import ByteReader, split_frame_header

from .checksum import ChecksumVerifier, crc32
from .payloads import (
    parse_client_info,
    parse_sub_state,
    parse_sub_state_delete,
    parse_sub_state_update,
)


class RecordKind(NamedTuple):
    label: str
    decode: Callable[[bytes], Any]


SUBSCRIPTION_RECORDS: dict[int, RecordKind] = {
    SUB_REC_NEW: RecordKind("new", parse_sub_state),
    SUB_REC_UPDATE: RecordKind("update", parse_sub_state),
    SUB_REC_DEL: RecordKind("delete", parse_sub_state_delete),
    SUB_REC_ACK: RecordKind("ack", parse_sub_state_update),
    SUB_REC_MSG: RecordKind("msg", parse_sub_state_update),
}

CLIENT_RECORDS: dict[int, RecordKind] = {
    CLIENT_REC_ADD: RecordKind("add", parse_client_info),
    CLIENT_REC_DEL: RecordKind("delete", parse_client_info),
}


@dataclass(frozen=True)
class Frame:
    offset: int
    tag: int
    label: str
    length: int
    checksum: int
    payload: bytes
    value: Any


def encode_frame(tag: int, payload: bytes, checksum: int | None = None) -> bytes:
    """Build one frame; the checksum defaults to the payload's CRC-32."""
    if len(payload) > MAX_RECORD_SIZE:
        raise ValueError(f"payload of {len(payload)} bytes does not fit a 24-bit length")
    if not 0 <= tag <= 0xFF:
        raise ValueError(f"record type {tag} does not fit one byte")
    if checksum is None:
        checksum = crc32(payload)
    return struct.pack("<II", len(payload) | (tag << 24), checksum) + payload


def _read_part(reader: ByteReader, n: int, frame_off: int, what: str) -> bytes:
    try:
        return reader.read_exact(n, what=what)
    except ShortRead as e:
        raise TruncatedFrame(e.wanted, e.got, offset=frame_off, what=what) from e


def iter_frames(
    reader: ByteReader,
    table: dict[int, RecordKind],
    verify_checksum: bool = False,
    source: str = "log",
) -> Iterator[Frame]:
    """Decode frames until a clean EOF; the reader must be past the version header."""
    checksums = ChecksumVerifier(source) if verify_checksum else None

    while True:
        start = reader.tell()
        header = reader.read_some(FRAME_HEADER_LEN)

        # Clean EOF
        if len(header) == 0:
            return

        if len(header) < FRAME_HEADER_LEN:
            raise TruncatedFrame(FRAME_HEADER_LEN, len(header), offset=start, what="frame header")

        length, tag = split_frame_header(header)
        (checksum,) = struct.unpack("<I", _read_part(reader, FRAME_RESERVED_LEN, start, "frame checksum"))
        payload = _read_part(reader, length, start, f"frame payload of type {tag}")

        kind = table.get(tag)
        if kind is None:
            raise UnknownRecordType(tag, offset=start)

        if checksums is not None:
            checksums.check(checksum, payload, start)

        try:
            value = kind.decode(payload)
        except PayloadDecodeError as e:
            raise PayloadDecodeError(f"{kind.label} record: {e.detail}", offset=start) from e

        yield Frame(start, tag, kind.label, length, checksum, payload, value)
