from __future__ import annotations

import struct

from stanfs_core.errors import InvalidVersion
from stanfs_core.protocol import VERSION, VERSION_FMT, VERSION_LEN
from stanfs_core.reader import ByteReader


def encode_version(version: int = VERSION) -> bytes:
    return struct.pack(VERSION_FMT, version)


def check_version(reader: ByteReader, kind: str) -> None:
    """Validate the version tag at the start of a governed file.

    Must be the first read on the file. A short file or any tag other than
    VERSION raises InvalidVersion.
    """
    raw = reader.read_some(VERSION_LEN)
    if len(raw) < VERSION_LEN:
        raise InvalidVersion(kind)
    (found,) = struct.unpack(VERSION_FMT, raw)
    if found != VERSION:
        raise InvalidVersion(kind, found)
