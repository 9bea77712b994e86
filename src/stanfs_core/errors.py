"""Error taxonomy for store decoding.

Every error is terminal for the scan that raised it.
"""
from __future__ import annotations

ERRORS = {
    "E_FORMAT": "Store file format error",
    "E_INVALID_VERSION": "Invalid file version",
    "E_SHORT_READ": "File ended before the expected bytes",
    "E_SEEK": "Offset lies beyond the end of the file",
    "E_TRUNCATED_INDEX": "Index file ends in the middle of a record",
    "E_TRUNCATED_FRAME": "Log file ends in the middle of a frame",
    "E_SIZE_MISMATCH": "Index and data file disagree on record size",
    "E_CHECKSUM_MISMATCH": "Record checksum does not match its content",
    "E_UNKNOWN_RECORD": "Unknown record type",
    "E_PAYLOAD_DECODE": "Record payload could not be decoded",
}


class StoreFormatError(ValueError):
    code = "E_FORMAT"

    def __init__(self, detail: str = "", offset: int | None = None):
        self.detail = detail
        self.offset = offset
        super().__init__(self._render())

    def _render(self) -> str:
        msg = ERRORS[self.code]
        if self.detail:
            msg = f"{msg}: {self.detail}"
        if self.offset is not None:
            msg = f"{msg} (offset {self.offset})"
        return msg


class InvalidVersion(StoreFormatError):
    code = "E_INVALID_VERSION"

    def __init__(self, kind: str, found: int | None = None):
        self.kind = kind
        self.found = found
        detail = f"{kind} file"
        if found is not None:
            detail = f"{detail} has version {found}"
        else:
            detail = f"{detail} is too short for a version header"
        super().__init__(detail, offset=0)


class ShortRead(StoreFormatError):
    code = "E_SHORT_READ"

    def __init__(self, wanted: int, got: int, offset: int | None = None, what: str = ""):
        self.wanted = wanted
        self.got = got
        detail = f"expected {wanted} bytes, got {got}"
        if what:
            detail = f"{what}: {detail}"
        super().__init__(detail, offset=offset)


class SeekError(StoreFormatError):
    code = "E_SEEK"

    def __init__(self, offset: int, size: int):
        self.size = size
        super().__init__(f"file is {size} bytes", offset=offset)


class TruncatedIndex(ShortRead):
    code = "E_TRUNCATED_INDEX"


class TruncatedFrame(ShortRead):
    code = "E_TRUNCATED_FRAME"


class SizeMismatch(StoreFormatError):
    code = "E_SIZE_MISMATCH"

    def __init__(self, index_size: int, data_size: int | None, offset: int | None = None):
        self.index_size = index_size
        self.data_size = data_size
        if data_size is None:
            detail = f"{index_size} byte record is too short to hold its length field"
        else:
            detail = f"{data_size} msg != {index_size} idx"
        super().__init__(detail, offset=offset)


class ChecksumMismatch(StoreFormatError):
    code = "E_CHECKSUM_MISMATCH"

    def __init__(self, expected: int, computed: int, offset: int | None = None):
        self.expected = expected
        self.computed = computed
        super().__init__(f"expected {expected:08x}, computed {computed:08x}", offset=offset)


class UnknownRecordType(StoreFormatError):
    code = "E_UNKNOWN_RECORD"

    def __init__(self, tag: int, offset: int | None = None):
        self.tag = tag
        super().__init__(f"type {tag}", offset=offset)


class PayloadDecodeError(StoreFormatError):
    code = "E_PAYLOAD_DECODE"
