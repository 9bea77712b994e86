"""stanfs core - store layout, errors and byte reader."""
from .errors import (
    ERRORS,
    ChecksumMismatch,
    InvalidVersion,
    PayloadDecodeError,
    SeekError,
    ShortRead,
    SizeMismatch,
    StoreFormatError,
    TruncatedFrame,
    TruncatedIndex,
    UnknownRecordType,
)
from .reader import ByteReader, decode_u24, split_frame_header

__all__ = [
    "ERRORS",
    "ByteReader",
    "ChecksumMismatch",
    "InvalidVersion",
    "PayloadDecodeError",
    "SeekError",
    "ShortRead",
    "SizeMismatch",
    "StoreFormatError",
    "TruncatedFrame",
    "TruncatedIndex",
    "UnknownRecordType",
    "decode_u24",
    "split_frame_header",
]
