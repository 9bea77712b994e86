"""NATS Streaming file store layout constants.

Single source of truth for on-disk version tags and record layouts.
Keep this file stable. Resolver, frame decoder and fixture writer must
remain synchronized.
"""

# Every governed file starts with this u32 version tag
VERSION = 1
VERSION_FMT = "<I"
VERSION_LEN = 4

# Index record: [Seq(8) | Offset(8) | Timestamp ns(8) | Size(4) | CRC32(4)] = 32 bytes
INDEX_REC_FMT = "<QQQII"
INDEX_REC_LEN = 32

# Data and framed records start with [Size(3) | Type(1) | CRC32(4)]
SIZE_FIELD_LEN = 3
FRAME_HEADER_LEN = 4
FRAME_RESERVED_LEN = 4
RECORD_HEADER_LEN = FRAME_HEADER_LEN + FRAME_RESERVED_LEN
SIZE_MASK = 0xFFFFFF
MAX_RECORD_SIZE = SIZE_MASK

# Subscription log record types
SUB_REC_NEW = 1
SUB_REC_UPDATE = 2
SUB_REC_DEL = 3
SUB_REC_ACK = 4
SUB_REC_MSG = 5

# Client registry record types
CLIENT_REC_ADD = 1
CLIENT_REC_DEL = 2

# File kinds, used in error messages
KIND_INDEX = "index"
KIND_DATA = "data"
KIND_SUBS = "subscriptions"
KIND_CLIENTS = "clients"

# Default file names inside a channel directory
MSGS_DAT_NAME = "msgs.1.dat"
MSGS_IDX_NAME = "msgs.1.idx"
SUBS_DAT_NAME = "subs.dat"
CLIENTS_DAT_NAME = "clients.dat"
