"""Protobuf wire decoders/encoders for subscription and client store records.

Schemas mirror the store's protocol definitions:
    SubState, SubStateDelete, SubStateUpdate, ClientInfo.
Unknown fields are skipped; malformed input raises PayloadDecodeError.
"""

from __future__ import annotations

from dataclasses import dataclass

from stanfs_core.errors import PayloadDecodeError


@dataclass(frozen=True)
class SubState:
    id: int = 0
    client_id: str = ""
    queue_group: str = ""
    inbox: str = ""
    ack_inbox: str = ""
    max_in_flight: int = 0
    ack_wait_secs: int = 0
    durable_name: str = ""
    last_sent: int = 0
    is_durable: bool = False
    is_closed: bool = False


@dataclass(frozen=True)
class SubStateDelete:
    id: int = 0


@dataclass(frozen=True)
class SubStateUpdate:
    id: int = 0
    seqno: int = 0


@dataclass(frozen=True)
class ClientInfo:
    id: str = ""
    hb_inbox: str = ""
    conn_id: bytes = b""
    protocol: int = 0
    ping_interval: int = 0
    ping_max_out: int = 0


WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LEN = 2
WIRE_FIXED32 = 5


def _encode_varint(value: int) -> bytes:
    if value < 0:
        value += 1 << 64
    out = bytearray()
    current = value
    while current > 0x7F:
        out.append((current & 0x7F) | 0x80)
        current >>= 7
    out.append(current)
    return bytes(out)


def _decode_varint(data: bytes, offset: int) -> tuple[int, int]:
    result = 0
    shift = 0
    index = offset
    while True:
        if index >= len(data):
            raise PayloadDecodeError("truncated varint")
        byte = data[index]
        result |= (byte & 0x7F) << shift
        index += 1
        if byte < 0x80:
            return result & 0xFFFFFFFFFFFFFFFF, index
        shift += 7
        if shift >= 70:
            raise PayloadDecodeError("varint too large")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _key(field_number: int, wire_type: int) -> bytes:
    return _encode_varint((field_number << 3) | wire_type)


def _encode_uint(field_number: int, value: int) -> bytes:
    if not value:
        return b""
    return _key(field_number, WIRE_VARINT) + _encode_varint(value)


def _encode_bool(field_number: int, value: bool) -> bytes:
    return _encode_uint(field_number, 1 if value else 0)


def _encode_bytes(field_number: int, raw: bytes) -> bytes:
    if not raw:
        return b""
    return _key(field_number, WIRE_LEN) + _encode_varint(len(raw)) + raw


def _encode_string(field_number: int, value: str) -> bytes:
    return _encode_bytes(field_number, value.encode("utf-8"))


def _read_length_delimited(data: bytes, offset: int) -> tuple[bytes, int]:
    size, index = _decode_varint(data, offset)
    end = index + size
    if end > len(data):
        raise PayloadDecodeError("truncated length-delimited field")
    return data[index:end], end


def _skip(data: bytes, offset: int, wire_type: int) -> int:
    if wire_type == WIRE_VARINT:
        _, index = _decode_varint(data, offset)
        return index
    if wire_type == WIRE_LEN:
        _, index = _read_length_delimited(data, offset)
        return index
    if wire_type in (WIRE_FIXED64, WIRE_FIXED32):
        end = offset + (8 if wire_type == WIRE_FIXED64 else 4)
        if end > len(data):
            raise PayloadDecodeError("truncated fixed-width field")
        return end
    raise PayloadDecodeError(f"unsupported wire type: {wire_type}")


def _fields(data: bytes):
    """Yield (field, wire_type, value, raw) for every field in data.

    Varint values come back in `value`, length-delimited ones in `raw`;
    other wire types are skipped.
    """
    index = 0
    while index < len(data):
        key, index = _decode_varint(data, index)
        field = key >> 3
        wire_type = key & 0b111
        if field == 0:
            raise PayloadDecodeError("field number 0")
        if wire_type == WIRE_VARINT:
            value, index = _decode_varint(data, index)
            yield field, wire_type, value, b""
            continue
        if wire_type == WIRE_LEN:
            raw, index = _read_length_delimited(data, index)
            yield field, wire_type, 0, raw
            continue
        index = _skip(data, index, wire_type)


def _text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PayloadDecodeError(f"invalid utf-8 in string field: {e}") from e


def serialize_sub_state(sub: SubState) -> bytes:
    return b"".join(
        [
            _encode_uint(1, sub.id),
            _encode_string(2, sub.client_id),
            _encode_string(3, sub.queue_group),
            _encode_string(4, sub.inbox),
            _encode_string(5, sub.ack_inbox),
            _encode_uint(6, sub.max_in_flight),
            _encode_uint(7, sub.ack_wait_secs),
            _encode_string(8, sub.durable_name),
            _encode_uint(9, sub.last_sent),
            _encode_bool(10, sub.is_durable),
            _encode_bool(11, sub.is_closed),
        ]
    )


_SUB_STATE_STRINGS = {2: "client_id", 3: "queue_group", 4: "inbox", 5: "ack_inbox", 8: "durable_name"}
_SUB_STATE_UINTS = {1: "id", 9: "last_sent"}
_SUB_STATE_INT32S = {6: "max_in_flight", 7: "ack_wait_secs"}
_SUB_STATE_BOOLS = {10: "is_durable", 11: "is_closed"}


def parse_sub_state(data: bytes) -> SubState:
    values: dict = {}
    for field, wire_type, value, raw in _fields(data):
        if wire_type == WIRE_VARINT:
            if field in _SUB_STATE_UINTS:
                values[_SUB_STATE_UINTS[field]] = value
            elif field in _SUB_STATE_INT32S:
                values[_SUB_STATE_INT32S[field]] = _to_int32(value)
            elif field in _SUB_STATE_BOOLS:
                values[_SUB_STATE_BOOLS[field]] = value != 0
        elif field in _SUB_STATE_STRINGS:
            values[_SUB_STATE_STRINGS[field]] = _text(raw)
    return SubState(**values)


def serialize_sub_state_delete(sub: SubStateDelete) -> bytes:
    return _encode_uint(1, sub.id)


def parse_sub_state_delete(data: bytes) -> SubStateDelete:
    sub_id = 0
    for field, wire_type, value, _ in _fields(data):
        if field == 1 and wire_type == WIRE_VARINT:
            sub_id = value
    return SubStateDelete(id=sub_id)


def serialize_sub_state_update(update: SubStateUpdate) -> bytes:
    return b"".join([_encode_uint(1, update.id), _encode_uint(2, update.seqno)])


def parse_sub_state_update(data: bytes) -> SubStateUpdate:
    sub_id = 0
    seqno = 0
    for field, wire_type, value, _ in _fields(data):
        if wire_type != WIRE_VARINT:
            continue
        if field == 1:
            sub_id = value
        elif field == 2:
            seqno = value
    return SubStateUpdate(id=sub_id, seqno=seqno)


def serialize_client_info(info: ClientInfo) -> bytes:
    return b"".join(
        [
            _encode_string(1, info.id),
            _encode_string(2, info.hb_inbox),
            _encode_bytes(3, info.conn_id),
            _encode_uint(4, info.protocol),
            _encode_uint(5, info.ping_interval),
            _encode_uint(6, info.ping_max_out),
        ]
    )


def parse_client_info(data: bytes) -> ClientInfo:
    values: dict = {}
    for field, wire_type, value, raw in _fields(data):
        if wire_type == WIRE_LEN:
            if field == 1:
                values["id"] = _text(raw)
            elif field == 2:
                values["hb_inbox"] = _text(raw)
            elif field == 3:
                values["conn_id"] = raw
        elif field == 4:
            values["protocol"] = _to_int32(value)
        elif field == 5:
            values["ping_interval"] = _to_int32(value)
        elif field == 6:
            values["ping_max_out"] = _to_int32(value)
    return ClientInfo(**values)
