import io

import pytest

from stanfs_core.errors import ChecksumMismatch, PayloadDecodeError, TruncatedFrame, UnknownRecordType
from stanfs_core.reader import ByteReader
from stanfs_inspect.frames import (
    CLIENT_RECORDS,
    SUBSCRIPTION_RECORDS,
    RecordKind,
    encode_frame,
    iter_frames,
)
from stanfs_inspect.payloads import (
    ClientInfo,
    SubState,
    SubStateDelete,
    SubStateUpdate,
    serialize_client_info,
    serialize_sub_state,
    serialize_sub_state_delete,
    serialize_sub_state_update,
)


def frames(raw: bytes, table, **kw):
    return list(iter_frames(ByteReader(io.BytesIO(raw)), table, **kw))


def test_separates_raw_frames_of_varying_length():
    table = {7: RecordKind("raw", bytes)}
    payloads = [b"", b"\x01", bytes(range(256)) * 16]
    raw = b"".join(encode_frame(7, p) for p in payloads)

    out = frames(raw, table)

    assert [f.payload for f in out] == payloads
    assert [f.length for f in out] == [0, 1, 4096]
    assert [f.offset for f in out] == [0, 8, 17]


def test_subscription_table_separates_records():
    big = serialize_sub_state(SubState(id=9, inbox="i" * 4091))
    assert len(big) == 4096
    records = [
        (1, b""),
        (3, serialize_sub_state_delete(SubStateDelete(id=5))),
        (2, big),
        (4, serialize_sub_state_update(SubStateUpdate(id=9, seqno=77))),
        (5, serialize_sub_state_update(SubStateUpdate(id=9, seqno=78))),
    ]
    raw = b"".join(encode_frame(t, p) for t, p in records)

    out = frames(raw, SUBSCRIPTION_RECORDS)

    assert [f.label for f in out] == ["new", "delete", "update", "ack", "msg"]
    assert out[0].value == SubState()
    assert out[1].value == SubStateDelete(id=5)
    assert out[2].value.inbox == "i" * 4091
    assert out[2].value.id == 9
    assert out[3].value == SubStateUpdate(id=9, seqno=77)
    assert out[4].value == SubStateUpdate(id=9, seqno=78)
    assert [f.payload for f in out] == [p for _, p in records]


def test_client_table_separates_records():
    big = serialize_client_info(ClientInfo(hb_inbox="h" * 4093))
    assert len(big) == 4096
    records = [
        (1, b""),
        (1, big),
        (2, serialize_client_info(ClientInfo(id="me"))),
    ]
    raw = b"".join(encode_frame(t, p) for t, p in records)

    out = frames(raw, CLIENT_RECORDS)

    assert [f.label for f in out] == ["add", "add", "delete"]
    assert out[0].value == ClientInfo()
    assert out[1].value.hb_inbox == "h" * 4093
    assert out[2].value.id == "me"
    assert [f.length for f in out] == [0, 4096, 4]


def test_truncation_points_raise_truncated_frame():
    good = encode_frame(3, serialize_sub_state_delete(SubStateDelete(id=1)))
    tail = encode_frame(3, serialize_sub_state_delete(SubStateDelete(id=2)))

    for cut, what in ((2, "header"), (6, "checksum"), (len(tail) - 1, "payload")):
        with pytest.raises(TruncatedFrame) as exc:
            frames(good + tail[:cut], SUBSCRIPTION_RECORDS)
        assert exc.value.offset == len(good)
        assert what in str(exc.value)


def test_unknown_type_halts():
    raw = encode_frame(99, b"\x08\x01") + encode_frame(3, b"\x08\x02")
    seen = []
    with pytest.raises(UnknownRecordType) as exc:
        for f in iter_frames(ByteReader(io.BytesIO(raw)), SUBSCRIPTION_RECORDS):
            seen.append(f)
    assert exc.value.tag == 99
    assert exc.value.offset == 0
    assert seen == []

    with pytest.raises(UnknownRecordType):
        frames(encode_frame(3, b""), CLIENT_RECORDS)


def test_payload_error_carries_frame_offset():
    raw = encode_frame(1, b"") + encode_frame(4, b"\x08\xff")
    with pytest.raises(PayloadDecodeError) as exc:
        frames(raw, SUBSCRIPTION_RECORDS)
    assert exc.value.offset == 8
    assert "ack" in str(exc.value)


def test_checksum_option():
    payload = serialize_sub_state_delete(SubStateDelete(id=4))
    assert len(frames(encode_frame(3, payload), SUBSCRIPTION_RECORDS, verify_checksum=True)) == 1

    wrong = encode_frame(3, payload, checksum=0x1234)
    assert len(frames(wrong, SUBSCRIPTION_RECORDS)) == 1
    with pytest.raises(ChecksumMismatch):
        frames(wrong, SUBSCRIPTION_RECORDS, verify_checksum=True)


def test_encode_frame_limits():
    with pytest.raises(ValueError):
        encode_frame(256, b"")
    with pytest.raises(ValueError):
        encode_frame(1, b"\x00" * (1 << 24))
