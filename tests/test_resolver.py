import io
import warnings

import pytest

from stanfs_core.errors import ChecksumMismatch, SeekError, ShortRead, SizeMismatch, TruncatedIndex
from stanfs_core.reader import ByteReader
from stanfs_inspect.checksum import crc32
from stanfs_inspect.header import encode_version
from stanfs_inspect.resolver import (
    IndexRecord,
    MessageResolver,
    decode_index_record,
    encode_data_record,
    encode_index_record,
    format_timestamp,
)
from stanfs_inspect.scan import ScanStats, scan_messages


def resolver(idx: bytes, dat: bytes, **kw) -> MessageResolver:
    return MessageResolver(ByteReader(io.BytesIO(idx)), ByteReader(io.BytesIO(dat)), **kw)


def build_store(bodies: list[bytes], base_ts: int = 1_000_000_000) -> tuple[bytes, bytes]:
    """Return (idx bytes, dat bytes) including version headers."""
    dat = bytearray(encode_version())
    idx = bytearray(encode_version())
    for seq, body in enumerate(bodies, start=1):
        offset = len(dat)
        record = encode_data_record(body)
        dat += record
        idx += encode_index_record(IndexRecord(seq, offset, base_ts + seq, len(record), crc32(body)))
    return bytes(idx), bytes(dat)


def test_index_record_fields_survive_encoding():
    rec = IndexRecord(2**64 - 1, 123456789, 1_700_000_000_123_456_789, 2**32 - 1, 0xDEADBEEF)
    raw = encode_index_record(rec)
    assert len(raw) == 32
    assert decode_index_record(raw) == rec


def test_single_record_scenario():
    rec = IndexRecord(sequence=1, offset=0, timestamp=1_000_000_000, size=10, checksum=0xABCD)
    payload = b"\x0a\x00\x00" + b"x" * 7

    msgs = list(resolver(encode_index_record(rec), payload).iter_messages())

    assert len(msgs) == 1
    assert msgs[0].index.sequence == 1
    assert msgs[0].index.time == "1970-01-01T00:00:01Z"
    assert msgs[0].index.checksum == 0xABCD
    assert msgs[0].payload == payload


def test_single_record_scenario_with_checksum_stays_inside_record():
    payload = b"\x0a\x00\x00\x00" + b"crc!" + b"ok"
    idx = encode_index_record(IndexRecord(1, 0, 1_000_000_000, 10, 0xABCD))

    # 0xABCD is not the CRC of the body, so the check fails on content, not on a read.
    with pytest.raises(ChecksumMismatch) as exc:
        list(resolver(idx, payload, verify_checksum=True).iter_messages())
    assert exc.value.computed == crc32(b"ok")

    idx = encode_index_record(IndexRecord(1, 0, 1_000_000_000, 10, crc32(b"ok")))
    msgs = list(resolver(idx, payload, verify_checksum=True).iter_messages())
    assert msgs[0].payload == payload


def test_every_entry_resolves(tmp_path):
    bodies = [b"a" * 8, b"hello world", b"z" * 300]
    idx, dat = build_store(bodies)
    (tmp_path / "msgs.1.idx").write_bytes(idx)
    (tmp_path / "msgs.1.dat").write_bytes(dat)

    stats = ScanStats()
    msgs = list(scan_messages(tmp_path / "msgs.1.idx", tmp_path / "msgs.1.dat", stats=stats))

    assert [m.index.sequence for m in msgs] == [1, 2, 3]
    for m, body in zip(msgs, bodies):
        assert m.index.size == len(body) + 8
        assert int.from_bytes(m.payload[:3], "little") == m.index.size
        assert m.payload[8:] == body
    assert stats.records == 3


def test_size_mismatch_detected_for_each_engineered_entry():
    bodies = [b"a" * 12, b"b" * 20, b"c" * 40]
    idx, dat = build_store(bodies)
    for i in range(len(bodies)):
        bad = bytearray(idx)
        size_at = 4 + 32 * i + 24
        bad[size_at] += 1
        with pytest.raises(SizeMismatch) as exc:
            list(resolver(bytes(bad[4:]), dat).iter_messages())
        assert exc.value.index_size == len(bodies[i]) + 9
        assert exc.value.data_size == len(bodies[i]) + 8


def test_mismatch_halts_scan():
    idx, dat = build_store([b"a" * 12, b"b" * 20])
    bad = bytearray(idx)
    bad[4 + 24] += 1
    seen = []
    with pytest.raises(SizeMismatch):
        for m in resolver(bytes(bad[4:]), dat).iter_messages():
            seen.append(m)
    assert seen == []


def test_oversized_index_entry_is_rejected_before_reading():
    idx, dat = build_store([b"a" * 6])
    huge = encode_index_record(IndexRecord(1, 4, 0, 0xFFFFFFF0, 0))
    with pytest.raises(SizeMismatch) as exc:
        list(resolver(huge, dat).iter_messages())
    assert exc.value.index_size == 0xFFFFFFF0
    assert exc.value.data_size == 14


def test_payload_too_short_for_length_field():
    rec = IndexRecord(1, 0, 0, 2, 0)
    with pytest.raises(SizeMismatch) as exc:
        list(resolver(encode_index_record(rec), b"\x02\x00").iter_messages())
    assert exc.value.data_size is None


def test_zero_size_record_is_empty_payload():
    rec = IndexRecord(1, 0, 0, 0, 0)
    msgs = list(resolver(encode_index_record(rec), b"").iter_messages())
    assert msgs[0].payload == b""


def test_truncated_index_record():
    idx, dat = build_store([b"a" * 12])
    with pytest.raises(TruncatedIndex) as exc:
        list(resolver(idx[4:] + b"\x01" * 10, dat).iter_messages())
    assert exc.value.offset == 32
    assert exc.value.got == 10


def test_offset_past_data_end_is_seek_error():
    for offset in (5000, 2**63, 2**64 - 1):
        rec = IndexRecord(1, offset, 0, 10, 0)
        with pytest.raises(SeekError) as exc:
            list(resolver(encode_index_record(rec), b"\x0a\x00\x00" + b"x" * 7).iter_messages())
        assert exc.value.offset == offset
        assert exc.value.size == 10


def test_record_cut_by_end_of_data_file():
    idx, dat = build_store([b"a" * 12])
    with pytest.raises(ShortRead) as exc:
        list(resolver(idx[4:], dat[:-3]).iter_messages())
    assert exc.value.wanted == 17


def test_checksum_verification():
    idx, dat = build_store([b"payload-one", b"payload-two"])
    msgs = list(resolver(idx[4:], dat, verify_checksum=True).iter_messages())
    assert len(msgs) == 2

    bad = bytearray(dat)
    bad[-1] ^= 0xFF
    with pytest.raises(ChecksumMismatch):
        list(resolver(idx[4:], bytes(bad), verify_checksum=True).iter_messages())

    # Off by default
    assert len(list(resolver(idx[4:], bytes(bad)).iter_messages())) == 2


def test_zero_checksum_warns_once():
    first = encode_data_record(b"abcdefgh")
    second = encode_data_record(b"ijklmnop")
    dat = encode_version() + first + second
    idx = encode_index_record(IndexRecord(1, 4, 0, 16, 0)) + encode_index_record(IndexRecord(2, 20, 0, 16, 0))
    r = resolver(idx, dat, verify_checksum=True)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        msgs = list(r.iter_messages())
    assert len(msgs) == 2
    assert len(caught) == 1
    assert r.checksums.unverified == 2


def test_format_timestamp():
    assert format_timestamp(0) == "1970-01-01T00:00:00Z"
    assert format_timestamp(1_500_000_000) == "1970-01-01T00:00:01.5Z"
    assert format_timestamp(1_000_000_001) == "1970-01-01T00:00:01.000000001Z"
    assert format_timestamp(1_700_000_000_123_456_789) == "2023-11-14T22:13:20.123456789Z"
    assert format_timestamp(2**64 - 1).startswith("2554-")
