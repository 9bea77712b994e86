from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .frames import Frame
from .payloads import ClientInfo, SubState, SubStateDelete, SubStateUpdate
from .resolver import ResolvedMessage

MESSAGE_SCHEMA = pa.schema(
    [
        ("sequence", pa.uint64()),
        ("offset", pa.uint64()),
        ("timestamp_ns", pa.uint64()),
        ("time", pa.string()),
        ("size", pa.uint32()),
        ("checksum", pa.uint32()),
        ("content_hash", pa.string()),
    ]
)

SUBSCRIPTION_SCHEMA = pa.schema(
    [
        ("offset", pa.uint64()),
        ("record_type", pa.string()),
        ("length", pa.uint32()),
        ("id", pa.uint64()),
        ("client_id", pa.string()),
        ("queue_group", pa.string()),
        ("inbox", pa.string()),
        ("ack_inbox", pa.string()),
        ("max_in_flight", pa.int32()),
        ("ack_wait_secs", pa.int32()),
        ("durable_name", pa.string()),
        ("last_sent", pa.uint64()),
        ("is_durable", pa.bool_()),
        ("is_closed", pa.bool_()),
        ("seqno", pa.uint64()),
    ]
)

CLIENT_SCHEMA = pa.schema(
    [
        ("offset", pa.uint64()),
        ("record_type", pa.string()),
        ("length", pa.uint32()),
        ("id", pa.string()),
        ("hb_inbox", pa.string()),
        ("conn_id", pa.string()),
        ("protocol", pa.int32()),
        ("ping_interval", pa.int32()),
        ("ping_max_out", pa.int32()),
    ]
)


def format_message(msg: ResolvedMessage) -> str:
    rec = msg.index
    return (
        f"[{rec.time}] seq: {rec.sequence} | size: {rec.size} | "
        f"offset: {rec.offset} | crc32: {rec.checksum:x}"
    )


def format_frame(frame: Frame) -> str:
    v = frame.value
    if isinstance(v, SubState):
        return (
            f"ID: {v.id} '{v.client_id}' Type: {frame.label} LastSent: {v.last_sent} "
            f"qGroup: {v.queue_group} Inbox: {v.inbox} AckInbox: {v.ack_inbox} "
            f"MaxInFlight: {v.max_in_flight} AckWaitInSecs: {v.ack_wait_secs} "
            f"Durable: {v.durable_name} IsDurable: {v.is_durable} IsClosed: {v.is_closed}"
        )
    if isinstance(v, SubStateDelete):
        return f"ID: {v.id} Type: {frame.label}"
    if isinstance(v, SubStateUpdate):
        return f"ID: {v.id} SeqNo: {v.seqno} Type: {frame.label}"
    if isinstance(v, ClientInfo):
        if frame.label == "delete":
            return f"CID: {v.id} Type: {frame.label}"
        return (
            f"CID: {v.id} Inbox: {v.hb_inbox} ConnId: {v.conn_id.hex()} Protocol: {v.protocol} "
            f"PingInterval: {v.ping_interval} PingMaxOut: {v.ping_max_out} Type: {frame.label}"
        )
    raise TypeError(f"no report format for {type(v).__name__}")


def message_row(msg: ResolvedMessage) -> dict:
    rec = msg.index
    return {
        "sequence": rec.sequence,
        "offset": rec.offset,
        "timestamp_ns": rec.timestamp,
        "time": rec.time,
        "size": rec.size,
        "checksum": rec.checksum,
        "content_hash": msg.content_hash,
    }


def frame_row(frame: Frame) -> dict:
    row = {"offset": frame.offset, "record_type": frame.label, "length": frame.length}
    for k, v in asdict(frame.value).items():
        row[k] = v.hex() if isinstance(v, bytes) else v
    return row


def write_parquet(rows: list[dict], path: Path, schema: pa.Schema) -> None:
    """Write decoded rows to a parquet file; nothing is written for an empty scan.

    Rows of different record kinds leave gaps; those become nulls. Columns stay
    object-typed until arrow applies the schema, so u64 values keep full width.
    """
    if not rows:
        return
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(
        {name: pd.Series([row.get(name) for row in rows], dtype=object) for name in schema.names}
    )
    table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
    pq.write_table(table, path)
