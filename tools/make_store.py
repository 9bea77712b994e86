"""Write a synthetic file store channel for demos and tests.

Usage:
    python tools/make_store.py OUT_DIR [--messages N] [--crash]

--crash leaves a torn record at the end of the index file.
"""
import json
import random
import struct
import time
import uuid
from pathlib import Path

from stanfs_core.protocol import (
    CLIENT_REC_ADD,
    CLIENT_REC_DEL,
    CLIENTS_DAT_NAME,
    MSGS_DAT_NAME,
    MSGS_IDX_NAME,
    SUB_REC_ACK,
    SUB_REC_DEL,
    SUB_REC_MSG,
    SUB_REC_NEW,
    SUB_REC_UPDATE,
    SUBS_DAT_NAME,
)
from stanfs_inspect.checksum import crc32
from stanfs_inspect.frames import encode_frame
from stanfs_inspect.header import encode_version
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
from stanfs_inspect.resolver import IndexRecord, encode_data_record, encode_index_record


def write_messages(path: Path, count: int, crash: bool = False) -> None:
    ts = time.time_ns()
    with open(path / MSGS_DAT_NAME, "wb") as f_dat, open(path / MSGS_IDX_NAME, "wb") as f_idx:
        f_dat.write(encode_version())
        f_idx.write(encode_version())

        for seq in range(1, count + 1):
            body = json.dumps({"seq": seq, "reading": round(random.uniform(0, 100), 3)}).encode("utf-8")
            offset = f_dat.tell()
            record = encode_data_record(body)
            f_dat.write(record)
            rec = IndexRecord(seq, offset, ts + seq * 1_000_000, len(record), crc32(body))
            f_idx.write(encode_index_record(rec))

        if crash:
            torn = encode_index_record(IndexRecord(count + 1, f_dat.tell(), ts, 16, 0))
            f_idx.write(torn[:20])


def write_subscriptions(path: Path, client_id: str) -> None:
    sub = SubState(
        id=1,
        client_id=client_id,
        inbox="_INBOX.sub1",
        ack_inbox="_STAN.ack.sub1",
        max_in_flight=1024,
        ack_wait_secs=30,
        durable_name="dur",
        is_durable=True,
    )
    records = [
        (SUB_REC_NEW, serialize_sub_state(sub)),
        (SUB_REC_MSG, serialize_sub_state_update(SubStateUpdate(id=1, seqno=1))),
        (SUB_REC_ACK, serialize_sub_state_update(SubStateUpdate(id=1, seqno=1))),
        (SUB_REC_UPDATE, serialize_sub_state(SubState(id=1, client_id=client_id, last_sent=1, is_closed=True))),
        (SUB_REC_DEL, serialize_sub_state_delete(SubStateDelete(id=1))),
    ]
    with open(path / SUBS_DAT_NAME, "wb") as f:
        f.write(encode_version())
        for tag, payload in records:
            f.write(encode_frame(tag, payload))


def write_clients(path: Path, client_id: str) -> None:
    info = ClientInfo(
        id=client_id,
        hb_inbox=f"_INBOX.hb.{client_id}",
        conn_id=uuid.uuid4().bytes,
        protocol=1,
        ping_interval=5,
        ping_max_out=3,
    )
    with open(path / CLIENTS_DAT_NAME, "wb") as f:
        f.write(encode_version())
        f.write(encode_frame(CLIENT_REC_ADD, serialize_client_info(info)))
        f.write(encode_frame(CLIENT_REC_DEL, serialize_client_info(ClientInfo(id=client_id))))


def generate_store(out_dir, messages: int = 5, crash: bool = False) -> Path:
    path = Path(out_dir)
    path.mkdir(parents=True, exist_ok=True)
    client_id = f"client-{random.randint(100, 999)}"

    write_messages(path, messages, crash=crash)
    write_subscriptions(path, client_id)
    write_clients(path, client_id)

    print(f"GENERATED: {path}")
    return path


if __name__ == "__main__":
    import sys

    args = [a for a in sys.argv[1:] if a]

    crash = "--crash" in args
    args = [a for a in args if a != "--crash"]

    messages = 5
    if "--messages" in args:
        i = args.index("--messages")
        if i + 1 >= len(args):
            raise SystemExit("--messages requires a value")
        messages = int(args[i + 1])
        args = args[:i] + args[i + 2:]

    out = args[0] if args else "store"
    generate_store(out, messages=messages, crash=crash)
