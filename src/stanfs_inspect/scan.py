"""File-level scans: open, validate the version header, decode to EOF."""
from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Iterator

from stanfs_core.protocol import KIND_CLIENTS, KIND_DATA, KIND_INDEX, KIND_SUBS
from stanfs_core.reader import ByteReader

from .frames import CLIENT_RECORDS, SUBSCRIPTION_RECORDS, Frame, RecordKind, iter_frames
from .header import check_version
from .resolver import MessageResolver, ResolvedMessage


class ScanStats:
    """Per-label record counts for one scan."""

    def __init__(self) -> None:
        self.records = 0
        self.by_label: Counter[str] = Counter()

    def add(self, label: str) -> None:
        self.records += 1
        self.by_label[label] += 1

    def summary(self) -> str:
        parts = " ".join(f"{k}={v}" for k, v in sorted(self.by_label.items()))
        return f"{self.records} records" + (f" ({parts})" if parts else "")


def scan_messages(
    idx_path: Path,
    dat_path: Path,
    verify_checksum: bool = False,
    stats: ScanStats | None = None,
) -> Iterator[ResolvedMessage]:
    with open(idx_path, "rb") as f_idx, open(dat_path, "rb") as f_dat:
        idx = ByteReader(f_idx)
        dat = ByteReader(f_dat)
        check_version(idx, KIND_INDEX)
        check_version(dat, KIND_DATA)

        resolver = MessageResolver(idx, dat, verify_checksum=verify_checksum)
        for msg in resolver.iter_messages():
            if stats is not None:
                stats.add("msg")
            yield msg


def _scan_log(
    path: Path,
    kind: str,
    table: dict[int, RecordKind],
    verify_checksum: bool,
    stats: ScanStats | None,
) -> Iterator[Frame]:
    with open(path, "rb") as f:
        reader = ByteReader(f)
        check_version(reader, kind)
        for frame in iter_frames(reader, table, verify_checksum=verify_checksum, source=kind):
            if stats is not None:
                stats.add(frame.label)
            yield frame


def scan_subscriptions(
    path: Path, verify_checksum: bool = False, stats: ScanStats | None = None
) -> Iterator[Frame]:
    return _scan_log(path, KIND_SUBS, SUBSCRIPTION_RECORDS, verify_checksum, stats)


def scan_clients(
    path: Path, verify_checksum: bool = False, stats: ScanStats | None = None
) -> Iterator[Frame]:
    return _scan_log(path, KIND_CLIENTS, CLIENT_RECORDS, verify_checksum, stats)
