"""stanfs inspect - read-only decoder for NATS Streaming file store channels."""
from .frames import CLIENT_RECORDS, SUBSCRIPTION_RECORDS, Frame, iter_frames
from .header import check_version
from .resolver import IndexRecord, MessageResolver, ResolvedMessage
from .scan import ScanStats, scan_clients, scan_messages, scan_subscriptions

__all__ = [
    "CLIENT_RECORDS",
    "SUBSCRIPTION_RECORDS",
    "Frame",
    "IndexRecord",
    "MessageResolver",
    "ResolvedMessage",
    "ScanStats",
    "check_version",
    "iter_frames",
    "scan_clients",
    "scan_messages",
    "scan_subscriptions",
]
