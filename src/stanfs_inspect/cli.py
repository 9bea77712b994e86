"""stanfs-inspect - decode a NATS Streaming file store channel."""
from __future__ import annotations

from pathlib import Path

import click

from stanfs_core.errors import StoreFormatError

from .report import (
    CLIENT_SCHEMA,
    MESSAGE_SCHEMA,
    SUBSCRIPTION_SCHEMA,
    format_frame,
    format_message,
    frame_row,
    message_row,
    write_parquet,
)
from .scan import ScanStats, scan_clients, scan_messages, scan_subscriptions

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def inspect_store(
    msgs_dat: Path | None = None,
    msgs_idx: Path | None = None,
    subs_dat: Path | None = None,
    clients_dat: Path | None = None,
    verify_checksum: bool = False,
    parquet: Path | None = None,
) -> ScanStats:
    """Decode one governed file set, echoing one line per record."""
    stats = ScanStats()
    rows: list[dict] = []

    if subs_dat is not None:
        schema = SUBSCRIPTION_SCHEMA
        for frame in scan_subscriptions(subs_dat, verify_checksum, stats):
            click.echo(format_frame(frame))
            rows.append(frame_row(frame))
    elif clients_dat is not None:
        schema = CLIENT_SCHEMA
        for frame in scan_clients(clients_dat, verify_checksum, stats):
            click.echo(format_frame(frame))
            rows.append(frame_row(frame))
    else:
        schema = MESSAGE_SCHEMA
        for msg in scan_messages(msgs_idx, msgs_dat, verify_checksum, stats):
            click.echo(format_message(msg))
            rows.append(message_row(msg))

    # Export only after the whole file decoded cleanly.
    if parquet is not None:
        write_parquet(rows, parquet, schema=schema)
    return stats


@click.command()
@click.option("-d", "--msgs-dat", "--msgsDat", "msgs_dat", type=_FILE, help="msgs.dat file")
@click.option("-i", "--msgs-idx", "--msgsIdx", "msgs_idx", type=_FILE, help="msgs.idx file")
@click.option("-s", "--subs-dat", "--subsDat", "subs_dat", type=_FILE, help="subs.dat file")
@click.option("-c", "--clients-dat", "--clientsDat", "clients_dat", type=_FILE, help="clients.dat file")
@click.option("--verify-checksum", is_flag=True, help="Check stored CRC-32 values against record content")
@click.option("--parquet", type=click.Path(dir_okay=False, path_type=Path), help="Export decoded records to parquet")
@click.pass_context
def main(
    ctx: click.Context,
    msgs_dat: Path | None,
    msgs_idx: Path | None,
    subs_dat: Path | None,
    clients_dat: Path | None,
    verify_checksum: bool,
    parquet: Path | None,
) -> None:
    """Decode a NATS Streaming file store channel."""
    modes = [m for m in (subs_dat, clients_dat) if m is not None]
    if msgs_dat is not None or msgs_idx is not None:
        modes.append(msgs_dat)

    if not modes and not verify_checksum and parquet is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    if len(modes) > 1:
        raise click.UsageError("select exactly one of --msgs-dat/--msgs-idx, --subs-dat, --clients-dat")
    if subs_dat is None and clients_dat is None:
        if msgs_dat is None:
            raise click.UsageError("missing msgs.dat")
        if msgs_idx is None:
            raise click.UsageError("missing msgs.idx")

    try:
        stats = inspect_store(msgs_dat, msgs_idx, subs_dat, clients_dat, verify_checksum, parquet)
    except StoreFormatError as e:
        # Fail closed with a single-line reason.
        click.echo(f"FATAL: [{e.code}] {e}", err=True)
        raise SystemExit(1)

    click.echo(f"PASS: {stats.summary()}")


if __name__ == "__main__":
    main()
