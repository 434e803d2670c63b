"""Main entry point for the qtelnet CLI."""

from __future__ import annotations

from sys import stdin as sys_stdin
from typing import TYPE_CHECKING

from rich.table import Table

from qtelnet.protocol import TelnetPolicy, TelnetSession

from .args import parse_args
from .console import complete_progress, console, create_progress, log, update_progress
from .decode import CaptureDecoder, Record
from .files import FileWriter

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from typing import BinaryIO


def read_chunks(handle: BinaryIO, chunk_size: int, task_id: str | None = None) -> Iterator[bytes]:
    """Read a binary stream in chunks, advancing a progress bar if given.

    Yields:
        Each chunk until the stream is exhausted
    """
    while chunk := handle.read(chunk_size):
        if task_id is not None:
            update_progress(task_id, advance=len(chunk))
        yield chunk


def decode_file(decoder: CaptureDecoder, path: Path, chunk_size: int) -> list[Record]:
    """Decode a capture file with a progress bar.

    Returns:
        The decoded records
    """
    task_id = create_progress(f"Decoding {path.name}", total=path.stat().st_size)
    try:
        with path.open("rb") as handle:
            return decoder.feed_all(read_chunks(handle, chunk_size, task_id))
    finally:
        complete_progress(task_id)


def print_records(records: list[Record]) -> None:
    """Show the decoded records on the console as a table."""
    table = Table("kind", "option", "value", "detail", title="Telnet events")
    for record in records:
        table.add_row(*("" if value is None else str(value) for value in record.values()))
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the qtelnet CLI.

    Returns:
        The process exit status
    """
    args = parse_args(argv)
    decoder = CaptureDecoder(session=TelnetSession(policy=TelnetPolicy.from_options(args.accept)))

    try:
        if args.input is None or str(args.input) == "-":
            records = decoder.feed_all(read_chunks(sys_stdin.buffer, args.chunk_size))
        else:
            records = decode_file(decoder, args.input, args.chunk_size)
    except OSError:
        log.exception("Failed to read telnet capture")
        return 1

    if args.output is None:
        print_records(records)
        return 0

    try:
        FileWriter(path=args.output, type=args.output_format, data=records)
    except (OSError, ValueError):
        log.exception("Failed to write %s", args.output)
        return 1
    log.info("Wrote %d records to %s", len(records), args.output)
    return 0
