"""Decode a captured telnet byte stream into event records.

Runs of data bytes are merged into a single ``data`` record, every other
event gets a record of its own, and each reply the session produced is
recorded as ``sent`` right after the request that caused it. The records
for a capture do not depend on how it was split into chunks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from qtelnet.protocol import (
    Command,
    Data,
    OptionChanged,
    Reply,
    Side,
    Subnegotiation,
    TelnetCommand,
    TelnetOption,
    TelnetSession,
)

from .console import log

if TYPE_CHECKING:
    from collections.abc import Iterable

    from qtelnet.protocol.types import SessionEvent
    from qtelnet.types import JSON_TYPE

type Record = dict[str, JSON_TYPE]


def _record(kind: str, option: int | None, value: JSON_TYPE, detail: str) -> Record:
    return {"kind": kind, "option": option, "value": value, "detail": detail}


def event_record(event: SessionEvent) -> Record:
    """Convert a single non-data session event to a record.

    Returns:
        A record with ``kind``, ``option``, ``value`` and ``detail`` keys

    Raises:
        TypeError: If the event is not a session event
    """
    match event:
        case Data(byte=byte):
            return _record("data", None, 1, bytes([byte]).decode("latin-1"))
        case Command(code=code):
            return _record("command", None, int(code), code.label)
        case Subnegotiation(option=option, payload=payload):
            return _record("subnegotiation", option, payload.hex(" "), TelnetOption.describe(option))
        case OptionChanged(side=side, option=option, enabled=enabled):
            owner = "ours" if side is Side.US else "theirs"
            return _record("option", option, enabled, f"{TelnetOption.describe(option)} ({owner})")
    msg = f"Not a session event: {event!r}"
    raise TypeError(msg)


@dataclass(slots=True)
class CaptureDecoder:
    """Feed capture chunks through a session and collect the records."""

    session: TelnetSession = field(default_factory=TelnetSession)
    records: list[Record] = field(default_factory=list)
    _text: bytearray = field(init=False, default_factory=bytearray)

    def feed(self, chunk: bytes) -> None:
        """Decode the next chunk of the capture."""
        for item in self.session.feed_bytes(chunk).interleaved():
            if isinstance(item, Data):
                self._text.append(item.byte)
                continue
            self._flush_text()
            if isinstance(item, Reply):
                message = item.message
                verb, option = TelnetCommand(message[1]), message[2]
                self._add(_record("sent", option, message.hex(" "), f"{verb.label} {TelnetOption.describe(option)}"))
            else:
                self._add(event_record(item))

    def feed_all(self, chunks: Iterable[bytes]) -> list[Record]:
        """Decode a whole capture.

        Returns:
            All records, including any trailing data
        """
        for chunk in chunks:
            self.feed(chunk)
        return self.finish()

    def finish(self) -> list[Record]:
        """Flush any buffered data at the end of the capture.

        Returns:
            All records collected so far
        """
        self._flush_text()
        if self.session.parser.errors:
            log.warning("Dropped %d malformed telnet sequences", self.session.parser.errors)
        return self.records

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = self._text.decode("utf-8", errors="replace")
        self._add(_record("data", None, len(self._text), text))
        self._text = bytearray()

    def _add(self, record: Record) -> None:
        log.info("[%s] %s %s", record["kind"], record["value"], record["detail"])
        self.records.append(record)
