"""Unit tests for the telnet stream parser."""

from __future__ import annotations

import pytest

from qtelnet.protocol.parser import TRANSITIONS, ByteClass, ParserState, TelnetParser
from qtelnet.protocol.types import (
    Command,
    Data,
    Negotiate,
    Subnegotiation,
    TelnetCommand,
    TelnetOption,
    TelnetSequence,
)

IAC = TelnetCommand.IAC
SB = TelnetCommand.SB
SE = TelnetCommand.SE


@pytest.fixture
def parser() -> TelnetParser:
    """Fixture providing a fresh parser."""
    return TelnetParser()


def test_plain_data(parser: TelnetParser) -> None:
    """Test that ordinary bytes come out as one data event each."""
    events = parser.feed_bytes(b"hi\r\n")
    expected = [Data(ord("h")), Data(ord("i")), Data(13), Data(10)]
    if events != expected:
        pytest.fail(f"Data events mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_escaped_iac_in_data(parser: TelnetParser) -> None:
    """Test that a doubled IAC is a single literal 255 data byte."""
    events = parser.feed_bytes(bytes([65, 255, 255, 66]))
    expected = [Data(65), Data(255), Data(66)]
    if events != expected:
        pytest.fail(f"Escaped IAC mismatch.\nExpected: {expected!r}\nGot: {events!r}")


@pytest.mark.parametrize("code", range(TelnetCommand.NOP, TelnetCommand.GA + 1))
def test_single_byte_commands(parser: TelnetParser, code: int) -> None:
    """Test that NOP through GA after IAC produce command events."""
    events = parser.feed_bytes(bytes([IAC, code]))
    if events != [Command(TelnetCommand(code))]:
        pytest.fail(f"Command {code} not parsed, got: {events!r}")
    if parser.state is not ParserState.GROUND:
        pytest.fail(f"Parser should return to ground, state is {parser.state!r}")


@pytest.mark.parametrize("verb", [TelnetCommand.WILL, TelnetCommand.WONT, TelnetCommand.DO, TelnetCommand.DONT])
def test_negotiation(parser: TelnetParser, verb: TelnetCommand) -> None:
    """Test that IAC verb option produces a negotiation event."""
    events = parser.feed_bytes(bytes([IAC, verb, TelnetOption.TERMINAL_TYPE]))
    expected = [Negotiate(verb, TelnetOption.TERMINAL_TYPE)]
    if events != expected:
        pytest.fail(f"Negotiation mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_negotiation_split_across_feeds(parser: TelnetParser) -> None:
    """Test that a negotiation spread over several calls is only emitted once complete."""
    if parser.feed(IAC) is not None or parser.feed(TelnetCommand.WILL) is not None:
        pytest.fail("Partial negotiation should not emit an event")
    event = parser.feed(TelnetOption.ECHO)
    if event != Negotiate(TelnetCommand.WILL, TelnetOption.ECHO):
        pytest.fail(f"Expected WILL ECHO, got: {event!r}")


def test_negotiation_option_may_be_iac(parser: TelnetParser) -> None:
    """Test that the option byte is taken literally even when it is 255."""
    events = parser.feed_bytes(bytes([IAC, TelnetCommand.DO, 255, 65]))
    expected = [Negotiate(TelnetCommand.DO, 255), Data(65)]
    if events != expected:
        pytest.fail(f"Option 255 mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_subnegotiation(parser: TelnetParser) -> None:
    """Test a terminal type subnegotiation block."""
    events = parser.feed_bytes(bytes([IAC, SB, 24, 0, 65, 66, IAC, SE]))
    expected = [Subnegotiation(24, bytes([0, 65, 66]))]
    if events != expected:
        pytest.fail(f"Subnegotiation mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_subnegotiation_with_escaped_iac(parser: TelnetParser) -> None:
    """Test that a doubled IAC inside a block is a literal 255 in the payload."""
    events = parser.feed_bytes(bytes([IAC, SB, 31, 0, IAC, IAC, 0, 24, IAC, SE]))
    expected = [Subnegotiation(31, bytes([0, 255, 0, 24]))]
    if events != expected:
        pytest.fail(f"Escaped subnegotiation mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_empty_subnegotiation_payload(parser: TelnetParser) -> None:
    """Test a block holding only an option id."""
    events = parser.feed_bytes(bytes([IAC, SB, 24, IAC, SE]))
    if events != [Subnegotiation(24, b"")]:
        pytest.fail(f"Expected empty payload, got: {events!r}")


def test_subnegotiation_without_option_is_dropped(parser: TelnetParser) -> None:
    """Test that IAC SB IAC SE is discarded as malformed."""
    events = parser.feed_bytes(bytes([IAC, SB, IAC, SE, 65]))
    if events != [Data(65)]:
        pytest.fail(f"Expected only trailing data, got: {events!r}")
    if parser.errors != 1:
        pytest.fail(f"Expected one error, got {parser.errors}")


def test_unknown_command_resynchronises(parser: TelnetParser) -> None:
    """Test that an unrecognised byte after IAC is dropped and parsing continues."""
    events = parser.feed_bytes(bytes([65, IAC, 100, 66, IAC, TelnetCommand.EOR, 67]))
    expected = [Data(65), Data(66), Data(67)]
    if events != expected:
        pytest.fail(f"Resync mismatch.\nExpected: {expected!r}\nGot: {events!r}")
    if parser.errors != 2:  # noqa: PLR2004
        pytest.fail(f"Expected two errors, got {parser.errors}")


def test_se_outside_block_is_an_error(parser: TelnetParser) -> None:
    """Test that a stray IAC SE is ignored."""
    events = parser.feed_bytes(bytes([IAC, SE, 65]))
    if events != [Data(65)]:
        pytest.fail(f"Expected only data after stray SE, got: {events!r}")


def test_bad_byte_ends_subnegotiation(parser: TelnetParser) -> None:
    """Test that IAC followed by anything but IAC or SE discards the block."""
    events = parser.feed_bytes(bytes([IAC, SB, 24, 1, IAC, 65, 66, IAC, SB, 24, 2, IAC, SE]))
    expected = [Data(66), Subnegotiation(24, b"\x02")]
    if events != expected:
        pytest.fail(f"Block discard mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_oversized_subnegotiation_is_dropped() -> None:
    """Test that a block longer than the payload limit is read to its end and discarded."""
    parser = TelnetParser(max_payload=4)
    stream = bytes([IAC, SB, 24, *b"toolong", IAC, SE, 65, IAC, SB, 24, *b"fits", IAC, SE])
    events = parser.feed_bytes(stream)
    expected = [Data(65), Subnegotiation(24, b"fits")]
    if events != expected:
        pytest.fail(f"Oversized block mismatch.\nExpected: {expected!r}\nGot: {events!r}")
    if parser.errors != 1:
        pytest.fail(f"Expected one error, got {parser.errors}")


@pytest.mark.parametrize("byte", [-1, 256])
def test_feed_rejects_non_bytes(parser: TelnetParser, byte: int) -> None:
    """Test that values outside 0-255 are refused without changing state."""
    with pytest.raises(ValueError, match="Invalid byte"):
        parser.feed(byte)
    if parser.state is not ParserState.GROUND:
        pytest.fail(f"Expected parser to stay in GROUND, got {parser.state!r}")


def test_feed_bytes_rejects_negative_iac(parser: TelnetParser) -> None:
    """Test that -1 is not mistaken for IAC in a sequence."""
    with pytest.raises(ValueError, match="Invalid byte: -1"):
        parser.feed_bytes([-1, TelnetCommand.WILL, TelnetOption.ECHO])


def test_mixed_stream(parser: TelnetParser) -> None:
    """Test data, commands, negotiation and subnegotiation in one stream."""
    stream = (
        b"rs"
        + bytes([IAC, TelnetCommand.WILL, 24])
        + bytes([IAC, TelnetCommand.AYT])
        + bytes([IAC, SB, 24, 1, IAC, SE])
        + b"!"
    )
    events = parser.feed_bytes(stream)
    expected = [
        Data(ord("r")),
        Data(ord("s")),
        Negotiate(TelnetCommand.WILL, 24),
        Command(TelnetCommand.AYT),
        Subnegotiation(24, b"\x01"),
        Data(ord("!")),
    ]
    if events != expected:
        pytest.fail(f"Mixed stream mismatch.\nExpected: {expected!r}\nGot: {events!r}")


def test_parse_is_lazy(parser: TelnetParser) -> None:
    """Test that parse only consumes input as events are requested."""
    events = parser.parse(b"ab")
    if parser.state is not ParserState.GROUND:
        pytest.fail("Nothing should be consumed before iterating")
    first = next(events)
    if first != Data(ord("a")):
        pytest.fail(f"Expected first data byte, got: {first!r}")


def test_reset_drops_partial_block(parser: TelnetParser) -> None:
    """Test that reset abandons a half-read subnegotiation."""
    parser.feed_bytes(bytes([IAC, SB, 24, 1]))
    parser.reset()
    events = parser.feed_bytes(bytes([65, IAC, SE]))
    if events != [Data(65)]:
        pytest.fail(f"Expected reset parser to treat input as data, got: {events!r}")


@pytest.mark.parametrize(
    "payload",
    [b"", b"\xff", b"\xff" * 7, bytes(range(256)), b"plain text", b"\xff\xf0\xff\xfa"],
)
def test_escape_round_trip(parser: TelnetParser, payload: bytes) -> None:
    """Test that escaped data and subnegotiation payloads parse back unchanged."""
    data_events = parser.feed_bytes(TelnetSequence.escape_iac(payload))
    if data_events != [Data(byte) for byte in payload]:
        pytest.fail(f"Data round trip failed for {payload!r}: {data_events!r}")

    sub_events = parser.feed_bytes(TelnetSequence.create_subnegotiation(TelnetOption.NAWS, payload))
    if sub_events != [Subnegotiation(TelnetOption.NAWS, payload)]:
        pytest.fail(f"Subnegotiation round trip failed for {payload!r}: {sub_events!r}")


def test_transition_table_is_complete() -> None:
    """Test that every state has an entry for every byte class."""
    missing = [(state, cls) for state in ParserState for cls in ByteClass if (state, cls) not in TRANSITIONS]
    if missing:
        pytest.fail(f"Transition table missing entries: {missing!r}")
