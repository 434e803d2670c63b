"""Telnet byte stream parser.

The parser is a byte-at-a-time state machine in the style of Paul Williams'
ANSI parser: each byte is classified, and the pair of (current state, byte
class) is looked up in a transition table giving the next state and the
action to perform. Malformed framing shows up as explicit ``ERROR`` entries
in the table, which resynchronise the stream on the next byte.

Example:
    parser = TelnetParser()
    for event in parser.parse(b"hi\\xff\\xfb\\x01"):
        print(event)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .types import Command, Data, Negotiate, Subnegotiation, TelnetCommand, TelnetOption

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .types import ParserEvent

log = getLogger(__name__)


class ParserState(IntEnum):
    """States for the telnet parser state machine."""

    GROUND = 0
    SAW_IAC = 1
    SAW_VERB = 2
    IN_SUB = 3
    SAW_IAC_IN_SUB = 4


class ByteClass(IntEnum):
    """Classes of input byte the transition table distinguishes."""

    OTHER = 0
    IAC = 1
    SE = 2
    SB = 3
    VERB = 4  # WILL, WONT, DO, DONT
    SINGLE = 5  # NOP to GA


class Action(IntEnum):
    """Work performed while taking a transition."""

    NONE = 0
    DATA = 1
    COMMAND = 2
    NEG_START = 3
    NEG_DISPATCH = 4
    SUB_START = 5
    SUB_PUT = 6
    SUB_DISPATCH = 7
    ERROR = 8


def _classify(byte: int) -> ByteClass:
    match byte:
        case TelnetCommand.IAC:
            return ByteClass.IAC
        case TelnetCommand.SE:
            return ByteClass.SE
        case TelnetCommand.SB:
            return ByteClass.SB
        case _ if TelnetCommand.is_negotiation(byte):
            return ByteClass.VERB
        case _ if TelnetCommand.is_single(byte):
            return ByteClass.SINGLE
        case _:
            return ByteClass.OTHER


_BYTE_CLASSES: tuple[ByteClass, ...] = tuple(_classify(byte) for byte in range(256))


def _build_table() -> dict[tuple[ParserState, ByteClass], tuple[ParserState, Action]]:
    """Build the (state, byte class) -> (next state, action) table."""
    table: dict[tuple[ParserState, ByteClass], tuple[ParserState, Action]] = {}

    for byte_class in ByteClass:
        # Plain data until an IAC shows up
        table[ParserState.GROUND, byte_class] = (ParserState.GROUND, Action.DATA)
        # Anything after IAC that we don't recognise is dropped
        table[ParserState.SAW_IAC, byte_class] = (ParserState.GROUND, Action.ERROR)
        # Whatever follows a verb is the option id
        table[ParserState.SAW_VERB, byte_class] = (ParserState.GROUND, Action.NEG_DISPATCH)
        table[ParserState.IN_SUB, byte_class] = (ParserState.IN_SUB, Action.SUB_PUT)
        # Only SE or a doubled IAC may follow IAC inside a block
        table[ParserState.SAW_IAC_IN_SUB, byte_class] = (ParserState.GROUND, Action.ERROR)

    table[ParserState.GROUND, ByteClass.IAC] = (ParserState.SAW_IAC, Action.NONE)
    table[ParserState.SAW_IAC, ByteClass.IAC] = (ParserState.GROUND, Action.DATA)
    table[ParserState.SAW_IAC, ByteClass.SINGLE] = (ParserState.GROUND, Action.COMMAND)
    table[ParserState.SAW_IAC, ByteClass.VERB] = (ParserState.SAW_VERB, Action.NEG_START)
    table[ParserState.SAW_IAC, ByteClass.SB] = (ParserState.IN_SUB, Action.SUB_START)
    table[ParserState.IN_SUB, ByteClass.IAC] = (ParserState.SAW_IAC_IN_SUB, Action.NONE)
    table[ParserState.SAW_IAC_IN_SUB, ByteClass.IAC] = (ParserState.IN_SUB, Action.SUB_PUT)
    table[ParserState.SAW_IAC_IN_SUB, ByteClass.SE] = (ParserState.GROUND, Action.SUB_DISPATCH)
    return table


TRANSITIONS = _build_table()

# Longest subnegotiation payload kept; longer blocks are read to the end and dropped
MAX_SUBNEGOTIATION = 4096


@dataclass(slots=True)
class TelnetParser:
    """Turn raw telnet bytes into protocol events, one byte at a time.

    The parser holds no option state and makes no decisions: negotiation
    requests come out as ``Negotiate`` events for the caller to route.
    """

    state: ParserState = field(default=ParserState.GROUND)
    errors: int = field(default=0)  # Malformed units dropped so far
    max_payload: int = field(default=MAX_SUBNEGOTIATION)

    _verb: TelnetCommand = field(init=False, default=TelnetCommand.WILL)
    _sub_option: int | None = field(init=False, default=None)
    _sub_payload: bytearray = field(init=False, default_factory=bytearray)
    _sub_overflow: bool = field(init=False, default=False)

    def feed(self, byte: int) -> ParserEvent | None:
        """Advance the state machine by a single byte.

        Args:
            byte: The next byte of the stream (0-255)

        Returns:
            The event completed by this byte, or None if it completes nothing

        Raises:
            ValueError: If the value is not a byte
        """
        if not 0 <= byte <= 0xFF:  # noqa: PLR2004
            msg = f"Invalid byte: {byte}"
            raise ValueError(msg)
        next_state, action = TRANSITIONS[self.state, _BYTE_CLASSES[byte]]
        previous, self.state = self.state, next_state

        match action:
            case Action.DATA:
                return Data(byte)
            case Action.COMMAND:
                return Command(TelnetCommand(byte))
            case Action.NEG_START:
                self._verb = TelnetCommand(byte)
            case Action.NEG_DISPATCH:
                return Negotiate(self._verb, byte)
            case Action.SUB_START:
                self._clear_block()
            case Action.SUB_PUT:
                # The first byte of a block is the option, not payload
                if self._sub_option is None:
                    self._sub_option = byte
                elif len(self._sub_payload) < self.max_payload:
                    self._sub_payload.append(byte)
                else:
                    self._sub_overflow = True
            case Action.SUB_DISPATCH:
                return self._dispatch_subnegotiation()
            case Action.ERROR:
                self._error(previous, byte)
        return None

    def parse(self, data: Iterable[int]) -> Iterator[ParserEvent]:
        """Lazily feed a chunk of bytes through the parser.

        Yields:
            Each event in the order its final byte was fed
        """
        for byte in data:
            event = self.feed(byte)
            if event is not None:
                yield event

    def feed_bytes(self, data: Iterable[int]) -> list[ParserEvent]:
        """Feed a chunk of bytes through the parser.

        Returns:
            All events completed by the chunk, in stream order
        """
        return list(self.parse(data))

    def reset(self) -> None:
        """Drop any partial sequence and return to the ground state."""
        self.state = ParserState.GROUND
        self._clear_block()

    def _dispatch_subnegotiation(self) -> Subnegotiation | None:
        option, payload, overflow = self._sub_option, bytes(self._sub_payload), self._sub_overflow
        self._clear_block()
        if option is None:
            # IAC SB IAC SE: there is no option to attribute the block to
            self.errors += 1
            log.debug("Dropping empty subnegotiation block")
            return None
        if overflow:
            self.errors += 1
            log.debug("Dropping %s subnegotiation longer than %d bytes", TelnetOption.describe(option), self.max_payload)
            return None
        log.debug("Subnegotiation for %s with %d byte payload", TelnetOption.describe(option), len(payload))
        return Subnegotiation(option, payload)

    def _error(self, state: ParserState, byte: int) -> None:
        self.errors += 1
        if state is ParserState.SAW_IAC_IN_SUB:
            log.debug("Discarding subnegotiation block ended by IAC %d", byte)
            self._clear_block()
        else:
            log.debug("Ignoring unexpected byte %d after IAC", byte)

    def _clear_block(self) -> None:
        self._sub_option = None
        self._sub_payload = bytearray()
        self._sub_overflow = False
