"""Telnet session: parser and negotiator behind a single entry point.

Example usage:
    ```python
    session = TelnetSession(policy=TelnetPolicy.common())
    transport.write(session.enable(Side.HIM, TelnetOption.SGA))

    output = session.feed_bytes(transport.read())
    transport.write(output.to_send)
    for event in output.events:
        handle(event)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from .negotiate import TelnetNegotiator, TelnetPolicy
from .options import OptionStateTable
from .parser import TelnetParser
from .types import Data, Negotiate, TelnetCommand, TelnetSequence

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .negotiate import AcceptPolicy
    from .types import NegotiationState, SessionEvent, Side


class Reply(NamedTuple):
    """A message to send back, and where in the event stream it was produced."""

    position: int  # Number of events that came before it
    message: bytes


class SessionOutput(NamedTuple):
    """Everything produced by feeding a chunk of bytes to a session."""

    events: list[SessionEvent]
    replies: list[Reply]

    @property
    def outbound(self) -> list[bytes]:
        """The messages to send back, in the order they were produced."""
        return [reply.message for reply in self.replies]

    @property
    def to_send(self) -> bytes:
        """All outbound messages joined in the order they were produced."""
        return b"".join(self.outbound)

    @property
    def received(self) -> bytes:
        """The application data bytes in the chunk, ignoring all other events."""
        return bytes(event.byte for event in self.events if isinstance(event, Data))

    def interleaved(self) -> Iterator[SessionEvent | Reply]:
        """Walk the events with each reply placed right after the request that caused it.

        A refused request produces no event, so its reply sits where the
        request was in the stream.

        Yields:
            Events and replies in stream order
        """
        replies = iter(self.replies)
        reply = next(replies, None)
        for position, event in enumerate(self.events):
            while reply is not None and reply.position <= position:
                yield reply
                reply = next(replies, None)
            yield event
        if reply is not None:
            yield reply
            yield from replies


@dataclass(slots=True)
class TelnetSession:
    """One telnet connection's protocol state.

    Not safe to drive from more than one caller at a time; give each
    connection its own session.
    """

    policy: AcceptPolicy = field(default_factory=TelnetPolicy)
    parser: TelnetParser = field(init=False, default_factory=TelnetParser)
    negotiator: TelnetNegotiator = field(init=False)

    def __post_init__(self) -> None:
        """Initialise the negotiator with our policy."""
        self.negotiator = TelnetNegotiator(table=OptionStateTable(), policy=self.policy)

    @property
    def table(self) -> OptionStateTable:
        """The option state table shared with the negotiator."""
        return self.negotiator.table

    def feed_bytes(self, chunk: Iterable[int]) -> SessionOutput:
        """Process bytes received from the peer.

        Negotiation requests are answered straight away, and any resulting
        ``OptionChanged`` takes the place of the request in the event list.

        Args:
            chunk: Raw bytes read from the transport

        Returns:
            The application events and the replies to send back, both in stream order
        """
        events: list[SessionEvent] = []
        replies: list[Reply] = []

        for event in self.parser.parse(chunk):
            if isinstance(event, Negotiate):
                changed, response = self.negotiator.receive(event.verb, event.option)
                if changed is not None:
                    events.append(changed)
                if response:
                    replies.append(Reply(len(events), response))
            else:
                events.append(event)

        return SessionOutput(events, replies)

    def enable(self, side: Side, option: int) -> bytes:
        """Ask for a side of an option to be enabled.

        Returns:
            The bytes to send, empty if no message is needed yet
        """
        return self.negotiator.request_enable(side, option)

    def disable(self, side: Side, option: int) -> bytes:
        """Ask for a side of an option to be disabled.

        Returns:
            The bytes to send, empty if no message is needed yet
        """
        return self.negotiator.request_disable(side, option)

    def enable_many(self, requests: Iterable[tuple[Side, int]]) -> bytes:
        """Ask for several options at once, e.g. when first connecting.

        Returns:
            All requests that need sending, joined in order
        """
        return b"".join(self.enable(side, option) for side, option in requests)

    def state(self, side: Side, option: int) -> NegotiationState:
        """Get the Q Method state of a side of an option."""
        return self.table.get_state(side, option)

    def is_enabled(self, side: Side, option: int) -> bool:
        """Check if a side of an option is in effect."""
        return self.table.is_enabled(side, option)

    @staticmethod
    def send_data(data: bytes) -> bytes:
        """Encode application data for the wire, doubling any IAC bytes."""
        return TelnetSequence.escape_iac(data)

    @staticmethod
    def send_command(command: int) -> bytes:
        """Encode a two byte command such as AYT or GA.

        Raises:
            ValueError: If the command takes parameters or is unknown
        """
        if not TelnetCommand.is_single(command):
            msg = f"Not a single byte telnet command: {command}"
            raise ValueError(msg)
        return bytes([TelnetCommand.IAC, command])

    @staticmethod
    def send_subnegotiation(option: int, payload: bytes) -> bytes:
        """Encode a subnegotiation block for an option."""
        return TelnetSequence.create_subnegotiation(option, payload)
