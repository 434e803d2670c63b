"""Telnet protocol engine.

This package turns a raw telnet byte stream into structured events and
negotiates options with the Q Method (RFC 1143). It does no I/O: feed it the
bytes you read and write back the bytes it returns.

Example usage:
    ```python
    from qtelnet.protocol import Side, TelnetOption, TelnetPolicy, TelnetSession

    session = TelnetSession(policy=TelnetPolicy.from_options([TelnetOption.ECHO]))
    output = session.feed_bytes(b"\\xff\\xfb\\x01")
    assert output.to_send == b"\\xff\\xfd\\x01"
    assert session.is_enabled(Side.HIM, TelnetOption.ECHO)
    ```
"""

from __future__ import annotations

from .negotiate import NegotiationResult, TelnetNegotiator, TelnetPolicy
from .options import OptionState, OptionStateTable
from .parser import ParserState, TelnetParser
from .session import Reply, SessionOutput, TelnetSession
from .types import (
    IAC_BYTE,
    Command,
    Data,
    Negotiate,
    NegotiationState,
    OptionChanged,
    Side,
    Subnegotiation,
    TelnetCommand,
    TelnetOption,
    TelnetSequence,
)

__all__ = [
    "IAC_BYTE",
    "Command",
    "Data",
    "Negotiate",
    "NegotiationResult",
    "NegotiationState",
    "OptionChanged",
    "OptionState",
    "OptionStateTable",
    "ParserState",
    "Reply",
    "SessionOutput",
    "Side",
    "Subnegotiation",
    "TelnetCommand",
    "TelnetNegotiator",
    "TelnetOption",
    "TelnetParser",
    "TelnetPolicy",
    "TelnetSequence",
    "TelnetSession",
]
