"""Telnet protocol engine with Q Method option negotiation.

This package parses the telnet byte stream (RFC 854) into data, command,
negotiation and subnegotiation events, and negotiates options using the Q
Method from RFC 1143 so that no sequence of peer messages can start a
negotiation loop. It performs no I/O itself: the caller reads from and writes
to whatever transport it likes.

A command line decoder for captured telnet streams lives in ``qtelnet.cli``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .protocol import (
    Command,
    Data,
    NegotiationState,
    OptionChanged,
    Side,
    Subnegotiation,
    TelnetCommand,
    TelnetNegotiator,
    TelnetOption,
    TelnetParser,
    TelnetPolicy,
    TelnetSession,
)

__all__ = [
    "Command",
    "Data",
    "NegotiationState",
    "OptionChanged",
    "Side",
    "Subnegotiation",
    "TelnetCommand",
    "TelnetNegotiator",
    "TelnetOption",
    "TelnetParser",
    "TelnetPolicy",
    "TelnetSession",
]

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    __version__ = "0.0.0"
