"""Constants for qtelnet."""

from __future__ import annotations

from argparse import ArgumentTypeError
from pathlib import Path
from typing import Any

from qtelnet.protocol.types import TelnetOption

# Protocol constants

DEFAULT_CHUNK_SIZE = 2048

# CLI constants


def positive_int(text: str) -> int:
    """Parse a command line value that must be a whole number above zero.

    Raises:
        ArgumentTypeError: If the value is not a positive integer
    """
    try:
        value = int(text)
    except ValueError:
        value = 0
    if value < 1:
        msg = f"must be a positive integer, got {text!r}"
        raise ArgumentTypeError(msg)
    return value


CLI_ARGUMENTS: dict[str, list[tuple[list[str], dict[str, Any]]]] = {
    "decoding": [
        (
            ["-a", "--accept"],
            {
                "action": "append",
                "default": [],
                "help": "Option to accept on both sides, by number or name (repeatable)",
                "metavar": "OPTION",
                "type": TelnetOption.parse,
            },
        ),
        (
            ["-c", "--chunk-size"],
            {"type": positive_int, "default": DEFAULT_CHUNK_SIZE, "metavar": f"<{DEFAULT_CHUNK_SIZE}>"},
        ),
        (["-v", "--verbose"], {"action": "count", "default": 0, "help": "Increase log verbosity"}),
    ],
    "files": [
        (["-i", "--input"], {"help": "Raw capture file (default: stdin)", "type": Path}),
        (["-o", "--output"], {"help": "Output file path (default: console)", "type": Path}),
        (
            ["-of", "--output-format"],
            {"choices": ["csv", "json", "plain", "xlsx"], "default": "plain", "metavar": "csv|json|<plain>|xlsx"},
        ),
    ],
}
CLI_HELP_DESCRIPTION: str = """qtelnet: decode a raw telnet byte stream.

Feeds a captured telnet stream through the protocol engine and reports each
event: data, commands, subnegotiation blocks and option changes, along with
the negotiation replies a client would have sent.
"""
CLI_HELP_EPILOGUE: str | None = "If an argument has a default, it's shown in <parentheses>."
CLI_HELP_NAME: str = "qtelnet"
