"""Telnet protocol types module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

IAC_BYTE = 0xFF  # Interpret As Command byte
MAX_OPTION = 0xFF


class TelnetCommand(IntEnum):
    """Telnet protocol commands."""

    IAC = 255  # Interpret As Command
    DONT = 254
    DO = 253
    WONT = 252
    WILL = 251
    SB = 250  # Subnegotiation Begin
    GA = 249  # Go Ahead
    EL = 248  # Erase Line
    EC = 247  # Erase Character
    AYT = 246  # Are You There
    AO = 245  # Abort Output
    IP = 244  # Interrupt Process
    BRK = 243  # Break
    DM = 242  # Data Mark
    NOP = 241
    SE = 240  # Subnegotiation End
    EOR = 239
    ABORT = 238
    SUSP = 237
    EOF = 236

    @property
    def label(self) -> str:
        """Human readable name of the command."""
        return _COMMAND_LABELS[self]

    @classmethod
    def is_negotiation(cls, cmd: int) -> bool:
        """Check if a command byte is a negotiation command.

        Returns:
            True if the command is a negotiation command, False otherwise
        """
        return cmd in {cls.DO, cls.DONT, cls.WILL, cls.WONT}

    @classmethod
    def is_single(cls, cmd: int) -> bool:
        """Check if a command byte is a complete two byte command (NOP to GA).

        Returns:
            True if the command needs no further bytes, False otherwise
        """
        return cls.NOP <= cmd <= cls.GA

    @classmethod
    def is_enable(cls, cmd: int) -> bool:
        """Check if a negotiation command asks for an option to be enabled.

        Returns:
            True for WILL and DO, False otherwise
        """
        return cmd in {cls.DO, cls.WILL}


_COMMAND_LABELS: dict[int, str] = {
    TelnetCommand.IAC: "IAC",
    TelnetCommand.DONT: "DON'T",
    TelnetCommand.DO: "DO",
    TelnetCommand.WONT: "WON'T",
    TelnetCommand.WILL: "WILL",
    TelnetCommand.SB: "SB",
    TelnetCommand.GA: "Go ahead",
    TelnetCommand.EL: "Erase line",
    TelnetCommand.EC: "Erase character",
    TelnetCommand.AYT: "Are You There",
    TelnetCommand.AO: "Abort output",
    TelnetCommand.IP: "Interrupt Process",
    TelnetCommand.BRK: "Break",
    TelnetCommand.DM: "Data Mark",
    TelnetCommand.NOP: "NOP",
    TelnetCommand.SE: "SE",
    TelnetCommand.EOR: "EOR",
    TelnetCommand.ABORT: "ABORT",
    TelnetCommand.SUSP: "SUSP",
    TelnetCommand.EOF: "EOF",
}


class TelnetOption(IntEnum):
    """Well known telnet protocol options.

    Option ids outside this enum are still valid, they just have no name.
    """

    BINARY = 0
    ECHO = 1
    RCP = 2
    SGA = 3  # Suppress Go Ahead
    NAMS = 4
    STATUS = 5
    TIMING_MARK = 6
    RCTE = 7
    NAOL = 8
    NAOP = 9
    NAOCRD = 10
    NAOHTS = 11
    NAOHTD = 12
    NAOFFD = 13
    NAOVTS = 14
    NAOVTD = 15
    NAOLFD = 16
    XASCII = 17
    LOGOUT = 18
    BM = 19
    DET = 20
    SUPDUP = 21
    SUPDUP_OUTPUT = 22
    SNDLOC = 23
    TERMINAL_TYPE = 24
    EOR = 25
    TUID = 26
    OUTMRK = 27
    TTYLOC = 28
    REGIME_3270 = 29
    X3PAD = 30
    NAWS = 31  # Negotiate About Window Size
    TERMINAL_SPEED = 32
    LFLOW = 33
    LINEMODE = 34
    XDISPLOC = 35
    ENVIRON = 36
    AUTHENTICATION = 37
    ENCRYPT = 38
    NEW_ENVIRON = 39
    MSSP = 70
    COMPRESS = 85
    COMPRESS2 = 86  # Also known as MCCP 2
    ZMP = 93
    EXOPL = 255

    @classmethod
    def is_known(cls, option: int) -> bool:
        """Check if an option id has a registered name.

        Returns:
            True if the option is one of the well known options, False otherwise
        """
        return option in cls.__members__.values()

    @classmethod
    def describe(cls, option: int) -> str:
        """Describe an option id for logs, e.g. ``24 TTYPE``.

        Returns:
            The option id followed by its canonical name
        """
        if cls.is_known(option):
            return f"{option} {_OPTION_LABELS.get(option, cls(option).name)}"
        return f"{option} <unknown option>"

    @classmethod
    def parse(cls, text: str) -> int:
        """Parse an option given by number or by name (``31``, ``naws``, ``TTYPE``).

        Returns:
            The option id

        Raises:
            ValueError: If the text is neither a valid option id nor a known name
        """
        text = text.strip()
        if text.isdigit():
            return check_option(int(text))
        name = text.upper().replace("-", "_")
        for option, label in _OPTION_LABELS.items():
            if label == name:
                return option
        if name in cls.__members__:
            return cls.__members__[name]
        msg = f"Unknown telnet option: {text}"
        raise ValueError(msg)


# Canonical names where they differ from the member names
_OPTION_LABELS: dict[int, str] = {
    TelnetOption.TIMING_MARK: "TM",
    TelnetOption.SUPDUP_OUTPUT: "SUPDUPOUTPUT",
    TelnetOption.TERMINAL_TYPE: "TTYPE",
    TelnetOption.REGIME_3270: "3270REGIME",
    TelnetOption.TERMINAL_SPEED: "TSPEED",
}


class Side(IntEnum):
    """Which end of the connection an option state describes."""

    US = 0  # Our capability, negotiated with DO/DONT and answered with WILL/WONT
    HIM = 1  # The peer's capability, negotiated with WILL/WONT and answered with DO/DONT

    @classmethod
    def from_verb(cls, verb: int) -> Side:
        """Get the side an inbound negotiation verb refers to.

        Returns:
            HIM for WILL/WONT, US for DO/DONT
        """
        if verb in {TelnetCommand.WILL, TelnetCommand.WONT}:
            return cls.HIM
        return cls.US

    def request_verb(self, enable: bool) -> TelnetCommand:
        """Get the verb we send to ask for this side to be enabled or disabled.

        Returns:
            WILL/WONT for our side, DO/DONT for the peer's side
        """
        if self is Side.US:
            return TelnetCommand.WILL if enable else TelnetCommand.WONT
        return TelnetCommand.DO if enable else TelnetCommand.DONT


class NegotiationState(IntEnum):
    """Q Method state of one side of one option (RFC 1143).

    The WANTNO and WANTYES states carry their queue bit in the member itself,
    so a queued request outside of a pending negotiation cannot be expressed.
    """

    NO = 0
    YES = 1
    WANTNO_EMPTY = 2
    WANTNO_OPPOSITE = 3
    WANTYES_EMPTY = 4
    WANTYES_OPPOSITE = 5

    @property
    def enabled(self) -> bool:
        """Whether the option is in effect for this side.

        An option we have asked to disable stays in effect until the peer
        answers, and one we have asked to enable is not in effect until then.
        """
        return self in {
            NegotiationState.YES,
            NegotiationState.WANTNO_EMPTY,
            NegotiationState.WANTNO_OPPOSITE,
        }

    @property
    def pending(self) -> bool:
        """Whether a negotiation message is outstanding for this side."""
        return self not in {NegotiationState.NO, NegotiationState.YES}

    @property
    def queued(self) -> bool:
        """Whether the opposite request is queued behind the pending one."""
        return self in {NegotiationState.WANTNO_OPPOSITE, NegotiationState.WANTYES_OPPOSITE}


def check_option(option: int) -> int:
    """Validate an option id.

    Returns:
        The option id unchanged

    Raises:
        ValueError: If the option id does not fit in a single byte
    """
    if not 0 <= option <= MAX_OPTION:
        msg = f"Invalid telnet option: {option}"
        raise ValueError(msg)
    return option


class TelnetSequence:
    """Builders for raw telnet byte sequences."""

    @staticmethod
    def escape_iac(data: bytes) -> bytes:
        """Double every IAC byte so it is read as literal data.

        Returns:
            The escaped data
        """
        # Fast path for common case - no IAC bytes
        if IAC_BYTE not in data:
            return bytes(data)
        return bytes(data).replace(b"\xff", b"\xff\xff")

    @staticmethod
    def create_command(command: int, option: int) -> bytes:
        """Create a simple telnet command sequence.

        Returns:
            The created command sequence
        """
        return bytes([TelnetCommand.IAC, command, check_option(option)])

    @staticmethod
    def create_subnegotiation(option: int, data: bytes) -> bytes:
        """Create a telnet subnegotiation sequence.

        Any IAC byte in the option or payload is doubled.

        Returns:
            The created subnegotiation sequence
        """
        result = bytearray([TelnetCommand.IAC, TelnetCommand.SB])
        result.extend(TelnetSequence.escape_iac(bytes([check_option(option)])))
        result.extend(TelnetSequence.escape_iac(data))
        result.extend([TelnetCommand.IAC, TelnetCommand.SE])
        return bytes(result)


@dataclass(slots=True, frozen=True)
class Data:
    """A single byte of application data."""

    byte: int

    def to_bytes(self) -> bytes:
        """Encode the event as it would appear on the wire."""
        return TelnetSequence.escape_iac(bytes([self.byte]))


@dataclass(slots=True, frozen=True)
class Command:
    """A two byte control command such as AYT or GA."""

    code: TelnetCommand

    def to_bytes(self) -> bytes:
        """Encode the event as it would appear on the wire."""
        return bytes([TelnetCommand.IAC, self.code])


@dataclass(slots=True, frozen=True)
class Negotiate:
    """An inbound WILL, WONT, DO or DONT for an option."""

    verb: TelnetCommand
    option: int

    def to_bytes(self) -> bytes:
        """Encode the event as it would appear on the wire."""
        return TelnetSequence.create_command(self.verb, self.option)


@dataclass(slots=True, frozen=True)
class Subnegotiation:
    """A complete ``IAC SB <option> ... IAC SE`` block with the escaping removed."""

    option: int
    payload: bytes

    def to_bytes(self) -> bytes:
        """Encode the event as it would appear on the wire."""
        return TelnetSequence.create_subnegotiation(self.option, self.payload)


@dataclass(slots=True, frozen=True)
class OptionChanged:
    """Notification that a side of an option has been switched on or off."""

    side: Side
    option: int
    enabled: bool


type ParserEvent = Data | Command | Negotiate | Subnegotiation
type SessionEvent = Data | Command | Subnegotiation | OptionChanged
