"""Telnet option negotiation using the Q Method (RFC 1143).

Each side of each option is tracked as one of six states (see
``NegotiationState``). The transition rules below are RFC 1143 section 7,
written once for "the peer asked to enable" and "the peer asked to disable"
and applied to either side: WILL/WONT drive the peer's side and are answered
with DO/DONT, DO/DONT drive our side and are answered with WILL/WONT.

Because a request is only ever sent from NO or YES, and a request made while
another is outstanding only flips the queue bit, there is never more than one
message in flight for a given option and side. This is what stops the
negotiation loops naive "answer everything" implementations get into.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, NamedTuple

from .options import OptionStateTable
from .types import (
    NegotiationState,
    OptionChanged,
    Side,
    TelnetCommand,
    TelnetOption,
    TelnetSequence,
    check_option,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    type AcceptPolicy = Callable[[Side, int], bool]

log = getLogger(__name__)

NO = NegotiationState.NO
YES = NegotiationState.YES
WANTNO_EMPTY = NegotiationState.WANTNO_EMPTY
WANTNO_OPPOSITE = NegotiationState.WANTNO_OPPOSITE
WANTYES_EMPTY = NegotiationState.WANTYES_EMPTY
WANTYES_OPPOSITE = NegotiationState.WANTYES_OPPOSITE


class NegotiationResult(NamedTuple):
    """Outcome of processing one negotiation message."""

    changed: OptionChanged | None = None
    outbound: bytes = b""


@dataclass(slots=True)
class TelnetPolicy:
    """Decide which peer requests to enable an option we agree to.

    Options are refused unless listed for the side in question.
    """

    accept_us: frozenset[int] = field(default_factory=frozenset)
    accept_him: frozenset[int] = field(default_factory=frozenset)

    def __call__(self, side: Side, option: int) -> bool:
        """Check if we should accept an option being enabled for a side.

        Returns:
            True if we should accept the option, False otherwise
        """
        if side is Side.US:
            return option in self.accept_us
        return option in self.accept_him

    @classmethod
    def from_options(cls, options: Iterable[int]) -> TelnetPolicy:
        """Build a policy accepting the same options on both sides.

        Returns:
            The policy
        """
        accepted = frozenset(check_option(int(option)) for option in options)
        return cls(accept_us=accepted, accept_him=accepted)

    @classmethod
    def common(cls) -> TelnetPolicy:
        """Build a policy for a typical line mode client.

        We will suppress go-ahead and send binary, and let the server echo,
        suppress go-ahead and send binary.

        Returns:
            The policy
        """
        return cls(
            accept_us=frozenset({TelnetOption.SGA, TelnetOption.BINARY}),
            accept_him=frozenset({TelnetOption.SGA, TelnetOption.ECHO, TelnetOption.BINARY}),
        )


def _refuse_all(side: Side, option: int) -> bool:  # noqa: ARG001
    return False


@dataclass(slots=True)
class TelnetNegotiator:
    """Apply the Q Method to inbound negotiation and local requests.

    The negotiator never does I/O: every method returns the bytes that need
    to be written to the peer, which may be empty.
    """

    table: OptionStateTable = field(default_factory=OptionStateTable)
    policy: AcceptPolicy = field(default=_refuse_all)

    def receive(self, verb: int, option: int) -> NegotiationResult:
        """Process an inbound WILL, WONT, DO or DONT.

        Args:
            verb: The received command
            option: The option being negotiated

        Returns:
            The state change notification (if any) and the bytes to send back

        Raises:
            ValueError: If the verb is not a negotiation command or the option is invalid
        """
        if not TelnetCommand.is_negotiation(verb):
            msg = f"Not a negotiation command: {verb}"
            raise ValueError(msg)
        check_option(option)
        side = Side.from_verb(verb)
        log.debug("Received %s %s", TelnetCommand(verb).label, TelnetOption.describe(option))

        if TelnetCommand.is_enable(verb):
            return self._receive_enable(side, option)
        return self._receive_disable(side, option)

    def _receive_enable(self, side: Side, option: int) -> NegotiationResult:
        """Handle WILL (peer's side) or DO (our side)."""
        match self.table[option].get(side):
            case NegotiationState.NO:
                if self.policy(side, option):
                    return self._transition(side, option, YES, send=True)
                return self._transition(side, option, NO, send=False)
            case NegotiationState.YES:
                # Already enabled, answering would start a loop
                return NegotiationResult()
            case NegotiationState.WANTNO_EMPTY:
                self._inconsistent(side, option)
                return self._transition(side, option, NO)
            case NegotiationState.WANTNO_OPPOSITE:
                self._inconsistent(side, option)
                return self._transition(side, option, YES)
            case NegotiationState.WANTYES_EMPTY:
                return self._transition(side, option, YES)
            case NegotiationState.WANTYES_OPPOSITE:
                # Enabled as asked, now replay the queued disable
                return self._transition(side, option, WANTNO_EMPTY, send=False)

    def _receive_disable(self, side: Side, option: int) -> NegotiationResult:
        """Handle WONT (peer's side) or DONT (our side)."""
        match self.table[option].get(side):
            case NegotiationState.NO:
                return NegotiationResult()
            case NegotiationState.YES:
                # Disabling must always be acknowledged
                return self._transition(side, option, NO, send=False)
            case NegotiationState.WANTNO_EMPTY:
                return self._transition(side, option, NO)
            case NegotiationState.WANTNO_OPPOSITE:
                # Disabled as asked, now replay the queued enable
                return self._transition(side, option, WANTYES_EMPTY, send=True)
            case NegotiationState.WANTYES_EMPTY | NegotiationState.WANTYES_OPPOSITE:
                return self._transition(side, option, NO)

    def request_enable(self, side: Side, option: int) -> bytes:
        """Ask for a side of an option to be enabled.

        Args:
            side: US to offer the option ourselves, HIM to ask the peer to use it
            option: The option to enable

        Returns:
            The request to send, or empty bytes if none is needed yet
        """
        check_option(option)
        match self.table[option].get(side):
            case NegotiationState.NO:
                return self._transition(side, option, WANTYES_EMPTY, send=True).outbound
            case NegotiationState.WANTNO_EMPTY:
                self.table.set_state(side, option, WANTNO_OPPOSITE)
            case NegotiationState.WANTYES_OPPOSITE:
                self.table.set_state(side, option, WANTYES_EMPTY)
            case state:
                self._ignored(side, option, state, "enable")
        return b""

    def request_disable(self, side: Side, option: int) -> bytes:
        """Ask for a side of an option to be disabled.

        Args:
            side: US to stop using the option ourselves, HIM to ask the peer to stop
            option: The option to disable

        Returns:
            The request to send, or empty bytes if none is needed yet
        """
        check_option(option)
        match self.table[option].get(side):
            case NegotiationState.YES:
                return self._transition(side, option, WANTNO_EMPTY, send=False).outbound
            case NegotiationState.WANTYES_EMPTY:
                self.table.set_state(side, option, WANTYES_OPPOSITE)
            case NegotiationState.WANTNO_OPPOSITE:
                self.table.set_state(side, option, WANTNO_EMPTY)
            case state:
                self._ignored(side, option, state, "disable")
        return b""

    def _transition(
        self, side: Side, option: int, state: NegotiationState, send: bool | None = None
    ) -> NegotiationResult:
        """Move a side of an option to a new state.

        Args:
            side: The side being updated
            option: The option being updated
            state: The new state
            send: None to send nothing, otherwise send the enable (True) or
                disable (False) verb for the side

        Returns:
            The notification if the option was switched on or off, and the bytes to send
        """
        entry = self.table[option]
        previous = entry.get(side)
        entry.set(side, state)

        changed = None
        if previous.enabled != state.enabled:
            changed = OptionChanged(side, option, state.enabled)
            log.debug(
                "%s %s %s",
                "Enabled" if state.enabled else "Disabled",
                "our" if side is Side.US else "their",
                TelnetOption.describe(option),
            )

        outbound = b""
        if send is not None:
            verb = side.request_verb(send)
            outbound = TelnetSequence.create_command(verb, option)
            log.debug("Sending %s %s", verb.label, TelnetOption.describe(option))
        return NegotiationResult(changed, outbound)

    @staticmethod
    def _inconsistent(side: Side, option: int) -> None:
        answer = TelnetCommand.WILL if side is Side.HIM else TelnetCommand.DO
        log.warning(
            "%s answered by %s for %s",
            side.request_verb(False).label,
            answer.label,
            TelnetOption.describe(option),
        )

    @staticmethod
    def _ignored(side: Side, option: int, state: NegotiationState, request: str) -> None:
        reason = {
            YES: "already enabled",
            NO: "already disabled",
            WANTNO_OPPOSITE: "already queued",
            WANTYES_OPPOSITE: "already queued",
        }.get(state, "already negotiating")
        log.debug(
            "Not sending %s request for %s %s: %s",
            request,
            "our" if side is Side.US else "their",
            TelnetOption.describe(option),
            reason,
        )
