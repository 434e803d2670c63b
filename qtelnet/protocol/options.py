"""Per-option negotiation state storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .types import NegotiationState, Side, check_option

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(slots=True)
class OptionState:
    """Negotiation state of both sides of a single option."""

    us: NegotiationState = field(default=NegotiationState.NO)
    him: NegotiationState = field(default=NegotiationState.NO)

    def get(self, side: Side) -> NegotiationState:
        """Return the state of one side."""
        return self.us if side is Side.US else self.him

    def set(self, side: Side, state: NegotiationState) -> None:
        """Replace the state of one side."""
        if side is Side.US:
            self.us = state
        else:
            self.him = state


@dataclass(slots=True)
class OptionStateTable:
    """Option id to ``OptionState`` mapping.

    Entries are created on first reference with both sides at NO and live as
    long as the table does. Reading an option that was never negotiated does
    not create an entry.
    """

    _options: dict[int, OptionState] = field(default_factory=dict)

    def __getitem__(self, option: int) -> OptionState:
        """Return the entry for an option, creating it if needed."""
        entry = self._options.get(option)
        if entry is None:
            entry = self._options[check_option(option)] = OptionState()
        return entry

    def __contains__(self, option: object) -> bool:
        return option in self._options

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._options))

    def __len__(self) -> int:
        return len(self._options)

    def get_state(self, side: Side, option: int) -> NegotiationState:
        """Return the state of one side of an option without creating an entry."""
        entry = self._options.get(check_option(option))
        return entry.get(side) if entry else NegotiationState.NO

    def set_state(self, side: Side, option: int, state: NegotiationState) -> None:
        """Set the state of one side of an option."""
        self[option].set(side, state)

    def is_enabled(self, side: Side, option: int) -> bool:
        """Check if a side of an option is currently in effect."""
        return self.get_state(side, option).enabled

    def enabled_options(self, side: Side) -> list[int]:
        """List the options in effect for one side, in ascending order."""
        return [option for option in self if self._options[option].get(side).enabled]
