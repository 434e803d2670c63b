"""Main entry point for qtelnet."""

from __future__ import annotations

from sys import exit as sys_exit

from .cli import main


def launch() -> None:
    """Launch the qtelnet capture decoder."""
    sys_exit(main())


if __name__ == "__main__":
    launch()
