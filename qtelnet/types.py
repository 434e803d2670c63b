"""Type definitions shared by the qtelnet command line tools."""

from __future__ import annotations

type JSON_TYPE = bool | dict[str, JSON_TYPE] | float | int | list[JSON_TYPE] | str | None
