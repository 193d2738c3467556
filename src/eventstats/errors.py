"""Error taxonomy for the stats engine.

Zero matching documents is not an error: it yields a zero-valued report.
"""

from __future__ import annotations

from typing import Optional


class EventStatsError(Exception):
    """Base class for every failure raised by the stats engine."""


class InvalidArgument(EventStatsError, ValueError):
    """A caller-supplied argument was rejected before any backend call."""


class BackendQueryFailure(EventStatsError, RuntimeError):
    """The search backend reported an invalid or failed response."""

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        self.detail = detail
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
