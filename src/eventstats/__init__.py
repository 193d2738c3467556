"""Event statistics aggregation engine."""

from .errors import BackendQueryFailure, EventStatsError, InvalidArgument
from .schemas import (
    EventStatsResult,
    EventTermStatsResult,
    StatsQuery,
    TermField,
    TermStatsItem,
    TermStatsQuery,
    TimelineItem,
)
from .stats.engine import EventStats, create_event_stats

__all__ = [
    "BackendQueryFailure",
    "EventStatsError",
    "InvalidArgument",
    "EventStats",
    "create_event_stats",
    "EventStatsResult",
    "EventTermStatsResult",
    "StatsQuery",
    "TermField",
    "TermStatsItem",
    "TermStatsQuery",
    "TimelineItem",
]
