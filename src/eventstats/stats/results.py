"""Turns a generic, possibly sparse aggregation tree into typed reports."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional

from ..schemas import (
    EventStatsResult,
    EventTermStatsResult,
    StatsQuery,
    TermStatsItem,
    TermStatsQuery,
    TimelineItem,
)
from ..utils.datetime import epoch_ms_to_datetime, hours_between, utc_to_local
from .aggregations import (
    FILTERED,
    FIRST_OCCURRENCE,
    LAST_OCCURRENCE,
    NEW,
    TERMS,
    TIMELINE,
    TIMELINE_NEW,
    TIMELINE_UNIQUE,
    UNIQUE,
)


class AggregationNode:
    """Read-only view over one named node of an aggregation response.

    Missing children read as empty nodes, so a sparse response walks the
    same way as a complete one.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data = data if isinstance(data, dict) else {}

    def child(self, name: str) -> "AggregationNode":
        return AggregationNode(self._data.get(name))

    @property
    def key(self) -> Any:
        return self._data.get("key")

    @property
    def doc_count(self) -> int:
        return int(self._data.get("doc_count") or 0)

    @property
    def value(self) -> Optional[float]:
        """Scalar reducer value; ``None`` when the reducer saw no data."""
        value = self._data.get("value")
        if value is None:
            return None
        try:
            value = float(value)
        except (TypeError, ValueError):
            return None
        if math.isinf(value) or math.isnan(value):
            return None
        return value

    def buckets(self) -> Iterator["AggregationNode"]:
        for bucket in self._data.get("buckets") or []:
            yield AggregationNode(bucket)


def _unique(node: AggregationNode) -> int:
    value = node.value
    return int(math.floor(value)) if value is not None else 0


def _new(node: AggregationNode) -> int:
    for bucket in node.buckets():
        return bucket.doc_count
    return 0


def _instant(node: AggregationNode, offset: timedelta) -> Optional[datetime]:
    value = node.value
    if value is None:
        return None
    utc = epoch_ms_to_datetime(value)
    return utc_to_local(utc, offset) if utc is not None else None


class ResultAssembler:
    def _timeline(
        self, histogram: AggregationNode, offset: timedelta
    ) -> List[TimelineItem]:
        items: List[TimelineItem] = []
        for bucket in histogram.buckets():
            bucket_start = epoch_ms_to_datetime(bucket.key)
            if bucket_start is None:
                continue
            items.append(
                TimelineItem(
                    date=utc_to_local(bucket_start, offset),
                    total=bucket.doc_count,
                    unique=_unique(bucket.child(TIMELINE_UNIQUE)),
                    new=_new(bucket.child(TIMELINE_NEW)),
                )
            )
        items.sort(key=lambda item: item.date)
        return items

    def occurrence_stats(
        self,
        root: AggregationNode,
        query: StatsQuery,
        effective_start: datetime,
        effective_end: datetime,
    ) -> EventStatsResult:
        offset = query.display_time_offset
        filtered = root.child(FILTERED)
        timeline = self._timeline(filtered.child(TIMELINE), offset)

        start = timeline[0].date if timeline else utc_to_local(effective_start, offset)
        end = utc_to_local(effective_end, offset)
        hours = hours_between(start, end)
        total = filtered.doc_count

        stats = EventStatsResult(
            total=total,
            unique=_unique(filtered.child(UNIQUE)),
            new=_new(filtered.child(NEW)),
            timeline=timeline,
            start=start,
            end=end,
            avg_per_hour=total / hours if hours > 0 else 0.0,
        )
        if not timeline:
            return stats

        stats.first_occurrence = _instant(filtered.child(FIRST_OCCURRENCE), offset)
        stats.last_occurrence = _instant(filtered.child(LAST_OCCURRENCE), offset)
        return stats

    def term_stats(
        self,
        root: AggregationNode,
        query: TermStatsQuery,
        effective_start: datetime,
        effective_end: datetime,
    ) -> EventTermStatsResult:
        offset = query.display_time_offset
        filtered = root.child(FILTERED)

        terms: List[TermStatsItem] = []
        for bucket in filtered.child(TERMS).buckets():
            if len(terms) >= query.max_terms:
                break
            terms.append(
                TermStatsItem(
                    term=str(bucket.key),
                    total=bucket.doc_count,
                    unique=_unique(bucket.child(UNIQUE)),
                    new=_new(bucket.child(NEW)),
                    first_occurrence=_instant(bucket.child(FIRST_OCCURRENCE), offset),
                    last_occurrence=_instant(bucket.child(LAST_OCCURRENCE), offset),
                    timeline=self._timeline(bucket.child(TIMELINE), offset),
                )
            )

        return EventTermStatsResult(
            total=filtered.doc_count,
            terms=terms,
            start=utc_to_local(effective_start, offset),
            end=utc_to_local(effective_end, offset),
        )
