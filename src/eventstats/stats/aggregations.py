"""Backend-neutral aggregation request tree and its composition.

The tree is a set of small tagged nodes. A backend adapter renders it into
its own query DSL; nothing here knows about a particular search product.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Tuple, Union

from ..schemas import DATE_FIELD, NEW_FLAG_FIELD, STACK_FIELD, TermField
from .interval import Interval

# Names of the nodes in the composed tree. The assembler reads them back.
FILTERED = "filtered"
TERMS = "terms"
TIMELINE = "timeline"
UNIQUE = "unique"
NEW = "new"
TIMELINE_UNIQUE = "tl_unique"
TIMELINE_NEW = "tl_new"
FIRST_OCCURRENCE = "first_occurrence"
LAST_OCCURRENCE = "last_occurrence"

DEFAULT_PRECISION_THRESHOLD = 1000


@dataclass(frozen=True)
class Cardinality:
    field: str
    precision_threshold: int = DEFAULT_PRECISION_THRESHOLD


@dataclass(frozen=True)
class Min:
    field: str


@dataclass(frozen=True)
class Max:
    field: str


@dataclass(frozen=True)
class NewFlagSplit:
    """Terms split on the first-occurrence flag, keeping only the "new" bucket."""

    field: str = NEW_FLAG_FIELD
    exclude: str = "false"


@dataclass(frozen=True)
class DateHistogram:
    field: str
    interval: Interval
    time_zone: timedelta = timedelta(0)
    min_doc_count: int = 0
    aggs: Dict[str, "Aggregation"] = field(default_factory=dict)


@dataclass(frozen=True)
class TermsHistogram:
    field: str
    size: int
    min_doc_count: int = 0
    aggs: Dict[str, "Aggregation"] = field(default_factory=dict)


@dataclass(frozen=True)
class Filter:
    expression: Dict[str, Any]
    aggs: Dict[str, "Aggregation"] = field(default_factory=dict)


Aggregation = Union[
    Filter, DateHistogram, TermsHistogram, Cardinality, Min, Max, NewFlagSplit
]


@dataclass(frozen=True)
class AggregationRequest:
    """A single round trip: named root aggregations over a set of partitions."""

    aggs: Dict[str, Aggregation]
    partitions: Tuple[str, ...] = ()


class AggregationRequestComposer:
    def __init__(self, precision_threshold: int = DEFAULT_PRECISION_THRESHOLD) -> None:
        self.precision_threshold = precision_threshold

    def _unique(self) -> Cardinality:
        return Cardinality(STACK_FIELD, self.precision_threshold)

    def _timeline(self, interval: Interval, offset: timedelta) -> DateHistogram:
        return DateHistogram(
            field=DATE_FIELD,
            interval=interval,
            time_zone=offset,
            aggs={
                TIMELINE_UNIQUE: self._unique(),
                TIMELINE_NEW: NewFlagSplit(),
            },
        )

    def _summary_reducers(self) -> Dict[str, Aggregation]:
        return {
            UNIQUE: self._unique(),
            NEW: NewFlagSplit(),
            FIRST_OCCURRENCE: Min(DATE_FIELD),
            LAST_OCCURRENCE: Max(DATE_FIELD),
        }

    def occurrence_request(
        self,
        expression: Dict[str, Any],
        partitions: List[str],
        interval: Interval,
        offset: timedelta,
    ) -> AggregationRequest:
        aggs: Dict[str, Aggregation] = {TIMELINE: self._timeline(interval, offset)}
        aggs.update(self._summary_reducers())
        return AggregationRequest(
            aggs={FILTERED: Filter(expression, aggs)},
            partitions=tuple(partitions),
        )

    def term_request(
        self,
        expression: Dict[str, Any],
        partitions: List[str],
        term_field: TermField,
        max_terms: int,
        interval: Interval,
        offset: timedelta,
    ) -> AggregationRequest:
        term_field = TermField.parse(term_field)
        per_term: Dict[str, Aggregation] = {TIMELINE: self._timeline(interval, offset)}
        per_term.update(self._summary_reducers())
        terms = TermsHistogram(field=term_field.value, size=max_terms, aggs=per_term)
        return AggregationRequest(
            aggs={FILTERED: Filter(expression, {TERMS: terms})},
            partitions=tuple(partitions),
        )
