from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from pydantic import ValidationError

from ..config import Settings
from ..errors import InvalidArgument
from ..schemas import (
    EventStatsResult,
    EventTermStatsResult,
    StatsQuery,
    TermField,
    TermStatsQuery,
)
from ..storage.base import AggregationBackend, PartitionCatalog
from ..storage.factory import create_aggregation_backend, create_partition_catalog
from .aggregations import DEFAULT_PRECISION_THRESHOLD, AggregationRequestComposer
from .executor import AggregationExecutor
from .interval import select_interval
from .query import QueryBuilder
from .results import ResultAssembler

logger = logging.getLogger(__name__)


class EventStats:
    """Occurrence and term statistics over the event store.

    Holds no per-request state; one instance may serve concurrent callers as
    long as the backend handle is itself safe to share.
    """

    def __init__(
        self,
        backend: AggregationBackend,
        catalog: PartitionCatalog,
        precision_threshold: int = DEFAULT_PRECISION_THRESHOLD,
        trace: bool = False,
    ) -> None:
        self.query_builder = QueryBuilder(catalog)
        self.composer = AggregationRequestComposer(precision_threshold)
        self.executor = AggregationExecutor(backend, trace=trace)
        self.assembler = ResultAssembler()

    def get_occurrence_stats(
        self,
        utc_start: datetime,
        utc_end: datetime,
        query: Optional[str] = None,
        display_time_offset: Optional[timedelta] = None,
        desired_data_points: int = 100,
    ) -> EventStatsResult:
        try:
            stats_query = StatsQuery(
                utc_start=utc_start,
                utc_end=utc_end,
                query=query,
                display_time_offset=display_time_offset or timedelta(0),
                desired_data_points=desired_data_points,
            )
        except ValidationError as exc:
            raise InvalidArgument(str(exc)) from exc

        built = self.query_builder.build(
            stats_query.query, stats_query.utc_start, stats_query.utc_end
        )
        interval = select_interval(
            built.effective_start, built.effective_end, stats_query.desired_data_points
        )
        logger.debug(
            "Occurrence stats over %d partition(s) with %s buckets",
            len(built.partitions),
            interval.token,
        )
        request = self.composer.occurrence_request(
            built.expression,
            list(built.partitions),
            interval,
            stats_query.display_time_offset,
        )
        root = self.executor.execute(request, label="stats")
        return self.assembler.occurrence_stats(
            root, stats_query, built.effective_start, built.effective_end
        )

    def get_terms_stats(
        self,
        utc_start: datetime,
        utc_end: datetime,
        term: Union[str, TermField],
        query: Optional[str] = None,
        display_time_offset: Optional[timedelta] = None,
        max_terms: int = 25,
        desired_data_points: int = 10,
    ) -> EventTermStatsResult:
        term_field = TermField.parse(term)
        try:
            stats_query = TermStatsQuery(
                utc_start=utc_start,
                utc_end=utc_end,
                query=query,
                display_time_offset=display_time_offset or timedelta(0),
                desired_data_points=desired_data_points,
                term_field=term_field,
                max_terms=max_terms,
            )
        except ValidationError as exc:
            raise InvalidArgument(str(exc)) from exc

        built = self.query_builder.build(
            stats_query.query, stats_query.utc_start, stats_query.utc_end
        )
        interval = select_interval(
            built.effective_start, built.effective_end, stats_query.desired_data_points
        )
        logger.debug(
            "Term stats on %s over %d partition(s) with %s buckets",
            stats_query.term_field.value,
            len(built.partitions),
            interval.token,
        )
        request = self.composer.term_request(
            built.expression,
            list(built.partitions),
            stats_query.term_field,
            stats_query.max_terms,
            interval,
            stats_query.display_time_offset,
        )
        root = self.executor.execute(request, label="term stats")
        return self.assembler.term_stats(
            root, stats_query, built.effective_start, built.effective_end
        )

    async def get_occurrence_stats_async(self, *args, **kwargs) -> EventStatsResult:
        return await asyncio.to_thread(self.get_occurrence_stats, *args, **kwargs)

    async def get_terms_stats_async(self, *args, **kwargs) -> EventTermStatsResult:
        return await asyncio.to_thread(self.get_terms_stats, *args, **kwargs)


def create_event_stats(settings: Settings) -> EventStats:
    return EventStats(
        backend=create_aggregation_backend(settings),
        catalog=create_partition_catalog(settings),
        precision_threshold=settings.stats_precision_threshold,
        trace=settings.stats_trace_queries,
    )
