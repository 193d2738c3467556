from __future__ import annotations

from typing import TYPE_CHECKING

from .base import AggregationBackend, PartitionCatalog
from .elastic import ElasticAggregationBackend, MonthlyIndexCatalog

if TYPE_CHECKING:
    from ..config import Settings


def create_aggregation_backend(settings: "Settings") -> AggregationBackend:
    return ElasticAggregationBackend(
        hosts=settings.elastic_hosts_list,
        username=settings.elastic_user,
        password=settings.elastic_password,
        verify_certs=settings.elastic_verify_certs,
        timeout=settings.elastic_timeout_seconds,
        trace=settings.stats_trace_queries,
    )


def create_partition_catalog(settings: "Settings") -> PartitionCatalog:
    return MonthlyIndexCatalog(
        prefix=settings.events_index_prefix,
        retention_months=settings.events_retention_months,
        max_partitions=settings.events_max_partitions,
    )
