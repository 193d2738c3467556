"""Elasticsearch storage backend for event aggregations."""

from ._backend import ElasticAggregationBackend, render_aggregation, render_aggregations
from ._partitions import MonthlyIndexCatalog

__all__ = [
    "ElasticAggregationBackend",
    "MonthlyIndexCatalog",
    "render_aggregation",
    "render_aggregations",
]
