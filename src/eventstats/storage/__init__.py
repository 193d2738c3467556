from .base import AggregationBackend, AggregationResponse, PartitionCatalog
from .elastic import ElasticAggregationBackend, MonthlyIndexCatalog
from .factory import create_aggregation_backend, create_partition_catalog

__all__ = [
    "AggregationBackend",
    "AggregationResponse",
    "PartitionCatalog",
    "ElasticAggregationBackend",
    "MonthlyIndexCatalog",
    "create_aggregation_backend",
    "create_partition_catalog",
]
