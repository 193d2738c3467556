from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..stats.aggregations import AggregationRequest


@dataclass
class AggregationResponse:
    """What a backend hands back for one aggregation request.

    ``aggregations`` is a tree of named nodes. Bucketing nodes carry
    ``buckets`` (each with ``key`` and ``doc_count``), single-bucket nodes carry
    ``doc_count`` and their sub-aggregations inline, and reducers carry a
    ``value`` that may be ``None``.
    """

    valid: bool = True
    error: Optional[str] = None
    aggregations: Dict[str, Any] = field(default_factory=dict)


class AggregationBackend(ABC):
    @abstractmethod
    def execute(self, request: AggregationRequest) -> AggregationResponse:
        raise NotImplementedError


class PartitionCatalog(ABC):
    @abstractmethod
    def partitions_overlapping(self, utc_start: datetime, utc_end: datetime) -> List[str]:
        raise NotImplementedError

    def effective_range(
        self, utc_start: datetime, utc_end: datetime
    ) -> Tuple[datetime, datetime]:
        """Bounds actually covered by the catalog; identity unless clamped."""
        return utc_start, utc_end
