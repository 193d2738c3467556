from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..schemas import DATE_FIELD
from ..storage.base import PartitionCatalog
from ..utils.datetime import to_utc


@dataclass(frozen=True)
class BuiltQuery:
    expression: Dict[str, Any]
    partitions: Tuple[str, ...]
    effective_start: datetime
    effective_end: datetime


def date_range_clause(
    utc_start: datetime, utc_end: datetime, field: str = DATE_FIELD
) -> Dict[str, Any]:
    return {
        "range": {
            field: {
                "gte": to_utc(utc_start).isoformat(),
                "lte": to_utc(utc_end).isoformat(),
            }
        }
    }


class QueryBuilder:
    """Combines the caller's free-text filter with the UTC date bound."""

    def __init__(self, catalog: PartitionCatalog) -> None:
        self.catalog = catalog

    def build(
        self,
        query: Optional[str],
        utc_start: datetime,
        utc_end: datetime,
    ) -> BuiltQuery:
        start, end = self.catalog.effective_range(to_utc(utc_start), to_utc(utc_end))
        filters: List[Dict[str, Any]] = []
        if query and query.strip():
            # Opaque to us; the backend parses it.
            filters.append(
                {"query_string": {"query": query, "default_operator": "AND"}}
            )
        filters.append(date_range_clause(start, end))
        return BuiltQuery(
            expression={"bool": {"filter": filters}},
            partitions=tuple(self.catalog.partitions_overlapping(start, end)),
            effective_start=start,
            effective_end=end,
        )
