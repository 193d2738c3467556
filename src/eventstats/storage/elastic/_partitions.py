from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from ..base import PartitionCatalog
from ._helpers import _add_months, _iter_months, _month_start

logger = logging.getLogger(__name__)


class MonthlyIndexCatalog(PartitionCatalog):
    """Event indices sharded by calendar month: ``<prefix>-YYYYMM``.

    With a retention window, months older than the window hold no data and
    the effective start is clamped to the first retained month.
    """

    def __init__(
        self,
        prefix: str,
        retention_months: int = 0,
        max_partitions: int = 36,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.prefix = prefix
        self.retention_months = max(int(retention_months), 0)
        self.max_partitions = max(int(max_partitions), 1)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def index_name(self, month: datetime) -> str:
        return f"{self.prefix}-{month:%Y%m}"

    def retention_floor(self) -> Optional[datetime]:
        if not self.retention_months:
            return None
        return _add_months(_month_start(self._clock()), -(self.retention_months - 1))

    def effective_range(
        self, utc_start: datetime, utc_end: datetime
    ) -> Tuple[datetime, datetime]:
        floor = self.retention_floor()
        if floor is not None and utc_start < floor:
            return floor, utc_end
        return utc_start, utc_end

    def partitions_overlapping(self, utc_start: datetime, utc_end: datetime) -> List[str]:
        if utc_start > utc_end:
            return []
        months = (
            (utc_end.year - utc_start.year) * 12
            + (utc_end.month - utc_start.month)
            + 1
        )
        if months > self.max_partitions:
            logger.debug(
                "Range spans %d months (> %d); querying all %s indices",
                months,
                self.max_partitions,
                self.prefix,
            )
            return [f"{self.prefix}-*"]
        return [self.index_name(month) for month in _iter_months(utc_start, utc_end)]
