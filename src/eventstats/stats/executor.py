from __future__ import annotations

import logging
import time

from ..errors import BackendQueryFailure
from ..storage.base import AggregationBackend
from .aggregations import AggregationRequest
from .results import AggregationNode

logger = logging.getLogger(__name__)


class AggregationExecutor:
    """Sends one composed request per call and validates the response."""

    def __init__(self, backend: AggregationBackend, trace: bool = False) -> None:
        self.backend = backend
        self.trace = trace

    def execute(self, request: AggregationRequest, label: str = "stats") -> AggregationNode:
        started = time.monotonic()
        response = self.backend.execute(request)
        if self.trace:
            logger.info(
                "Retrieved %s from %d partition(s) in %.1fms",
                label,
                len(request.partitions),
                (time.monotonic() - started) * 1000,
            )
        if not response.valid:
            logger.error("Retrieving %s failed: %s", label, response.error)
            raise BackendQueryFailure(f"Retrieving {label} failed", response.error)
        return AggregationNode(response.aggregations or {})
