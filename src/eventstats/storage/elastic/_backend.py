from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from elasticsearch import ApiError, TransportError

from ...stats.aggregations import (
    Aggregation,
    AggregationRequest,
    Cardinality,
    DateHistogram,
    Filter,
    Max,
    Min,
    NewFlagSplit,
    TermsHistogram,
)
from ...utils.datetime import format_offset
from ..base import AggregationBackend, AggregationResponse
from ._helpers import (
    _api_error_reason,
    _create_client,
    _shard_failure_reason,
    _transport_error_reason,
)

logger = logging.getLogger(__name__)


def render_aggregation(node: Aggregation) -> Dict[str, Any]:
    """Render one tagged aggregation node into the Elasticsearch ``aggs`` DSL."""
    if isinstance(node, Filter):
        body: Dict[str, Any] = {"filter": node.expression}
        children = node.aggs
    elif isinstance(node, DateHistogram):
        body = {
            "date_histogram": {
                "field": node.field,
                "fixed_interval": node.interval.token,
                "min_doc_count": node.min_doc_count,
                "time_zone": format_offset(node.time_zone),
            }
        }
        children = node.aggs
    elif isinstance(node, TermsHistogram):
        body = {
            "terms": {
                "field": node.field,
                "size": node.size,
                "min_doc_count": node.min_doc_count,
            }
        }
        children = node.aggs
    elif isinstance(node, Cardinality):
        return {
            "cardinality": {
                "field": node.field,
                "precision_threshold": node.precision_threshold,
            }
        }
    elif isinstance(node, Min):
        return {"min": {"field": node.field}}
    elif isinstance(node, Max):
        return {"max": {"field": node.field}}
    elif isinstance(node, NewFlagSplit):
        return {"terms": {"field": node.field, "exclude": [node.exclude]}}
    else:
        raise TypeError(f"Unsupported aggregation node: {type(node).__name__}")

    if children:
        body["aggs"] = render_aggregations(children)
    return body


def render_aggregations(aggs: Dict[str, Aggregation]) -> Dict[str, Any]:
    return {name: render_aggregation(node) for name, node in aggs.items()}


class ElasticAggregationBackend(AggregationBackend):
    """Runs aggregation requests as a single ``size=0`` search."""

    def __init__(
        self,
        hosts: List[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        verify_certs: bool = True,
        timeout: float = 60.0,
        trace: bool = False,
    ) -> None:
        if not hosts:
            raise ValueError("At least one Elasticsearch host is required")
        self.client = _create_client(hosts, username, password, verify_certs, timeout)
        self.trace = trace

    def build_search(self, request: AggregationRequest) -> Dict[str, Any]:
        return {
            "index": ",".join(request.partitions),
            "size": 0,
            "ignore_unavailable": True,
            "allow_no_indices": True,
            "aggs": render_aggregations(request.aggs),
        }

    def execute(self, request: AggregationRequest) -> AggregationResponse:
        if not request.partitions:
            logger.debug("No partitions overlap the requested range")
            return AggregationResponse()

        params = self.build_search(request)
        if self.trace:
            logger.debug(
                "ES aggregation request on %s: %s",
                params["index"],
                json.dumps(params["aggs"], default=str),
            )
        try:
            response = self.client.search(**params)
        except ApiError as exc:
            return AggregationResponse(valid=False, error=_api_error_reason(exc))
        except TransportError as exc:
            return AggregationResponse(valid=False, error=_transport_error_reason(exc))

        body: Dict[str, Any] = getattr(response, "body", response)
        if self.trace:
            logger.debug("ES aggregation took %sms", body.get("took"))
        if body.get("timed_out"):
            return AggregationResponse(valid=False, error="search timed out")
        shard_error = _shard_failure_reason(body)
        if shard_error:
            return AggregationResponse(valid=False, error=shard_error)
        return AggregationResponse(aggregations=body.get("aggregations") or {})
