from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError


def _create_client(
    hosts: List[str],
    username: Optional[str],
    password: Optional[str],
    verify_certs: bool,
    timeout: float = 60.0,
) -> Elasticsearch:
    kwargs: Dict[str, Any] = {
        "hosts": hosts,
        "verify_certs": verify_certs,
        "request_timeout": timeout,
    }
    if username:
        kwargs["basic_auth"] = (username, password or "")
    return Elasticsearch(**kwargs)


def _month_start(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(
        day=1, hour=0, minute=0, second=0, microsecond=0
    )


def _add_months(value: datetime, months: int) -> datetime:
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    return value.replace(year=year, month=month + 1)


def _iter_months(utc_start: datetime, utc_end: datetime) -> Iterator[datetime]:
    cursor = _month_start(utc_start)
    while cursor <= utc_end:
        yield cursor
        cursor = _add_months(cursor, 1)


def _api_error_reason(exc: ApiError) -> str:
    """Pull the root-cause reason out of an Elasticsearch error body."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            causes = error.get("root_cause") or []
            if causes and isinstance(causes[0], dict) and causes[0].get("reason"):
                return str(causes[0]["reason"])
            if error.get("reason"):
                return str(error["reason"])
        elif error:
            return str(error)
    return str(getattr(exc, "message", "") or exc)


def _transport_error_reason(exc: TransportError) -> str:
    """Transport message plus the first underlying cause, if any."""
    message = str(getattr(exc, "message", "") or "") or str(exc)
    errors = getattr(exc, "errors", None) or ()
    if errors:
        message = f"{message} (caused by {errors[0]!r})"
    return f"{type(exc).__name__}: {message}"


def _shard_failure_reason(response: Dict[str, Any]) -> Optional[str]:
    shards = response.get("_shards") or {}
    failures = shards.get("failures") or []
    if not failures:
        return None
    first = failures[0] if isinstance(failures[0], dict) else {}
    reason = first.get("reason") or {}
    if isinstance(reason, dict):
        return str(reason.get("reason") or reason.get("type") or "shard failure")
    return str(reason or "shard failure")
