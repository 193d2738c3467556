"""Shared datetime helpers for UTC normalisation and display offsets.

Query bounds are always UTC-aware. Values handed back to callers are naive
wall-clock datetimes: the UTC instant shifted by the display offset.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional


def to_utc(dt: datetime) -> datetime:
    """Ensure a datetime is UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (with or without ``Z`` suffix) to UTC.

    Returns *None* on invalid or empty input rather than raising.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(text))
    except (ValueError, TypeError):
        return None


def epoch_ms_to_datetime(epoch_ms: Any) -> Optional[datetime]:
    """Convert epoch-milliseconds (histogram keys, min/max values) to UTC."""
    if epoch_ms is None:
        return None
    try:
        ts = float(epoch_ms) / 1000.0
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (ValueError, TypeError, OSError, OverflowError):
        return None


def utc_to_local(utc_dt: datetime, offset: timedelta) -> datetime:
    """Shift a UTC instant into naive wall-clock time at *offset*."""
    return to_utc(utc_dt).replace(tzinfo=None) + offset


def local_to_utc(local_dt: datetime, offset: timedelta) -> datetime:
    """Inverse of :func:`utc_to_local`.

    ``datetime.min`` and ``datetime.max`` are open-ended sentinels and
    pass through unchanged.
    """
    naive = local_dt.replace(tzinfo=None)
    if naive in (datetime.min, datetime.max):
        return local_dt
    return (naive - offset).replace(tzinfo=timezone.utc)


def format_offset(offset: timedelta) -> str:
    """Render an offset as the ``+HH:MM`` / ``-HH:MM`` zone token."""
    sign = "-" if offset < timedelta(0) else "+"
    minutes = int(abs(offset).total_seconds()) // 60
    hours, minutes = divmod(minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0
