"""Adaptive histogram bucket sizing."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import NamedTuple

_UNITS = (
    ("d", timedelta(days=1)),
    ("h", timedelta(hours=1)),
    ("m", timedelta(minutes=1)),
)


class Interval(NamedTuple):
    unit: str
    width: timedelta

    @property
    def token(self) -> str:
        """Backend interval string, e.g. ``14m`` or ``1d``."""
        size = dict(_UNITS)[self.unit]
        return f"{self.width // size}{self.unit}"


def _round_to(value: timedelta, unit: timedelta) -> timedelta:
    # Round half up on whole microseconds, never below one unit.
    unit_us = unit // timedelta(microseconds=1)
    value_us = max(value // timedelta(microseconds=1), 0)
    count = max((value_us + unit_us // 2) // unit_us, 1)
    return unit * count


def select_interval(
    utc_start: datetime,
    utc_end: datetime,
    desired_data_points: int = 100,
) -> Interval:
    """Pick a bucket width giving roughly *desired_data_points* buckets.

    Widths of at least a day are rounded to whole days, at least an hour to
    whole hours, and anything shorter to whole minutes.
    """
    raw = (utc_end - utc_start) / max(int(desired_data_points), 1)
    for unit, size in _UNITS[:-1]:
        if raw >= size:
            return Interval(unit, _round_to(raw, size))
    unit, size = _UNITS[-1]
    return Interval(unit, _round_to(raw, size))
