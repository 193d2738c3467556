"""Tests for eventstats.utils.datetime — UTC and display offset helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from eventstats.utils.datetime import (
    epoch_ms_to_datetime,
    format_offset,
    hours_between,
    local_to_utc,
    parse_iso_datetime,
    to_utc,
    utc_to_local,
)


# ── parse_iso_datetime ──────────────────────────────────────────


class TestParseIsoDatetime:
    def test_basic_iso_z(self):
        dt = parse_iso_datetime("2026-02-12T10:30:00Z")
        assert dt == datetime(2026, 2, 12, 10, 30, tzinfo=timezone.utc)

    def test_iso_with_offset(self):
        dt = parse_iso_datetime("2026-06-15T14:00:00+02:00")
        assert dt is not None
        assert dt.tzinfo == timezone.utc
        assert dt.hour == 12  # 14:00+02:00 → 12:00 UTC

    def test_naive_treated_as_utc(self):
        dt = parse_iso_datetime("2026-01-01T00:00:00")
        assert dt is not None
        assert dt.tzinfo == timezone.utc

    def test_empty_and_invalid_return_none(self):
        assert parse_iso_datetime(None) is None
        assert parse_iso_datetime("   ") is None
        assert parse_iso_datetime("not-a-date") is None


# ── epoch_ms_to_datetime ────────────────────────────────────────


class TestEpochMsToDatetime:
    def test_float_reducer_value(self):
        dt = epoch_ms_to_datetime(1777593600000.0)
        assert dt == datetime(2026, 5, 1, tzinfo=timezone.utc)

    def test_none_and_garbage(self):
        assert epoch_ms_to_datetime(None) is None
        assert epoch_ms_to_datetime("not-a-number") is None


# ── display offsets ─────────────────────────────────────────────


class TestDisplayOffsets:
    def test_utc_to_local_shifts_wall_clock(self):
        utc = datetime(2026, 5, 1, 23, 0, tzinfo=timezone.utc)
        assert utc_to_local(utc, timedelta(hours=2)) == datetime(2026, 5, 2, 1, 0)

    def test_utc_to_local_converts_aware_input_first(self):
        eastern = timezone(timedelta(hours=-5))
        dt = datetime(2026, 1, 1, 12, tzinfo=eastern)
        assert utc_to_local(dt, timedelta(0)) == datetime(2026, 1, 1, 17)

    def test_local_to_utc_round_trip(self):
        offset = timedelta(hours=-7)
        local = datetime(2026, 3, 1, 8, 0)
        utc = local_to_utc(local, offset)
        assert utc == datetime(2026, 3, 1, 15, 0, tzinfo=timezone.utc)
        assert utc_to_local(utc, offset) == local

    @pytest.mark.parametrize("sentinel", [datetime.min, datetime.max])
    def test_local_to_utc_passes_sentinels_through(self, sentinel):
        assert local_to_utc(sentinel, timedelta(hours=3)) is sentinel

    @pytest.mark.parametrize(
        "offset,expected",
        [
            (timedelta(0), "+00:00"),
            (timedelta(hours=2), "+02:00"),
            (timedelta(hours=-5, minutes=-30), "-05:30"),
            (timedelta(hours=12, minutes=45), "+12:45"),
        ],
    )
    def test_format_offset(self, offset, expected):
        assert format_offset(offset) == expected


def test_hours_between():
    start = datetime(2026, 1, 1)
    assert hours_between(start, start + timedelta(minutes=90)) == 1.5


def test_to_utc_passthrough():
    utc_dt = datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
    assert to_utc(utc_dt) is utc_dt
