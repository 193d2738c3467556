from __future__ import annotations

from datetime import datetime, timedelta, timezone

from eventstats.schemas import StatsQuery, TermField, TermStatsQuery
from eventstats.stats.results import AggregationNode, ResultAssembler

START = datetime(2026, 5, 1, tzinfo=timezone.utc)
END = datetime(2026, 5, 2, tzinfo=timezone.utc)
H0 = 1777593600000  # 2026-05-01T00:00:00Z in epoch ms
HOUR_MS = 3600 * 1000


def _query(offset=timedelta(0)) -> StatsQuery:
    return StatsQuery(utc_start=START, utc_end=END, display_time_offset=offset)


def _term_query(offset=timedelta(0), max_terms=25) -> TermStatsQuery:
    return TermStatsQuery(
        utc_start=START,
        utc_end=END,
        display_time_offset=offset,
        term_field=TermField.STACK,
        max_terms=max_terms,
    )


def _occurrence_tree():
    return {
        "filtered": {
            "doc_count": 6,
            "unique": {"value": 2.9},
            "new": {"buckets": [{"key": 1, "doc_count": 2}]},
            "first_occurrence": {"value": float(H0 + 5 * 60 * 1000)},
            "last_occurrence": {"value": float(H0 + HOUR_MS + 60 * 1000)},
            "timeline": {
                "buckets": [
                    {
                        "key": H0 + HOUR_MS,
                        "doc_count": 2,
                        "tl_unique": {"value": 1},
                        "tl_new": {"buckets": []},
                    },
                    {
                        "key": H0,
                        "doc_count": 4,
                        "tl_unique": {"value": 2},
                        "tl_new": {"buckets": [{"key": 1, "doc_count": 2}]},
                    },
                ]
            },
        }
    }


def test_node_reads_missing_children_as_empty():
    node = AggregationNode({"doc_count": 3})
    assert node.child("missing").doc_count == 0
    assert node.child("missing").value is None
    assert list(node.child("missing").buckets()) == []
    assert AggregationNode({"value": None}).value is None
    assert AggregationNode({"value": 0}).value == 0.0


def test_occurrence_stats_from_full_tree():
    stats = ResultAssembler().occurrence_stats(
        AggregationNode(_occurrence_tree()), _query(), START, END
    )

    assert stats.total == 6
    assert stats.unique == 2
    assert stats.new == 2
    assert [item.date for item in stats.timeline] == [
        datetime(2026, 5, 1, 0, 0),
        datetime(2026, 5, 1, 1, 0),
    ]
    assert [(i.total, i.unique, i.new) for i in stats.timeline] == [
        (4, 2, 2),
        (2, 1, 0),
    ]
    assert stats.start == datetime(2026, 5, 1, 0, 0)
    assert stats.end == datetime(2026, 5, 2, 0, 0)
    assert stats.avg_per_hour == 6 / 24
    assert stats.first_occurrence == datetime(2026, 5, 1, 0, 5)
    assert stats.last_occurrence == datetime(2026, 5, 1, 1, 1)


def test_offset_is_applied_once_to_every_instant():
    offset = timedelta(hours=-3)
    stats = ResultAssembler().occurrence_stats(
        AggregationNode(_occurrence_tree()), _query(offset), START, END
    )

    assert stats.timeline[0].date == datetime(2026, 4, 30, 21, 0)
    assert stats.start == datetime(2026, 4, 30, 21, 0)
    assert stats.end == datetime(2026, 5, 1, 21, 0)
    assert stats.first_occurrence == datetime(2026, 4, 30, 21, 5)
    assert stats.last_occurrence == datetime(2026, 4, 30, 22, 1)
    assert stats.avg_per_hour == 6 / 24


def test_empty_tree_yields_zero_report():
    offset = timedelta(hours=2)
    stats = ResultAssembler().occurrence_stats(
        AggregationNode({}), _query(offset), START, END
    )

    assert stats.total == 0
    assert stats.unique == 0
    assert stats.new == 0
    assert stats.timeline == []
    assert stats.start == datetime(2026, 5, 1, 2, 0)
    assert stats.end == datetime(2026, 5, 2, 2, 0)
    assert stats.avg_per_hour == 0.0
    assert stats.first_occurrence is None
    assert stats.last_occurrence is None


def test_empty_timeline_ignores_min_max_values():
    tree = {
        "filtered": {
            "doc_count": 0,
            "timeline": {"buckets": []},
            "first_occurrence": {"value": float(H0)},
            "last_occurrence": {"value": float(H0)},
        }
    }
    stats = ResultAssembler().occurrence_stats(AggregationNode(tree), _query(), START, END)
    assert stats.first_occurrence is None
    assert stats.last_occurrence is None


def test_absent_min_max_leave_occurrences_unset():
    tree = _occurrence_tree()
    tree["filtered"]["first_occurrence"] = {"value": None}
    del tree["filtered"]["last_occurrence"]
    stats = ResultAssembler().occurrence_stats(AggregationNode(tree), _query(), START, END)
    assert stats.first_occurrence is None
    assert stats.last_occurrence is None
    assert len(stats.timeline) == 2


def test_zero_length_span_reports_zero_rate():
    stats = ResultAssembler().occurrence_stats(
        AggregationNode({}), _query(), START, START
    )
    assert stats.avg_per_hour == 0.0


def _term_bucket(key, count, new=0, unique=None, first=None, last=None):
    bucket = {
        "key": key,
        "doc_count": count,
        "new": {"buckets": [{"key": 1, "doc_count": new}]} if new else {"buckets": []},
        "unique": {"value": unique},
        "timeline": {
            "buckets": [
                {
                    "key": H0,
                    "doc_count": count,
                    "tl_unique": {"value": unique},
                    "tl_new": {"buckets": []},
                }
            ]
        },
    }
    if first is not None:
        bucket["first_occurrence"] = {"value": float(first)}
    if last is not None:
        bucket["last_occurrence"] = {"value": float(last)}
    return bucket


def test_term_stats_preserve_backend_order():
    tree = {
        "filtered": {
            "doc_count": 12,
            "terms": {
                "buckets": [
                    _term_bucket("b", 7, new=3, unique=1, first=H0, last=H0 + HOUR_MS),
                    _term_bucket("a", 4, unique=1),
                ]
            },
        }
    }
    result = ResultAssembler().term_stats(
        AggregationNode(tree), _term_query(timedelta(hours=1)), START, END
    )

    assert result.total == 12
    assert [t.term for t in result.terms] == ["b", "a"]
    first, second = result.terms
    assert (first.total, first.unique, first.new) == (7, 1, 3)
    assert first.first_occurrence == datetime(2026, 5, 1, 1, 0)
    assert first.last_occurrence == datetime(2026, 5, 1, 2, 0)
    assert first.timeline[0].date == datetime(2026, 5, 1, 1, 0)
    assert second.new == 0
    assert second.first_occurrence is None
    assert result.start == datetime(2026, 5, 1, 1, 0)
    assert result.end == datetime(2026, 5, 2, 1, 0)
    assert sum(t.total for t in result.terms) <= result.total


def test_term_stats_truncate_to_max_terms():
    tree = {
        "filtered": {
            "doc_count": 9,
            "terms": {
                "buckets": [
                    _term_bucket("x", 4),
                    _term_bucket("y", 3),
                    _term_bucket("z", 2),
                ]
            },
        }
    }
    result = ResultAssembler().term_stats(
        AggregationNode(tree), _term_query(max_terms=2), START, END
    )
    assert [t.term for t in result.terms] == ["x", "y"]
    assert result.terms[0].unique == 0


def test_term_stats_empty_tree():
    result = ResultAssembler().term_stats(
        AggregationNode({}), _term_query(), START, END
    )
    assert result.total == 0
    assert result.terms == []
    assert result.start == datetime(2026, 5, 1)
