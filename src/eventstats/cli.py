"""Command-line access to occurrence and term statistics."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .config import get_settings, validate_settings
from .errors import EventStatsError
from .schemas import TermField
from .stats.engine import create_event_stats
from .utils.datetime import local_to_utc, to_utc

logger = logging.getLogger(__name__)


def _timestamp_arg(value: str) -> datetime:
    """ISO-8601 timestamp; naive values are read later as local at --offset."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"not an ISO-8601 timestamp: {value!r}"
        ) from None


def _resolve_bound(value: datetime, offset: timedelta) -> datetime:
    if value.tzinfo is None:
        return local_to_utc(value, offset)
    return to_utc(value)


def _offset_arg(value: str) -> timedelta:
    """Parse ``+HH:MM`` / ``-HH:MM`` (or bare minutes) into a timedelta."""
    text = value.strip()
    try:
        if ":" not in text:
            return timedelta(minutes=int(text))
        sign = -1 if text.startswith("-") else 1
        hours, minutes = text.lstrip("+-").split(":", 1)
        return sign * timedelta(hours=int(hours), minutes=int(minutes))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a time offset: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Event statistics")
    sub = parser.add_subparsers(dest="command", required=True)

    def _common(cmd: argparse.ArgumentParser, points: int) -> None:
        now = datetime.now(timezone.utc)
        cmd.add_argument(
            "--start",
            type=_timestamp_arg,
            default=now - timedelta(days=7),
            help="ISO-8601; without a zone it is local time at --offset",
        )
        cmd.add_argument("--end", type=_timestamp_arg, default=now)
        cmd.add_argument("--query", "-q", default=None, help="Backend filter string")
        cmd.add_argument(
            "--offset",
            type=_offset_arg,
            default=timedelta(0),
            help="Display time offset, e.g. -05:00",
        )
        cmd.add_argument("--points", type=int, default=points)

    occurrences = sub.add_parser("occurrences", help="Occurrence timeline")
    _common(occurrences, settings.stats_occurrence_data_points)

    terms = sub.add_parser("terms", help="Top terms with timelines")
    _common(terms, settings.stats_term_data_points)
    terms.add_argument(
        "--field",
        "-f",
        choices=[member.value for member in TermField],
        default=TermField.STACK.value,
    )
    terms.add_argument("--max", type=int, default=settings.stats_default_max_terms)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    validate_settings(settings)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    start = _resolve_bound(args.start, args.offset)
    end = _resolve_bound(args.end, args.offset)

    engine = create_event_stats(settings)
    try:
        if args.command == "terms":
            result = engine.get_terms_stats(
                start,
                end,
                args.field,
                query=args.query,
                display_time_offset=args.offset,
                max_terms=args.max,
                desired_data_points=args.points,
            )
        else:
            result = engine.get_occurrence_stats(
                start,
                end,
                query=args.query,
                display_time_offset=args.offset,
                desired_data_points=args.points,
            )
    except EventStatsError as exc:
        logger.error("%s", exc)
        return 1

    sys.stdout.write(result.model_dump_json(indent=2) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
