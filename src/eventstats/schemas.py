from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import InvalidArgument
from .utils.datetime import to_utc

# Event document fields the aggregations run against.
DATE_FIELD = "date"
STACK_FIELD = "stack_id"
NEW_FLAG_FIELD = "is_first_occurrence"


class TermField(str, Enum):
    """Fields a term breakdown may be grouped by."""

    ORGANIZATION = "organization_id"
    PROJECT = "project_id"
    STACK = "stack_id"
    TAGS = "tags"

    @classmethod
    def parse(cls, value: Union[str, "TermField"]) -> "TermField":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise InvalidArgument(
                f"Must be a valid term; got {value!r}, expected one of: {allowed}"
            ) from None


class StatsQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    utc_start: datetime
    utc_end: datetime
    query: Optional[str] = None
    display_time_offset: timedelta = timedelta(0)
    desired_data_points: int = Field(default=100, gt=0)

    @field_validator("utc_start", "utc_end")
    @classmethod
    def _normalize_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @field_validator("query")
    @classmethod
    def _blank_query_matches_all(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value


class TermStatsQuery(StatsQuery):
    term_field: TermField
    max_terms: int = Field(default=25, gt=0)
    desired_data_points: int = Field(default=10, gt=0)


class TimelineItem(BaseModel):
    date: datetime
    total: int = 0
    unique: int = 0
    new: int = 0


class TermStatsItem(BaseModel):
    term: str
    total: int = 0
    unique: int = 0
    new: int = 0
    first_occurrence: Optional[datetime] = None
    last_occurrence: Optional[datetime] = None
    timeline: List[TimelineItem] = Field(default_factory=list)


class EventStatsResult(BaseModel):
    total: int = 0
    unique: int = 0
    new: int = 0
    timeline: List[TimelineItem] = Field(default_factory=list)
    start: datetime
    end: datetime
    avg_per_hour: float = 0.0
    first_occurrence: Optional[datetime] = None
    last_occurrence: Optional[datetime] = None


class EventTermStatsResult(BaseModel):
    total: int = 0
    terms: List[TermStatsItem] = Field(default_factory=list)
    start: datetime
    end: datetime
