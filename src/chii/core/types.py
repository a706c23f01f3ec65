"""Enumerations and filters shared by fetchers, list caching and trending."""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, Field

from chii.errors import InvalidPeriodError


class SubjectType(IntEnum):
    BOOK = 1
    ANIME = 2
    MUSIC = 3
    GAME = 4
    REAL = 6


SUBJECT_TYPES: tuple[SubjectType, ...] = tuple(SubjectType)


class SubjectSort(str, Enum):
    RANK = "rank"
    TRENDS = "trends"
    COLLECTS = "collects"
    DATE = "date"
    TITLE = "title"


class TagCat(IntEnum):
    SUBJECT = 0
    ENTRY = 1
    BLOG = 2


class TrendingPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


_PERIOD_DURATIONS_MS: dict[TrendingPeriod, int] = {
    TrendingPeriod.DAY: 86_400_000,
    TrendingPeriod.WEEK: 604_800_000,
    TrendingPeriod.MONTH: 2_592_000_000,
}


def get_trending_period_duration(period: TrendingPeriod | str) -> int:
    """Return the trailing window of ``period`` in milliseconds.

    Raises:
        InvalidPeriodError: if ``period`` is not a known period.
    """
    try:
        key = TrendingPeriod(period)
    except ValueError:
        raise InvalidPeriodError(period) from None
    duration = _PERIOD_DURATIONS_MS.get(key)
    if not duration:
        raise InvalidPeriodError(period)
    return duration


class SubjectFilter(BaseModel):
    """Constraints for a subject list page.

    ``ids`` restricts the result to a set of subjects. When set together with
    the ``trends`` sort it is intersected with the trending list.
    """

    model_config = {"extra": "forbid", "frozen": True}

    type: SubjectType
    nsfw: bool = False
    cat: int | None = Field(default=None, description="Platform id")
    series: bool | None = None
    year: int | None = None
    month: int | None = None
    tags: tuple[str, ...] | None = None
    ids: tuple[int, ...] | None = None
