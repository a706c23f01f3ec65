"""Cached subject id lists.

A list page is cached as a whole, keyed by the full filter + sort + page
tuple. Page 1 is the default view and is kept longer than deeper pages.
Empty results are returned without being cached.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

import orjson

from chii.cache.base import Cache
from chii.cache.keys import CacheKeys, normalize_tag
from chii.core.model import CalendarItem, Paged
from chii.core.types import SubjectFilter, SubjectSort, TagCat, TrendingPeriod
from chii.fetcher.entity import ONE_DAY, ONE_HOUR
from chii.persistence.store import Store, SubjectPredicates
from chii.trending.aggregator import TrendingAggregator

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 24
FIRST_PAGE_TTL = ONE_DAY
PAGE_TTL = ONE_HOUR
CALENDAR_TTL = ONE_DAY


def season_start_month(month: int) -> int:
    """First month of the broadcast season containing ``month`` (1, 4, 7 or 10)."""
    return (month - 1) // 3 * 3 + 1


def _constrain(ordered: Sequence[int], allowed: Sequence[int]) -> list[int]:
    """Ids of ``ordered`` that are also in ``allowed``, in ``ordered``'s order."""
    allowed_set = set(allowed)
    return [id for id in ordered if id in allowed_set]


def _empty() -> Paged[int]:
    return Paged[int](data=[], total=0)


class ListCache:
    """Filtered, sorted, paginated subject id lists with read-through caching.

    Args:
        cache: Shared cache
        store: Relational store
        trending: Source of ranked lists for the ``trends`` sort
        page_size: Ids per page
        clock: Current time, used to pick the calendar season
    """

    def __init__(
        self,
        cache: Cache,
        store: Store,
        trending: TrendingAggregator | None = None,
        page_size: int = LIST_PAGE_SIZE,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.cache = cache
        self.store = store
        self.trending = trending or TrendingAggregator(cache, store)
        self.page_size = page_size
        self._clock = clock

    async def fetch_page(
        self, filter: SubjectFilter, sort: SubjectSort, page: int = 1
    ) -> Paged[int]:
        """Return one page of subject ids matching ``filter``.

        ``total`` is the number of matching subjects across all pages.
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")

        key = CacheKeys.subject_list(filter, sort, page)
        cached = await self.cache.get(key)
        if cached is not None:
            return Paged[int].model_validate(orjson.loads(cached))

        ids: list[int] | None = list(filter.ids) if filter.ids is not None else None

        if sort is SubjectSort.TRENDS:
            trending = await self.trending.read_all(filter.type, TrendingPeriod.MONTH)
            if trending is None:
                logger.debug(f"No trending list for subject type {int(filter.type)} yet")
                return _empty()
            trending_ids = [item.id for item in trending]
            ids = trending_ids if ids is None else _constrain(trending_ids, ids)

        if filter.tags:
            tagged = await self._resolve_tags(filter)
            if tagged is None:
                return _empty()
            ids = tagged if ids is None else _constrain(ids, tagged)

        if ids is not None and not ids:
            return _empty()

        predicates = SubjectPredicates(
            type=int(filter.type),
            allow_nsfw=filter.nsfw,
            cat=filter.cat,
            series=filter.series,
            year=filter.year,
            month=filter.month,
            ids=tuple(ids) if ids is not None else None,
            ranked_only=sort is SubjectSort.RANK,
        )
        count = await self.store.count_subjects(predicates)
        if count == 0:
            return _empty()

        data = await self.store.query_subject_ids(
            predicates,
            sort,
            limit=self.page_size,
            offset=(page - 1) * self.page_size,
        )
        result = Paged[int](data=data, total=count)

        ttl = FIRST_PAGE_TTL if page == 1 else PAGE_TTL
        await self.cache.set(key, result.to_bytes(), ttl)
        return result

    async def _resolve_tags(self, filter: SubjectFilter) -> list[int] | None:
        """Subject ids carrying any of the filter's tags, or None if no tag is known."""
        names = list(dict.fromkeys(normalize_tag(t) for t in filter.tags or ()))
        tag_ids = await self.store.find_tag_ids(TagCat.SUBJECT, int(filter.type), names)
        if not tag_ids:
            return None
        return await self.store.find_tagged_ids(TagCat.SUBJECT, int(filter.type), tag_ids)

    async def fetch_calendar(self) -> list[CalendarItem]:
        """Anime airing this season with a known weekday, cached for a day."""
        key = CacheKeys.calendar()
        cached = await self.cache.get(key)
        if cached is not None:
            return [CalendarItem.model_validate(item) for item in orjson.loads(cached)]

        now = self._clock()
        rows = await self.store.calendar_items(now.year, season_start_month(now.month))
        items = [
            CalendarItem(id=row.id, weekday=row.weekday, watchers=row.watchers)
            for row in rows
            if 1 <= row.weekday <= 7
        ]
        await self.cache.set(
            key, orjson.dumps([item.model_dump() for item in items]), CALENDAR_TTL
        )
        return items
