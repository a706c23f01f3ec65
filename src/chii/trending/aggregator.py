"""Trending aggregation for subjects and subject topics.

Each (subject type, period) pair has its own ranked list in the cache and
its own lock, so recomputations for different pairs never block each other.

``trigger`` is meant for scheduled jobs. It takes the pair's lock, counts
interest events inside the trailing window, writes the ranked list without a
TTL and releases the lock. A call that finds the lock held does nothing. A
store failure leaves the lock in place until it expires, which doubles as a
cool-down against repeatedly failing recomputes.

``read`` never computes anything: it returns a slice of whatever list is
cached, or an empty list.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

import orjson

from chii.cache.base import Cache
from chii.cache.keys import CacheKeys
from chii.core.model import TrendingItem
from chii.core.types import SubjectType, TrendingPeriod, get_trending_period_duration
from chii.distributed.lock import AdvisoryLock
from chii.errors import InvalidPeriodError
from chii.persistence.rows import InterestAggregate
from chii.persistence.store import Store

logger = logging.getLogger(__name__)

TRENDING_LIMIT = 1000
DEFAULT_LOCK_TTL = 3600

# Interest in these types is tracked by last update, not by "doing" date
_UPDATED_AT_WINDOW_TYPES = frozenset({SubjectType.BOOK, SubjectType.MUSIC})

Aggregate = Callable[[int], Awaitable[list[InterestAggregate]]]


def dump_trending(items: list[TrendingItem]) -> bytes:
    return orjson.dumps([item.model_dump() for item in items])


def load_trending(payload: bytes) -> list[TrendingItem]:
    return [TrendingItem.model_validate(item) for item in orjson.loads(payload)]


class TrendingAggregator:
    """Computes and serves ranked trending lists.

    Args:
        cache: Shared cache holding lists and locks
        store: Relational store answering the aggregate queries
        lock_ttl: Lock expiry in seconds
        clock: Current unix time in seconds
    """

    def __init__(
        self,
        cache: Cache,
        store: Store,
        lock_ttl: int = DEFAULT_LOCK_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache
        self.store = store
        self.lock_ttl = lock_ttl
        self._clock = clock

    # -------------------------------------------------------------------------
    # Subjects
    # -------------------------------------------------------------------------

    async def trigger(
        self,
        subject_type: SubjectType,
        period: TrendingPeriod | str = TrendingPeriod.MONTH,
        flush: bool = False,
    ) -> bool:
        """Recompute the trending subjects of one type.

        Returns:
            True if a new list was written, False if the lock was busy or the
            period is invalid.
        """
        subject_type = SubjectType(subject_type)
        by_doing_dateline = subject_type not in _UPDATED_AT_WINDOW_TYPES

        async def aggregate(min_dateline: int) -> list[InterestAggregate]:
            return await self.store.aggregate_subject_interests(
                subject_type,
                min_dateline=min_dateline,
                by_doing_dateline=by_doing_dateline,
                limit=TRENDING_LIMIT,
            )

        return await self._recompute(
            CacheKeys.trending_subjects(subject_type, period),
            period,
            aggregate,
            label=f"trending subjects for {int(subject_type)}({_label(period)})",
            flush=flush,
        )

    async def read(
        self,
        subject_type: SubjectType,
        period: TrendingPeriod | str = TrendingPeriod.MONTH,
        limit: int = 20,
        offset: int = 0,
    ) -> list[TrendingItem]:
        """Return ``[offset, offset + limit)`` of the cached ranking."""
        items = await self.read_all(subject_type, period)
        if items is None:
            return []
        return items[offset : offset + limit]

    async def read_all(
        self, subject_type: SubjectType, period: TrendingPeriod | str = TrendingPeriod.MONTH
    ) -> list[TrendingItem] | None:
        """Return the whole cached ranking, or None if none was computed yet."""
        payload = await self.cache.get(CacheKeys.trending_subjects(subject_type, period))
        if payload is None:
            return None
        return load_trending(payload)

    # -------------------------------------------------------------------------
    # Subject topics
    # -------------------------------------------------------------------------

    async def trigger_topics(
        self, period: TrendingPeriod | str = TrendingPeriod.WEEK, flush: bool = False
    ) -> bool:
        """Recompute the most replied subject topics."""

        async def aggregate(min_dateline: int) -> list[InterestAggregate]:
            return await self.store.aggregate_subject_topic_replies(
                min_dateline=min_dateline, limit=TRENDING_LIMIT
            )

        return await self._recompute(
            CacheKeys.trending_subject_topics(period),
            period,
            aggregate,
            label=f"trending subject topics ({_label(period)})",
            flush=flush,
        )

    async def read_topics(
        self,
        period: TrendingPeriod | str = TrendingPeriod.WEEK,
        limit: int = 20,
        offset: int = 0,
    ) -> list[TrendingItem]:
        payload = await self.cache.get(CacheKeys.trending_subject_topics(period))
        if payload is None:
            return []
        return load_trending(payload)[offset : offset + limit]

    # -------------------------------------------------------------------------
    # Shared state machine
    # -------------------------------------------------------------------------

    async def _recompute(
        self,
        target_key: str,
        period: TrendingPeriod | str,
        aggregate: Aggregate,
        label: str,
        flush: bool,
    ) -> bool:
        lock = AdvisoryLock(self.cache, CacheKeys.lock(target_key), self.lock_ttl)
        if flush:
            await lock.flush()

        if not await lock.acquire():
            logger.info(f"Already calculating {label}...")
            return False
        logger.info(f"Calculating {label}...")

        # An invalid period keeps the lock until it expires
        try:
            duration_ms = get_trending_period_duration(period)
        except InvalidPeriodError as e:
            logger.error(str(e))
            return False

        min_dateline = int(self._clock() - duration_ms / 1000)
        rows = await aggregate(min_dateline)
        # sorted() is stable: ties keep the store order
        ranked = sorted(rows, key=lambda row: row.total, reverse=True)[:TRENDING_LIMIT]
        items = [TrendingItem(id=row.id, total=row.total) for row in ranked]

        await self.cache.set(target_key, dump_trending(items))
        await lock.release()
        logger.info(f"Calculated {label}: {len(items)} items")
        return True


def _label(period: TrendingPeriod | str) -> str:
    return period.value if isinstance(period, TrendingPeriod) else str(period)
