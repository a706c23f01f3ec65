"""Wiring of the process-wide cache, store and aggregator for CLI commands."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from chii.cache.redis import RedisCache, close_redis, get_redis
from chii.config import settings
from chii.observability.logging import configure_logging
from chii.persistence.db import close_db, get_session_factory
from chii.persistence.store import SqlStore
from chii.trending.aggregator import TrendingAggregator


def setup_logging() -> None:
    configure_logging(json_format=settings.log_json, level=settings.log_level)


@asynccontextmanager
async def open_aggregator() -> AsyncIterator[TrendingAggregator]:
    """Yield an aggregator backed by Redis and the database, closing both on exit."""
    cache = RedisCache(await get_redis())
    store = SqlStore(get_session_factory())
    try:
        yield TrendingAggregator(cache, store, lock_ttl=settings.trending_lock_ttl)
    finally:
        await close_redis()
        await close_db()
