"""Cache layer for chii.

Provides the read-through cache used by every fetcher:
- ``Cache`` is the key-value interface the core depends on
- ``RedisCache`` implements it on redis-py's asyncio client
- ``CacheKeys`` builds every key, so keys are pure functions of their inputs
"""

from chii.cache.base import Cache
from chii.cache.keys import CacheKeys
from chii.cache.redis import RedisCache, close_redis, get_redis

__all__ = [
    "Cache",
    "CacheKeys",
    "RedisCache",
    "get_redis",
    "close_redis",
]
