"""``Cache`` on top of redis-py's asyncio client.

One client (and its connection pool) is shared per process; payloads are
stored as raw bytes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import TYPE_CHECKING, cast

import redis.asyncio as redis

from chii.cache.base import Cache
from chii.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

_redis_client: Redis | None = None

# Delete a lock entry only while it still holds the caller's value
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


async def get_redis() -> Redis:
    """Shared client for ``settings.redis_url``, created on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            decode_responses=False,  # payloads are orjson bytes
        )
    return _redis_client


async def close_redis() -> None:
    """Close the shared client and its pool."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class RedisCache(Cache):
    """``Cache`` backed by a Redis client."""

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> bytes | None:
        return cast(bytes | None, await self.client.get(key))

    async def mget(self, keys: Sequence[str]) -> list[bytes | None]:
        if not keys:
            return []
        return cast(list[bytes | None], await self.client.mget(list(keys)))

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        if ttl is None:
            await self.client.set(key, value)
        else:
            await self.client.setex(key, ttl, value)

    async def set_if_absent(self, key: str, value: bytes, ttl: int) -> bool:
        # SET NX EX is a single atomic command
        acquired = await self.client.set(key, value, nx=True, ex=ttl)
        return bool(acquired)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self.client.delete(*keys))

    async def release_if_owner(self, key: str, value: bytes) -> bool:
        result = await cast(
            Awaitable[int], self.client.eval(_RELEASE_SCRIPT, 1, key, value)
        )
        return bool(result)
