"""Advisory locks for singleton background computations.

A lock is a cache entry with a TTL. Acquisition uses the cache's atomic
set-if-absent, so two processes racing for the same key cannot both win.
The TTL is the only timeout: a holder that dies or fails without releasing
keeps other instances out until the entry expires.

Example:
    lock = AdvisoryLock(cache, CacheKeys.lock(target_key), ttl=3600)
    if await lock.acquire():
        await recompute()
        await lock.release()
"""

from __future__ import annotations

import logging
import os
from uuid import uuid4

from chii.cache.base import Cache

logger = logging.getLogger(__name__)


def _generate_owner_id() -> str:
    """Identify this process as a lock holder."""
    hostname = os.environ.get("HOSTNAME", os.environ.get("POD_NAME", "unknown"))
    return f"{hostname}-{uuid4().hex[:8]}"


class AdvisoryLock:
    """Best-effort mutual exclusion keyed by a cache entry.

    Args:
        cache: Shared cache holding the lock entry
        key: Lock key (see ``CacheKeys.lock``)
        ttl: Lock expiry in seconds
        owner_id: Value stored in the lock entry (auto-generated if None)
    """

    def __init__(self, cache: Cache, key: str, ttl: int, owner_id: str | None = None):
        self.cache = cache
        self.key = key
        self.ttl = ttl
        self.owner_id = owner_id or _generate_owner_id()

    async def acquire(self) -> bool:
        """Try once to take the lock."""
        acquired = await self.cache.set_if_absent(self.key, self.owner_id.encode(), self.ttl)
        if acquired:
            logger.debug(f"Acquired lock '{self.key}' as {self.owner_id}")
        return acquired

    async def release(self) -> bool:
        """Release the lock after a successful computation.

        The entry is deleted only if it still holds ``owner_id``. Once the TTL
        has lapsed and another instance has taken the key, the release is a
        no-op and returns False.
        """
        released = await self.cache.release_if_owner(self.key, self.owner_id.encode())
        if released:
            logger.debug(f"Released lock '{self.key}'")
        else:
            logger.warning(f"Lock '{self.key}' is no longer held by {self.owner_id}")
        return released

    async def flush(self) -> bool:
        """Remove the lock regardless of who holds it.

        Escape hatch for locks left behind by a crashed or wedged holder.
        Returns True if a lock existed.
        """
        removed = await self.cache.delete(self.key)
        if removed:
            logger.warning(f"Flushed lock '{self.key}'")
        return removed > 0
