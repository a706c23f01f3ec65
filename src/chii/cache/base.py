"""Key-value cache interface consumed by the fetchers and trending jobs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class Cache(ABC):
    """Abstract base class for cache backends.

    Values are opaque bytes. ``ttl`` is in seconds; ``None`` keeps the value
    until it is overwritten or deleted.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the cached value, or None on a miss."""

    @abstractmethod
    async def mget(self, keys: Sequence[str]) -> list[bytes | None]:
        """Return values for ``keys`` in one round-trip, None for each miss."""

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    async def set_if_absent(self, key: str, value: bytes, ttl: int) -> bool:
        """Atomically store ``value`` only if ``key`` does not exist.

        Returns:
            True if the value was stored, False if the key already existed.
        """

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys and return how many existed."""

    @abstractmethod
    async def release_if_owner(self, key: str, value: bytes) -> bool:
        """Atomically delete ``key`` only while it still holds ``value``.

        Returns:
            True if the key was deleted.
        """
