"""Generic read-through cache for single entities.

A ``CacheableEntity`` describes one entity kind: how to build its cache key,
how to load rows from the store, and how to convert a row into the cached
record. ``EntityFetcher`` runs the same algorithm for every kind:

1. Look up the cache (``get`` for one id, one ``mget`` for a batch)
2. Load misses from the store in one query, excluding banned rows when the
   kind is ban-filtered
3. Convert, write each record back with the kind's TTL
4. Apply the request's visibility rules to hits and fresh records alike

Missing rows are not cached; a later write elsewhere populates them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import orjson
from pydantic import ValidationError

from chii.cache.base import Cache
from chii.core.model import Record
from chii.core.visibility import (
    DEFAULT_VISIBILITY,
    VisibilityOptions,
    nsfw_visible,
    privacy_visible,
)
from chii.persistence.store import EntityKind, Store

logger = logging.getLogger(__name__)

ONE_HOUR = 3600
ONE_DAY = 86400
ONE_MONTH = 2592000

RowT = TypeVar("RowT")
ModelT = TypeVar("ModelT", bound=Record)


class Gate(str, Enum):
    """Which read-time visibility rule applies to a kind."""

    NONE = "none"
    NSFW = "nsfw"
    PRIVACY = "privacy"


def _row_id(row: Any) -> int:
    return int(row.id)


@dataclass(frozen=True)
class CacheableEntity(Generic[RowT, ModelT]):
    """Description of one cached entity kind.

    Args:
        kind: Store entity kind used for lookups
        model: Record class used to deserialize cached payloads
        key: Cache key for an id
        convert: Row to record conversion
        ttl: Cache TTL in seconds
        exclude_banned: Exclude banned rows in the store query
        gate: Visibility rule applied on every read
        row_id: Id of a store row
    """

    kind: EntityKind
    model: type[ModelT]
    key: Callable[[int], str]
    convert: Callable[[RowT], ModelT]
    ttl: int = ONE_MONTH
    exclude_banned: bool = False
    gate: Gate = Gate.NONE
    row_id: Callable[[RowT], int] = _row_id


class EntityFetcher:
    """Read-through fetcher shared by every entity kind."""

    def __init__(self, cache: Cache, store: Store):
        self.cache = cache
        self.store = store

    async def fetch_by_id(
        self,
        entity: CacheableEntity[Any, ModelT],
        id: int,
        options: VisibilityOptions = DEFAULT_VISIBILITY,
    ) -> ModelT | None:
        """Fetch one record, or None if it is missing or hidden from this request."""
        key = entity.key(id)
        cached = await self.cache.get(key)
        if cached is not None:
            item = self._decode(entity, key, cached)
            if item is not None:
                return item if await self.is_visible(entity, item, options) else None

        row = await self.store.get_by_id(entity.kind, id, exclude_banned=entity.exclude_banned)
        if row is None:
            return None

        item = entity.convert(row)
        await self.cache.set(key, item.to_bytes(), entity.ttl)
        return item if await self.is_visible(entity, item, options) else None

    async def fetch_by_ids(
        self,
        entity: CacheableEntity[Any, ModelT],
        ids: Iterable[int],
        options: VisibilityOptions = DEFAULT_VISIBILITY,
    ) -> dict[int, ModelT]:
        """Fetch many records keyed by id.

        Ids that are missing, banned or hidden from this request are absent
        from the result; callers cannot tell those cases apart.
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return {}

        keys = [entity.key(id) for id in unique_ids]
        cached = await self.cache.mget(keys)

        result: dict[int, ModelT] = {}
        missing: list[int] = []
        for id, key, payload in zip(unique_ids, keys, cached):
            item = self._decode(entity, key, payload) if payload is not None else None
            if item is None:
                missing.append(id)
            elif await self.is_visible(entity, item, options):
                result[id] = item

        if missing:
            rows = await self.store.get_by_ids(
                entity.kind, missing, exclude_banned=entity.exclude_banned
            )
            for row in rows:
                id = entity.row_id(row)
                item = entity.convert(row)
                await self.cache.set(entity.key(id), item.to_bytes(), entity.ttl)
                if await self.is_visible(entity, item, options):
                    result[id] = item

        return result

    async def is_visible(
        self, entity: CacheableEntity[Any, ModelT], item: ModelT, options: VisibilityOptions
    ) -> bool:
        if entity.gate is Gate.NSFW:
            return nsfw_visible(item, options)  # type: ignore[arg-type]
        if entity.gate is Gate.PRIVACY:
            return await privacy_visible(
                item, options.viewer_id, self.store.is_friends  # type: ignore[arg-type]
            )
        return True

    def _decode(
        self, entity: CacheableEntity[Any, ModelT], key: str, payload: bytes
    ) -> ModelT | None:
        # Payloads written by an older record shape are treated as misses
        try:
            return entity.model.from_bytes(payload)
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None
