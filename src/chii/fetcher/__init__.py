"""Read-through fetchers backed by the shared cache and the relational store."""

from chii.fetcher.entity import CacheableEntity, EntityFetcher, Gate
from chii.fetcher.lists import ListCache
from chii.fetcher.service import Fetcher

__all__ = [
    "CacheableEntity",
    "EntityFetcher",
    "Fetcher",
    "Gate",
    "ListCache",
]
