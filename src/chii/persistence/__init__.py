"""Persistence layer for chii.

This module provides:
- Async SQLAlchemy engine and session factory
- ORM models for the tables the cache core reads
- The ``Store`` interface and its SQLAlchemy implementation
"""

from chii.persistence.db import close_db, get_engine, get_session_factory
from chii.persistence.store import EntityKind, SqlStore, Store, SubjectPredicates

__all__ = [
    "close_db",
    "get_engine",
    "get_session_factory",
    "EntityKind",
    "SqlStore",
    "Store",
    "SubjectPredicates",
]
