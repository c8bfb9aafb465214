"""
Database Layer - Persisted compatibility cache.

This package provides:
- CompatibilityStore: Abstract async key-value store
- MemoryStore: In-process store
- MongoStore: MongoDB-backed store
- create_store: Build the store named by Settings.store

Usage:
    from compat_checker.db import create_store

    store = create_store(settings)
    report = await store.get(REPORT_KEY, None)
"""

from .base import (
    CompatibilityStore,
    MemoryStore,
    LAST_CHECK_KEY,
    REPORT_KEY,
    ADDON_DATA_KEY,
)


def create_store(settings) -> CompatibilityStore:
    """Create the store backend selected by settings.store."""
    if settings.store == "mongo":
        from .mongo import MongoStore
        return MongoStore.connect(settings.mongo_uri, settings.mongo_database)
    return MemoryStore()


__all__ = [
    "CompatibilityStore",
    "MemoryStore",
    "create_store",
    "LAST_CHECK_KEY",
    "REPORT_KEY",
    "ADDON_DATA_KEY",
]
