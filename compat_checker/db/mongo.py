"""
MongoDB Store - CompatibilityStore backed by a MongoDB collection.

Each key is one document in the `compat_store` collection:

    {"key": "reportData", "value": "<json>", "updated_at": datetime}

Values are stored JSON-encoded: add-on ids contain dots and would not be
valid field names inside a nested document.

pymongo is synchronous, so calls run in the default executor to keep the
event loop free while a job awaits persistence.
"""

import asyncio
import json
import logging
import os
from datetime import datetime
from typing import Any, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .base import CompatibilityStore

logger = logging.getLogger("compat.db")

COLLECTION_NAME = "compat_store"


class MongoStore(CompatibilityStore):
    """
    Key-value store over a MongoDB collection.

    Usage:
        store = MongoStore.connect("mongodb://localhost:27017", "compat_db")
        await store.set(lastCheckTimestamp=0)
        last = await store.get("lastCheckTimestamp", 0)
    """

    def __init__(self, db: Database):
        self.db = db
        self.collection: Collection = db[COLLECTION_NAME]
        self._ensure_indexes()

    @classmethod
    def connect(
        cls,
        connection_string: Optional[str] = None,
        database_name: Optional[str] = None,
    ) -> "MongoStore":
        """
        Create a store with its own client.

        Args:
            connection_string: MongoDB URI (default: MONGODB_URI env var or localhost)
            database_name: Database name (default: MONGODB_DATABASE env var or compat_db)
        """
        connection_string = connection_string or os.environ.get(
            "MONGODB_URI", "mongodb://localhost:27017"
        )
        database_name = database_name or os.environ.get("MONGODB_DATABASE", "compat_db")

        client = MongoClient(
            connection_string,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=10000,
        )
        logger.info(f"Using MongoDB store {database_name}.{COLLECTION_NAME}")
        return cls(client[database_name])

    def _ensure_indexes(self):
        self.collection.create_index("key", unique=True, name="key_idx")

    def _get_sync(self, key: str, default: Any) -> Any:
        doc = self.collection.find_one({"key": key}, {"_id": 0, "value": 1})
        if doc is None:
            return default
        return json.loads(doc["value"]) if "value" in doc else default

    def _set_sync(self, values: dict) -> None:
        now = datetime.utcnow()
        for key, value in values.items():
            self.collection.update_one(
                {"key": key},
                {"$set": {"value": json.dumps(value), "updated_at": now}},
                upsert=True,
            )
        logger.debug(f"Stored keys: {list(values)}")

    async def get(self, key: str, default: Any = None) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._get_sync, key, default)

    async def set(self, **values: Any) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._set_sync, values)
