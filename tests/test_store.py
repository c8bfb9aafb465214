"""
Tests for MemoryStore and MongoStore (against mongomock).
"""

import mongomock
import pytest

from compat_checker.config import Settings
from compat_checker.db import ADDON_DATA_KEY, LAST_CHECK_KEY, REPORT_KEY, MemoryStore, create_store
from compat_checker.db.mongo import MongoStore

from conftest import SAMPLE_REPORT, run


@pytest.fixture
def mongo_store():
    return MongoStore(mongomock.MongoClient()["compat_test"])


@pytest.fixture(params=["memory", "mongo"])
def any_store(request):
    if request.param == "memory":
        return MemoryStore()
    return MongoStore(mongomock.MongoClient()["compat_test"])


class TestStoreContract:

    def test_missing_key_returns_default(self, any_store):
        assert run(any_store.get(LAST_CHECK_KEY, 0)) == 0
        assert run(any_store.get(REPORT_KEY)) is None

    def test_set_many_then_get(self, any_store):
        table = {"good@example.com": {"id": "good@example.com", "compat": []}}
        run(any_store.set(**{LAST_CHECK_KEY: 42, REPORT_KEY: SAMPLE_REPORT, ADDON_DATA_KEY: table}))

        values = run(any_store.get_many({LAST_CHECK_KEY: 0, REPORT_KEY: None, ADDON_DATA_KEY: None}))
        assert values[LAST_CHECK_KEY] == 42
        assert values[REPORT_KEY] == SAMPLE_REPORT
        # Dotted add-on ids survive as keys
        assert values[ADDON_DATA_KEY] == table

    def test_overwrite(self, any_store):
        run(any_store.set(**{LAST_CHECK_KEY: 1}))
        run(any_store.set(**{LAST_CHECK_KEY: 2}))
        assert run(any_store.get(LAST_CHECK_KEY)) == 2


class TestMemoryStore:

    def test_values_are_copied(self):
        table = {"a": {"enabled": True}}
        store = MemoryStore({ADDON_DATA_KEY: table})
        table["a"]["enabled"] = False

        read = run(store.get(ADDON_DATA_KEY))
        assert read["a"]["enabled"] is True
        read["a"]["enabled"] = False
        assert store.snapshot()[ADDON_DATA_KEY]["a"]["enabled"] is True


class TestMongoStore:

    def test_one_document_per_key(self, mongo_store):
        run(mongo_store.set(**{LAST_CHECK_KEY: 1, ADDON_DATA_KEY: {}}))
        run(mongo_store.set(**{LAST_CHECK_KEY: 2}))
        assert mongo_store.collection.count_documents({}) == 2
        doc = mongo_store.collection.find_one({"key": LAST_CHECK_KEY})
        assert doc["value"] == "2"
        assert "updated_at" in doc


class TestCreateStore:

    def test_memory_by_default(self):
        assert isinstance(create_store(Settings()), MemoryStore)
