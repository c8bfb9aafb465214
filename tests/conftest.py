"""
Shared fixtures: a sample report, a scripted report client and a badge sink
that records every call.
"""

import asyncio
import copy

import pytest

from compat_checker.config import Settings
from compat_checker.db import MemoryStore
from compat_checker.models import LocalAddon
from compat_checker.report import ReportFetchError
from compat_checker.worker import (
    BadgeSink,
    InventoryAddonSource,
    ReconciliationEngine,
    RefreshScheduler,
)

NOW_MS = 1_700_000_000_000

SAMPLE_REPORT = {
    "generated": "2024-11-20T06:00:00Z",
    "addons": [
        {
            "id": "good@example.com",
            "name": "Good Add-on",
            "icons": {"32": "https://example.com/good-32.png"},
            "compat": [
                {"type": "current-esr", "extVersion": "2.0", "appVersion": "115.0"},
                {"type": "next-esr", "extVersion": "3.0", "appVersion": "128.0"},
                {"type": "release", "extVersion": "3.1", "appVersion": "133.0"},
            ],
        },
        {
            "id": "legacy@example.com",
            "name": "Legacy Add-on",
            "compat": [
                {"type": "current-esr", "extVersion": "1.0", "appVersion": "115.0"},
                {"type": "next-esr", "appVersion": "128.0"},
                {"type": "release", "appVersion": "133.0"},
            ],
            "alternatives": [
                {"id": "good@example.com", "name": "Good Add-on", "link": "https://example.com/good"},
            ],
        },
        {
            "id": "experiment@example.com",
            "name": "Experiment Add-on",
            "compat": [
                {"type": "current-esr", "extVersion": "5.0", "isExperiment": True, "appVersion": "115.0"},
                {"type": "next-esr", "extVersion": "5.1", "isExperiment": True, "appVersion": "128.0"},
                {"type": "release", "extVersion": "5.2", "isExperiment": True, "appVersion": "133.0"},
            ],
        },
        {
            "id": "supported-experiment@example.com",
            "name": "Supported Experiment",
            "dedicatedSupportOnRelease": True,
            "compat": [
                {"type": "next-esr", "extVersion": "7.0", "isExperiment": True, "appVersion": "128.0"},
                {"type": "release", "extVersion": "7.1", "isExperiment": True, "appVersion": "133.0"},
            ],
        },
    ],
}


class FakeReportClient:
    """Report client returning scripted results in order (last one repeats)."""

    def __init__(self, *results):
        self.results = list(results) or [copy.deepcopy(SAMPLE_REPORT)]
        self.calls = 0

    async def fetch(self):
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        if isinstance(result, Exception):
            raise result
        return copy.deepcopy(result)


class RecordingBadgeSink(BadgeSink):
    """Badge sink keeping the full call history."""

    def __init__(self):
        self.calls = []
        self.text = ""
        self.color = None
        self.enabled = True

    async def set_text(self, text):
        self.calls.append(("text", text))
        self.text = text

    async def set_color(self, color):
        self.calls.append(("color", color))
        self.color = color

    async def enable(self):
        self.calls.append(("enable",))
        self.enabled = True

    async def disable(self):
        self.calls.append(("disable",))
        self.enabled = False


def fetch_error():
    return ReportFetchError("https://example.invalid/all.json", "connection failed")


def local(addon_id, name=None, enabled=True, **kwargs):
    return LocalAddon(id=addon_id, name=name or addon_id, enabled=enabled, **kwargs)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def settings():
    return Settings(throttle_delay=0, rebuild_interval_minutes=60)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def badge():
    return RecordingBadgeSink()


@pytest.fixture
def client():
    return FakeReportClient()


@pytest.fixture
def inventory():
    return InventoryAddonSource([
        local("good@example.com", "Good Add-on"),
        local("unlisted@example.com", "Unlisted Add-on"),
    ])


class Clock:
    def __init__(self, now=NOW_MS):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def engine(store, client, inventory, badge, clock):
    return ReconciliationEngine(
        store=store,
        client=client,
        addon_source=inventory,
        badge=badge,
        rebuild_interval_minutes=60,
        clock=clock,
    )


@pytest.fixture
def scheduler(engine):
    return RefreshScheduler(engine, throttle_delay=0)


@pytest.fixture(autouse=True)
def _restore_environ():
    """Undo environment variables exported by entry points under test."""
    import os

    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)
