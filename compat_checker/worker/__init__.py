"""
Worker Package - Refresh scheduling and reconciliation.

Components:
    - RefreshScheduler: Single-flight FIFO job queue
    - RebuildTimer: Periodic rebuild trigger
    - ReconciliationEngine: Rebuild/patch state machine
    - LifecycleEventSource: Add-on lifecycle event fan-out
    - CompatService: Wiring of all of the above

Usage:
    python -m compat_checker.worker --addons installed.json
"""

from .engine import ReconciliationEngine
from .events import LifecycleEventSource
from .jobs import Job, JobKind
from .platform import (
    AddonSource,
    BadgeSink,
    HostBuildInfo,
    HostInfo,
    InventoryAddonSource,
    StateBadgeSink,
    StaticHostInfo,
)
from .scheduler import RebuildTimer, RefreshScheduler
from .service import CompatService

__all__ = [
    "AddonSource",
    "BadgeSink",
    "CompatService",
    "HostBuildInfo",
    "HostInfo",
    "InventoryAddonSource",
    "Job",
    "JobKind",
    "LifecycleEventSource",
    "RebuildTimer",
    "ReconciliationEngine",
    "RefreshScheduler",
    "StateBadgeSink",
    "StaticHostInfo",
]
