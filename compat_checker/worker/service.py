"""
Compat Service - Wires the engine, scheduler, timer and event source.

    lifecycle events / timer / API
        -> RefreshScheduler.enqueue
        -> ReconciliationEngine.run (single-flight)
        -> CompatibilityStore
        -> reduce_status -> BadgeSink

Readers (status, detail view) go straight to the store.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ..config import Settings
from ..db import ADDON_DATA_KEY, LAST_CHECK_KEY, REPORT_KEY, CompatibilityStore, create_store
from ..models import AddonEvent, LocalAddon, RemoteReport, table_from_wire
from ..report import ReportClient
from ..status import BadgePolicy, DetailView, build_detail_view, reduce_status
from .engine import ReconciliationEngine
from .events import LifecycleEventSource
from .jobs import Job, JobKind
from .platform import (
    AddonSource,
    BadgeSink,
    HostInfo,
    InventoryAddonSource,
    StateBadgeSink,
    StaticHostInfo,
)
from .scheduler import RebuildTimer, RefreshScheduler

logger = logging.getLogger("compat.worker.service")


class CompatService:
    """
    Long-running compatibility checker.

    Usage:
        service = CompatService.from_settings(settings)
        await service.start()
        service.events.emit("installed", AddonEvent(id="x@y", name="X"))
        status = await service.get_status()
        await service.stop()
    """

    def __init__(
        self,
        settings: Settings,
        store: CompatibilityStore,
        client: ReportClient,
        addon_source: AddonSource,
        badge: BadgeSink,
        host_info: Optional[HostInfo] = None,
        events: Optional[LifecycleEventSource] = None,
        clock=None,
    ):
        self.settings = settings
        self.store = store
        self.addon_source = addon_source
        self.badge = badge
        self.host_info = host_info or StaticHostInfo()
        self.events = events or LifecycleEventSource()
        self.policy = BadgePolicy.from_settings(settings)

        engine_logger = logging.getLogger("compat.worker.engine")
        if settings.debug:
            engine_logger.setLevel(logging.DEBUG)

        engine_kwargs = {"clock": clock} if clock is not None else {}
        self.engine = ReconciliationEngine(
            store=store,
            client=client,
            addon_source=addon_source,
            badge=badge,
            rebuild_interval_minutes=settings.rebuild_interval_minutes,
            bundled_id_suffixes=settings.bundled_id_suffixes,
            policy=self.policy,
            logger=engine_logger,
            **engine_kwargs,
        )
        self.scheduler = RefreshScheduler(self.engine, throttle_delay=settings.throttle_delay)
        self.timer = RebuildTimer(self.scheduler, settings.rebuild_interval_minutes)
        self._unsubscribe = []
        self._started = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        addon_source: Optional[AddonSource] = None,
        badge: Optional[BadgeSink] = None,
        host_info: Optional[HostInfo] = None,
        store: Optional[CompatibilityStore] = None,
    ) -> "CompatService":
        """Build a service with the configured store and report client."""
        return cls(
            settings=settings,
            store=store or create_store(settings),
            client=ReportClient(settings.report_url, timeout=settings.fetch_timeout),
            addon_source=addon_source or InventoryAddonSource(),
            badge=badge or StateBadgeSink(),
            host_info=host_info,
        )

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Subscribe to events, start the timer and queue the initial check."""
        if self._started:
            return
        self._started = True

        if isinstance(self.addon_source, InventoryAddonSource):
            self._unsubscribe.append(self.events.subscribe(self.addon_source.apply_event))
        self._unsubscribe.append(self.events.subscribe(self._on_event))

        self.timer.start()
        self.scheduler.enqueue(Job(kind=JobKind.REFRESH_TABLE, throttle=False))
        logger.info(
            f"Service started (report={self.settings.report_url}, "
            f"interval={self.settings.rebuild_interval_minutes}min)"
        )

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        await self.timer.stop()
        await self.scheduler.stop()
        self._started = False
        logger.info("Service stopped")

    def _on_event(self, kind: str, event: AddonEvent) -> None:
        self.scheduler.enqueue(Job.from_event(kind, event))

    def request_rebuild(self) -> None:
        self.scheduler.enqueue(Job(kind=JobKind.REBUILD, throttle=True))

    def replace_inventory(self, addons: Iterable[LocalAddon]) -> None:
        """Replace the local enumeration and queue a table refresh."""
        if not isinstance(self.addon_source, InventoryAddonSource):
            raise TypeError("Add-on source does not accept an inventory")
        self.addon_source.replace(addons)
        self.scheduler.enqueue(Job(kind=JobKind.REFRESH_TABLE, throttle=True))

    async def get_status(self) -> Dict[str, Any]:
        state = await self.store.get_many({LAST_CHECK_KEY: 0, ADDON_DATA_KEY: None})
        table = table_from_wire(state[ADDON_DATA_KEY])

        status: Dict[str, Any] = {
            "lastCheckTimestamp": state[LAST_CHECK_KEY] or None,
            "inFlight": self.scheduler.in_flight,
            "pending": self.scheduler.pending,
            "summary": reduce_status(table, self.policy).to_dict() if table is not None else None,
        }
        if isinstance(self.badge, StateBadgeSink):
            status["badge"] = self.badge.snapshot()
        return status

    async def get_detail(self, host_version: Optional[str] = None) -> Optional[DetailView]:
        """Build the detail view; None until the first table exists."""
        state = await self.store.get_many({REPORT_KEY: None, ADDON_DATA_KEY: None})
        table = table_from_wire(state[ADDON_DATA_KEY])
        if table is None:
            return None

        report = RemoteReport.model_validate(state[REPORT_KEY]) if state[REPORT_KEY] else None
        if host_version is None:
            host_version = (await self.host_info.get_host_build_info()).version

        return build_detail_view(
            report,
            table,
            host_version=host_version,
            esr_experiment_status=self.settings.esr_experiment_status,
            finder_url=self.settings.finder_url,
        )
