"""
Reconciliation Engine - Refresh/rebuild/patch state machine.

The engine handles one job at a time (the scheduler guarantees this):

1. Staleness check: a missing report, missing table or a last check older
   than the rebuild interval forces the job to a full rebuild, whatever
   kind was requested.
2. Rebuild: show the pending badge, fetch the remote report and persist it
   together with the new check timestamp.
3. Full table rebuild (after a rebuild, or for refreshTable jobs): enumerate
   local user extensions and match each against the report.
4. Patch (installed/uninstalled/enabled/disabled): change exactly one entry.
5. Persist the table.
6. Reduce the table to a status and publish the badge.

A failed fetch aborts the job without touching the cache; the badge is put
back to what it showed before the job started. The same happens when the job
is cancelled.
"""

import logging
import time
from typing import Callable, Optional, Sequence, Tuple

from ..db import ADDON_DATA_KEY, LAST_CHECK_KEY, REPORT_KEY, CompatibilityStore
from ..config import BADGE_COLOR_PENDING, BADGE_TEXT_PENDING, DEFAULT_REBUILD_INTERVAL_MINUTES
from ..models import (
    AddonRecord,
    CompatibilityTable,
    RemoteReport,
    table_from_wire,
    table_to_wire,
)
from ..report import ReportClient
from ..status import BadgePolicy, StatusSummary, reduce_status
from .jobs import Job, JobKind
from .platform import AddonSource, BadgeSink, filter_user_extensions, is_bundled


def _now_ms() -> int:
    return int(time.time() * 1000)


def make_record(
    addon_id: str,
    name: str,
    enabled: bool,
    report: RemoteReport,
) -> AddonRecord:
    """Copy the report entry for addon_id, or synthesize an unknown record."""
    entry = report.find(addon_id)
    if entry is None:
        return AddonRecord(id=addon_id, name=name, enabled=enabled, is_unknown=True, compat=[])
    return entry.model_copy(deep=True, update={"name": name, "enabled": enabled})


class ReconciliationEngine:
    """
    Reconciles the cached compatibility table with the remote report and
    local add-on state.

    Usage:
        engine = ReconciliationEngine(store, client, addon_source, badge)
        summary = await engine.run(Job(kind=JobKind.REBUILD))
    """

    def __init__(
        self,
        store: CompatibilityStore,
        client: ReportClient,
        addon_source: AddonSource,
        badge: BadgeSink,
        rebuild_interval_minutes: int = DEFAULT_REBUILD_INTERVAL_MINUTES,
        bundled_id_suffixes: Sequence[str] = ("mozilla.org",),
        policy: Optional[BadgePolicy] = None,
        clock: Callable[[], int] = _now_ms,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.client = client
        self.addon_source = addon_source
        self.badge = badge
        self.rebuild_interval_minutes = rebuild_interval_minutes
        self.bundled_id_suffixes = tuple(bundled_id_suffixes)
        self.policy = policy or BadgePolicy()
        self.clock = clock
        self.logger = logger or logging.getLogger("compat.worker.engine")
        # Last badge published, restored when a job aborts
        self._published: Optional[Tuple[str, str]] = None

    def is_stale(self, last_check: Optional[int]) -> bool:
        if not last_check:
            return True
        return self.clock() - last_check > self.rebuild_interval_minutes * 60 * 1000

    async def run(self, job: Job) -> StatusSummary:
        """Process one job. Raises ReportFetchError when the fetch fails."""
        kind = job.kind
        state = await self.store.get_many({
            LAST_CHECK_KEY: 0,
            REPORT_KEY: None,
            ADDON_DATA_KEY: None,
        })
        report_data = state[REPORT_KEY]
        table_data = state[ADDON_DATA_KEY]

        if report_data is None or table_data is None or self.is_stale(state[LAST_CHECK_KEY]):
            if kind != JobKind.REBUILD:
                self.logger.info(f"Cache missing or stale, promoting {job.describe()} to rebuild")
            kind = JobKind.REBUILD

        try:
            if kind == JobKind.REBUILD:
                report_data = await self._refresh_report()

            report = RemoteReport.model_validate(report_data)

            if kind in (JobKind.REBUILD, JobKind.REFRESH_TABLE):
                table = await self.build_table(report)
            else:
                table = table_from_wire(table_data)
                self.apply_patch(table, kind, job, report)

            await self.store.set(**{ADDON_DATA_KEY: table_to_wire(table)})
            self.logger.debug(f"Stored table with {len(table)} add-on(s)")

            summary = reduce_status(table, self.policy)
            await self._publish(summary)
        except BaseException:
            # Includes CancelledError when the scheduler is stopped mid-job
            await self._restore_badge()
            raise

        self.logger.info(
            f"Job {job.describe()} done: badge={summary.badge_text} "
            f"(incompatible={summary.release_incompatible_count}, "
            f"esr_only={summary.esr_only_experiment_count}, unknown={summary.unknown_count})"
        )
        return summary

    async def _refresh_report(self) -> dict:
        self.logger.info("Rebuilding ...")
        await self.badge.set_text(BADGE_TEXT_PENDING)
        await self.badge.set_color(BADGE_COLOR_PENDING)
        await self.badge.disable()

        report_data = await self.client.fetch()
        await self.store.set(**{REPORT_KEY: report_data, LAST_CHECK_KEY: self.clock()})
        return report_data

    async def build_table(self, report: RemoteReport) -> CompatibilityTable:
        """Rebuild the whole table from the local add-on enumeration."""
        installed = filter_user_extensions(
            await self.addon_source.get_all(), self.bundled_id_suffixes
        )
        self.logger.debug(f"Installed user extensions: {[addon.id for addon in installed]}")
        return {
            addon.id: make_record(addon.id, addon.name, addon.enabled, report)
            for addon in installed
        }

    def apply_patch(
        self,
        table: CompatibilityTable,
        kind: JobKind,
        job: Job,
        report: RemoteReport,
    ) -> None:
        """Apply one lifecycle event to the table in place."""
        addon_id = job.addon_id
        if addon_id is None:
            return
        self.logger.debug(f"Adjusting table to local change {job.describe()}")

        if kind in (JobKind.ENABLED, JobKind.DISABLED):
            record = table.get(addon_id)
            if record is not None:
                record.enabled = kind == JobKind.ENABLED
        elif kind == JobKind.INSTALLED:
            if is_bundled(addon_id, self.bundled_id_suffixes):
                return
            table[addon_id] = make_record(addon_id, job.addon.name, job.addon.enabled, report)
        elif kind == JobKind.UNINSTALLED:
            table.pop(addon_id, None)

    async def _publish(self, summary: StatusSummary) -> None:
        await self.badge.set_text(summary.badge_text)
        await self.badge.set_color(summary.badge_color)
        await self.badge.enable()
        self._published = (summary.badge_text, summary.badge_color)

    async def _restore_badge(self) -> None:
        if self._published is not None:
            text, color = self._published
            await self.badge.set_text(text)
            await self.badge.set_color(color)
        else:
            await self.badge.set_text("")
        await self.badge.enable()
