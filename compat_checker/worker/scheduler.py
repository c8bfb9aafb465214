"""
Refresh Scheduler - Serialized FIFO job queue.

enqueue() never blocks: it appends the job and, when nothing is in flight,
starts a drain task on the running event loop. The drain task processes jobs
strictly in arrival order, one at a time, so at most one reconciliation runs
at any moment. Throttled jobs wait throttle_delay seconds before they are
handed to the engine, bounding how often rapid triggers reach the report
endpoint.

RebuildTimer enqueues a throttled rebuild on a fixed interval, so the report
is refetched at least once per interval while the service runs.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Optional

from ..report import ReportFetchError
from .engine import ReconciliationEngine
from .jobs import Job, JobKind

logger = logging.getLogger("compat.worker.scheduler")


class RefreshScheduler:
    """
    Single-flight job queue in front of the reconciliation engine.

    Usage:
        scheduler = RefreshScheduler(engine, throttle_delay=1.0)
        scheduler.enqueue(Job(kind=JobKind.REBUILD))
        await scheduler.wait_idle()
    """

    def __init__(self, engine: ReconciliationEngine, throttle_delay: float = 1.0):
        self.engine = engine
        self.throttle_delay = throttle_delay
        self._queue: Deque[Job] = deque()
        self._in_flight = False
        self._current: Optional[Job] = None
        self._drain_task: Optional[asyncio.Task] = None
        self.completed = 0
        self.failed = 0

    @property
    def in_flight(self) -> bool:
        """True while the drain task is processing jobs."""
        return self._in_flight

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def current(self) -> Optional[Job]:
        return self._current

    def enqueue(self, job: Job) -> None:
        """Queue a job; start draining if idle. Must run on the event loop."""
        self._queue.append(job)
        logger.debug(f"Enqueued {job.describe()} (pending={len(self._queue)})")
        if self._in_flight:
            return
        self._in_flight = True
        self._drain_task = asyncio.get_running_loop().create_task(
            self._drain(), name="compat-refresh"
        )

    async def _drain(self):
        try:
            while self._queue:
                job = self._queue.popleft()
                self._current = job
                try:
                    if job.throttle and self.throttle_delay > 0:
                        await asyncio.sleep(self.throttle_delay)
                    await self.engine.run(job)
                    self.completed += 1
                except ReportFetchError as e:
                    self.failed += 1
                    logger.warning(f"Job {job.describe()} aborted: {e}")
                except Exception as e:
                    self.failed += 1
                    logger.exception(f"Job {job.describe()} failed: {e}")
                finally:
                    self._current = None
        finally:
            self._in_flight = False

    async def wait_idle(self) -> None:
        """Wait until the queue is drained and nothing is in flight."""
        while self._drain_task is not None and not self._drain_task.done():
            await asyncio.wait({self._drain_task})

    async def stop(self) -> None:
        """Cancel the in-flight drain and discard queued jobs."""
        self._queue.clear()
        task = self._drain_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


class RebuildTimer:
    """Periodically enqueues a throttled rebuild job."""

    def __init__(self, scheduler: RefreshScheduler, interval_minutes: int):
        self.scheduler = scheduler
        self.interval_minutes = interval_minutes
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(
                self._loop(), name="compat-rebuild-timer"
            )

    async def _loop(self):
        try:
            while True:
                await asyncio.sleep(self.interval_minutes * 60)
                logger.debug("Rebuild timer fired")
                self.scheduler.enqueue(Job(kind=JobKind.REBUILD, throttle=True))
        except asyncio.CancelledError:
            # Expected on stop()
            pass

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
