"""
Lifecycle event source.

The host reports installed/uninstalled/enabled/disabled events here; the
service subscribes the scheduler (and the add-on inventory) to it.
"""

import logging
from typing import Callable, List

from ..models import AddonEvent
from .jobs import LIFECYCLE_KINDS

logger = logging.getLogger("compat.worker.events")

Listener = Callable[[str, AddonEvent], None]

EVENT_KINDS = tuple(kind.value for kind in LIFECYCLE_KINDS)


class LifecycleEventSource:
    """Fan-out of add-on lifecycle events to subscribed listeners."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, kind: str, event: AddonEvent) -> None:
        if kind not in EVENT_KINDS:
            raise ValueError(f"Unknown lifecycle event '{kind}', expected one of {EVENT_KINDS}")
        logger.debug(f"Event {kind}: {event.id}")
        for listener in list(self._listeners):
            listener(kind, event)
