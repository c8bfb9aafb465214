"""
Compatibility API routes.

The host pushes lifecycle events and its add-on inventory here and reads
back the badge and detail view. Mutating endpoints return immediately after
queueing; pass ?wait=true to block until the queue has drained.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..models import AddonEvent, LocalAddon
from ..worker import CompatService
from ..worker.events import EVENT_KINDS
from .dependencies import get_service

logger = logging.getLogger("compat.api")

router = APIRouter(tags=["compat"])


# =============================================================================
# Request/Response Models
# =============================================================================

class QueuedResponse(BaseModel):
    """Response for endpoints that enqueue work."""
    queued: str
    pending: int
    in_flight: bool
    status: Optional[Dict[str, Any]] = None


async def _queued(service: CompatService, queued: str, wait: bool) -> QueuedResponse:
    status = None
    if wait:
        await service.scheduler.wait_idle()
        status = await service.get_status()
    return QueuedResponse(
        queued=queued,
        pending=service.scheduler.pending,
        in_flight=service.scheduler.in_flight,
        status=status,
    )


# =============================================================================
# Routes
# =============================================================================

@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/status")
async def get_status(service: CompatService = Depends(get_service)):
    """Badge state, counts and last check time."""
    return await service.get_status()


@router.get("/detail")
async def get_detail(
    host_version: Optional[str] = Query(None, description="Running host version"),
    service: CompatService = Depends(get_service),
):
    """Ranked per-add-on compatibility view."""
    detail = await service.get_detail(host_version=host_version)
    if detail is None:
        raise HTTPException(status_code=404, detail="No compatibility data yet")
    return detail.to_dict()


@router.put("/addons", response_model=QueuedResponse)
async def replace_addons(
    addons: List[LocalAddon],
    wait: bool = Query(False),
    service: CompatService = Depends(get_service),
):
    """Replace the installed add-on inventory and refresh the table."""
    try:
        service.replace_inventory(addons)
    except TypeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info(f"Inventory replaced with {len(addons)} add-on(s)")
    return await _queued(service, "refreshTable", wait)


@router.post("/events/{kind}", response_model=QueuedResponse)
async def post_event(
    kind: str,
    event: AddonEvent,
    wait: bool = Query(False),
    service: CompatService = Depends(get_service),
):
    """Report an installed/uninstalled/enabled/disabled lifecycle event."""
    if kind not in EVENT_KINDS:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown event kind '{kind}', expected one of {list(EVENT_KINDS)}"
        )
    service.events.emit(kind, event)
    return await _queued(service, kind, wait)


@router.post("/rebuild", response_model=QueuedResponse)
async def rebuild(
    wait: bool = Query(False),
    service: CompatService = Depends(get_service),
):
    """Queue a full rebuild (report fetch subject to throttling)."""
    service.request_rebuild()
    return await _queued(service, "rebuild", wait)
