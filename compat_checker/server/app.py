"""
Compatibility REST API - FastAPI application setup.

Endpoints:
- GET  /health
- GET  /status
- GET  /detail
- PUT  /addons
- POST /events/{kind}
- POST /rebuild
"""

import logging
import os

from fastapi import FastAPI

from ..config import load_settings
from ..worker import CompatService, StaticHostInfo
from . import dependencies
from .routes import router

logger = logging.getLogger("compat.api")

app = FastAPI(
    title="Add-on Compatibility API",
    description="Cached add-on compatibility status for the host's release and ESR channels",
    version="1.0.0"
)

app.include_router(router)


@app.on_event("startup")
async def startup():
    """Create the service (unless one was injected) and start it."""
    service = dependencies.peek_service()
    if service is None:
        settings = load_settings()
        host_info = StaticHostInfo(os.environ.get("COMPAT_HOST_VERSION"))
        service = CompatService.from_settings(settings, host_info=host_info)
        dependencies.set_service(service)
        logger.info(f"[STARTUP] Store: {settings.store}, report: {settings.report_url}")

    await service.start()


@app.on_event("shutdown")
async def shutdown():
    """Stop the timer and cancel queued work."""
    service = dependencies.peek_service()
    if service is not None:
        await service.stop()
        logger.info("[SHUTDOWN] Service stopped")
