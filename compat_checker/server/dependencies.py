"""
Shared dependencies for FastAPI routes.
"""

from typing import Optional

from fastapi import HTTPException

from ..worker import CompatService

# Module-level reference set by the app on startup
_service: Optional[CompatService] = None


def set_service(service: Optional[CompatService]):
    """Set the compatibility service instance. Called during app startup."""
    global _service
    _service = service


def peek_service() -> Optional[CompatService]:
    """Return the service if one is configured, without raising."""
    return _service


def get_service() -> CompatService:
    """
    Dependency that returns the compatibility service.

    Raises HTTPException if the service is not initialized.
    """
    if _service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _service
