"""Status router for the verifierd API.

Provides health check and status information.
"""

import time

from fastapi import APIRouter
from fastapi import Request

from .. import __version__
from ..models import StatusResponse

router = APIRouter(tags=["status"])

# Track daemon start time for uptime calculation
_start_time = time.time()


@router.get("/api/v2/status", response_model=StatusResponse)
async def get_status(request: Request) -> StatusResponse:
    """Get daemon status.

    Returns:
        Daemon status including uptime and known versions per language
    """
    clients = request.app.state.clients or {}
    return StatusResponse(
        status="running",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        languages={language: len(client.compilers.list_versions_sorted()) for language, client in clients.items()},
    )


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
