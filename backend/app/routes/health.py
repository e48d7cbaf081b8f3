"""
Patient Notes Backend — Health Check Route
===========================================

What:  Liveness endpoint for Docker health checks and load balancers.
How:   Answers without touching storage: `{status: "ok", timestamp}` plus the
       version and configured storage backend.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app import __version__
from app.schemas.note import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        storage=request.app.state.settings.storage_backend,
    )
