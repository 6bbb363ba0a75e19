"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET / answers "API Working" whenever the process is up
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 if database is unreachable (readiness)
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from tunechat.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])
root_router = APIRouter(tags=["health"])


@root_router.get("/", response_class=PlainTextResponse)
async def root():
    return "API Working"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Basic liveness probe. Returns 200 if the process is up."""
    gateway = getattr(request.app.state, "gateway", None)
    return {
        "status": "healthy",
        "service": "tunechat-gateway",
        "version": "1.0.0",
        "connections": len(gateway.registry) if gateway else 0,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
