"""Health & Readiness Probes - liveness, readiness and per-component status.

Invariants:
    - Liveness (GET /health/) answers 200 whenever the process serves requests
    - Readiness (GET /health/ready) answers 503 while the database cannot be reached
    - GET /health/components reports UP/DOWN/DISABLED per component with an overall status

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
    - Database manager resolved per request (get_db_manager), not bound at import time
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from sis.config import APP_VERSION, Settings, get_settings
from sis.infrastructure.database import get_db_manager
from sis.infrastructure.report_cache import ReportCache, get_report_cache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "sis-reporting-api"


async def _database_ok() -> bool:
    manager = get_db_manager()
    return await manager.health_check() if manager else False


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness: no dependencies are touched."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": APP_VERSION,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness: runs SELECT 1 through the session manager."""
    if not await _database_ok():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}


@router.get("/components")
async def component_health(
    settings: Settings = Depends(get_settings),
    cache: ReportCache = Depends(get_report_cache),
):
    db_ok = await _database_ok()
    components = {
        "database": {"status": "UP" if db_ok else "DOWN"},
        "report_cache": {
            "status": "UP" if cache.enabled else "DISABLED",
            **cache.stats(),
        },
        "mailer": {
            "status": "UP" if settings.email_report_notification_enabled else "DISABLED",
            "enabled": settings.email_report_notification_enabled,
            "recipients": len(settings.report_recipients),
        },
        "batch_export": {
            "status": "UP" if settings.batch_export_enabled else "DISABLED",
            "enabled": settings.batch_export_enabled,
            "max_batch_size": settings.batch_export_max_size,
        },
    }
    overall = "UP" if db_ok else "DOWN"
    if not db_ok:
        logger.warning("Component health: database DOWN")
    return {"status": overall, "components": components}
