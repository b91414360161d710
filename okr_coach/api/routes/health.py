"""
Health check endpoints.

/health reports the database and the coaching thresholds in effect;
/health/live and /health/ready are the liveness and readiness checks.
"""

import time

from fastapi import APIRouter, HTTPException
import structlog

from okr_coach.api.dependencies import CoachingServiceDep
from okr_coach.core.config import settings
from okr_coach.persistence.database import check_database_health

log = structlog.get_logger(__name__)

router = APIRouter()

_started = time.monotonic()


@router.get("/health")
async def health_check(service: CoachingServiceDep):
    db_health = await check_database_health()
    phases = service.config.phases

    return {
        "status": "healthy" if db_health["status"] == "healthy" else "unhealthy",
        "version": "0.1.0",
        "debug": settings.debug,
        "uptime_seconds": int(time.monotonic() - _started),
        "components": {
            "database": db_health,
            "coaching": {
                "objective_threshold": phases.objective_threshold,
                "key_result_threshold": phases.key_result_threshold,
                "max_refinement_iterations": phases.max_refinement_iterations,
            },
        },
    }


@router.get("/health/live")
async def liveness():
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness():
    """503 until the database answers a query."""
    db_health = await check_database_health()

    if db_health["status"] != "healthy":
        log.warning("readiness_check_failed", error=db_health.get("error"))
        raise HTTPException(status_code=503, detail="Database not ready")

    return {"status": "ready"}
