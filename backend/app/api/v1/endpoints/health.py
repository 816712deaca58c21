"""
Health Check Endpoints

- /health/live  - Basic liveness (app is running)
- /health/ready - Readiness check (database reachable, lock tables present)
- /health/deep  - Diagnostics including lock sweeper stats
"""

from fastapi import APIRouter, HTTPException, status
from datetime import datetime
from typing import Dict, Any
import time

from sqlalchemy import text

from app.core.config import settings
from app.core.database import get_session_local
from app.core.logging_config import logger
from app.services.lock_sweeper import lock_sweeper


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the lock tables exist"""
    start = time.time()
    try:
        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))

            try:
                result = await session.execute(text("SELECT COUNT(*) FROM record_locks"))
                active_locks = result.scalar()
                tables_ok = True
            except Exception:
                active_locks = None
                tables_ok = False

            latency = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "latency_ms": round(latency, 2),
                "connection": "ok",
                "tables_ready": tables_ok,
                "active_locks": active_locks,
                "message": "Database connection successful"
            }
    except Exception as e:
        latency = (time.time() - start) * 1000
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round(latency, 2),
            "connection": "failed",
            "tables_ready": False,
            "error": str(e),
            "message": "Database connection failed - locks cannot be taken or checked"
        }


def check_sweeper() -> Dict[str, Any]:
    stats = lock_sweeper.get_stats()
    if not settings.LOCK_SWEEP_ENABLED:
        state = "disabled"
    elif stats["running"] and not stats["last_error"]:
        state = "healthy"
    else:
        state = "degraded"
    return {"status": state, **stats}


@router.get("/live")
async def liveness_check():
    """Liveness probe - returns 200 while the process is alive"""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "app": settings.APP_NAME,
        "version": settings.API_VERSION
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness probe - returns 200 only if the database is reachable and
    the lock tables exist, otherwise 503.
    """
    db_check = await check_database()
    is_ready = db_check.get("status") == "healthy" and db_check.get("tables_ready", False)

    response = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "database": db_check,
        }
    }

    if not is_ready:
        logger.warning(f"[HealthCheck] Readiness check failed: {response}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=response
        )

    return response


@router.get("/deep")
async def deep_health_check():
    """Full diagnostics for monitoring dashboards"""
    start_time = time.time()

    checks = {
        "database": await check_database(),
        "lock_sweeper": check_sweeper(),
    }

    statuses = [c.get("status", "unknown") for c in checks.values()]
    if "unhealthy" in statuses:
        overall = "unhealthy"
    elif "degraded" in statuses:
        overall = "degraded"
    else:
        overall = "healthy"

    response = {
        "status": overall,
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "total_check_time_ms": round((time.time() - start_time) * 1000, 2),
        "checks": checks,
    }

    if overall == "unhealthy":
        logger.error(f"[HealthCheck] Deep check unhealthy: {response}")

    return response
