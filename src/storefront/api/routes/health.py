"""
Health check endpoints for monitoring application status.
"""

import time
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.orm import Session

from storefront.database.connection import get_db
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, Any]:
    """Basic health check: the process is up and serving requests."""
    return {
        "status": "ok",
        "message": "Storefront API is running",
        "timestamp": _now(),
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check(response: Response, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Readiness check endpoint.

    Returns 503 when the database cannot be reached.
    """
    database = _check_database(db)
    if database["status"] != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": database["status"],
        "timestamp": _now(),
        "checks": {"database": database},
    }


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> Dict[str, str]:
    """Liveness probe. 200 while the process runs, even if dependencies are down."""
    return {"status": "alive", "timestamp": _now()}


def _check_database(db: Session) -> Dict[str, Any]:
    start_time = time.time()

    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e)[:100],
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
