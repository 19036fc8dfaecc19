"""
Health Check Endpoints
Endpoints for health checks and status monitoring.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.orm import Session

from ...config import get_settings, Settings
from ..dependencies import get_db
from ..middleware.timing import get_latency_tracker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check.

    Returns:
        Simple health status
    """
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/status", status_code=status.HTTP_200_OK)
def status_check(
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Detailed status check.

    Checks status of:
    - Database connection
    - Receipt recognition configuration
    - Request latency

    Returns:
        Detailed status information
    """
    status_info = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "components": {},
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        status_info["components"]["database"] = {
            "status": "healthy",
            "url": settings.database_url.split("@")[-1],  # Hide credentials
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        status_info["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        status_info["status"] = "degraded"

    # Recognition service is only probed by real submissions
    ocr_configured = bool(settings.ocr_api_url)
    status_info["components"]["receipt_recognition"] = {
        "status": "configured" if ocr_configured else "not_configured",
        "timeout_seconds": settings.ocr_timeout_seconds,
    }
    if not ocr_configured:
        status_info["status"] = "degraded"

    latency_stats = get_latency_tracker().get_stats()
    status_info["performance"] = {
        "request_count": latency_stats["count"],
        "latency_p50_ms": round(latency_stats["p50"], 2),
        "latency_p95_ms": round(latency_stats["p95"], 2),
        "latency_p99_ms": round(latency_stats["p99"], 2),
    }

    return status_info
