"""
Health Check Endpoints
"""

import logging
from typing import Any

from fastapi import APIRouter

from user_service.api.dependencies import AppSettings, Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(settings: AppSettings) -> dict[str, str]:
    """
    Basic health check endpoint.

    Returns:
        Basic application information and status
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(settings: AppSettings, store: Store) -> dict[str, Any]:
    """
    Readiness check endpoint.

    Verifies that the session store is reachable.
    """
    db_healthy = await store.check_connection()

    return {
        "status": "ready" if db_healthy else "degraded",
        "app": settings.app_name,
        "version": settings.version,
        "checks": {"database": "ok" if db_healthy else "ko"},
    }
