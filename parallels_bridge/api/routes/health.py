"""Health & Readiness Checks — liveness and readiness of the bridge process.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 when the audit database is unreachable
      or no dispatcher is installed (readiness)
    - A missing prlctl binary is reported, not gated on: tool calls then
      fail individually with PRLCTL_NOT_FOUND
"""

import logging
import shutil

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

import parallels_bridge.infrastructure.database as db_module
from parallels_bridge import __version__
from parallels_bridge.config import Settings, get_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "parallels-bridge",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request, settings: Settings = Depends(get_settings)):
    manager = db_module.db_manager
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if manager is None or not await manager.health_check():
        reason = "database_unavailable"
    elif dispatcher is None:
        reason = "dispatcher_missing"
    else:
        reason = None
    if reason:
        logger.warning(f"Readiness check failed: {reason}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": reason},
        )
    return {
        "status": "ready",
        "checks": {
            "database": "healthy",
            "tools": len(dispatcher.list_registered()),
            "prlctl": shutil.which(settings.prlctl_binary),
        },
    }
