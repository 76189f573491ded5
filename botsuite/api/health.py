"""
botsuite/api/health.py

Purpose: Liveness and health probes
"""

import os
import time
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from botsuite.core.config import settings
from botsuite.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Checks the users file is readable and the upload directory writable.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "checks": {},
    }

    users_file = Path(settings.USERS_FILE)
    if users_file.exists() and not os.access(users_file, os.R_OK):
        health_status["checks"]["credential_store"] = "unreadable"
        health_status["status"] = "unhealthy"
    else:
        health_status["checks"]["credential_store"] = "ok"

    upload_dir = Path(settings.UPLOAD_DIR)
    if upload_dir.is_dir() and os.access(upload_dir, os.W_OK):
        health_status["checks"]["upload_dir"] = "ok"
    else:
        logger.warning(f"Upload directory {upload_dir} is not writable")
        health_status["checks"]["upload_dir"] = "not_writable"
        health_status["status"] = "unhealthy"

    health_status["checks"]["bots"] = sorted(settings.bots)

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@router.get("/live")
async def liveness_check():
    return {"status": "alive"}
