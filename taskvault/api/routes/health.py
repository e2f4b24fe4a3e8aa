"""Health Probe — liveness plus store connectivity, no authentication.

Invariants:
    - 200 {status: "OK", timestamp, version, database: "connected", environment}
      when SELECT 1 succeeds
    - 503 "Health check failed: <reason>" when the store is unreachable

Design Decisions:
    - db_manager is read through the module at call time; it is only set once
      the lifespan has run init_db
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from taskvault.config import get_settings
from taskvault.infrastructure import database
from taskvault.schemas.envelope import success_envelope

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("")
async def health_check():
    settings = get_settings()
    if database.db_manager is None:
        ok, reason = False, "database not initialized"
    else:
        ok, reason = await database.db_manager.health_check()
    if not ok:
        logger.error(f"Health check failed: {reason}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "error": f"Health check failed: {reason}"},
        )
    return success_envelope({
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
        "database": "connected",
        "environment": settings.environment,
    })
