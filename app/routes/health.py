"""Health check endpoints."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.db.session import SessionLocal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
def readiness_check(request: Request):
    """Readiness probe - checks DB and Temporal."""
    checks = {}
    all_ok = True

    # Check database
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("Database readiness check failed: %s", e)
        checks["database"] = f"error: {e}"
        all_ok = False

    # Check Temporal (the scheduled sweep depends on it)
    if getattr(request.app.state, "temporal", None) is not None:
        checks["temporal"] = "ok"
    else:
        checks["temporal"] = "not connected"
        all_ok = False

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )
