"""
Health check endpoints.

- GET /api/health        cheap: process alive, version, uptime
- GET /api/health/deep   adds a store round-trip
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from reflect.core.database import get_session
from reflect.core.structured_logging import APP_VERSION, SERVICE_NAME, get_uptime_s

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Cheap health check, no store calls."""
    return {
        "status": "ok",
        "version": APP_VERSION,
        "service": SERVICE_NAME,
        "uptime_s": round(get_uptime_s(), 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/deep")
async def deep_health_check(db: Session = Depends(get_session)):
    """Health check including a `SELECT 1` against the store."""
    try:
        db.connection().execute(text("SELECT 1"))
        database = {"status": "ok"}
    except SQLAlchemyError as exc:
        logger.warning("health_database_failed", extra={"error": str(exc)})
        database = {"status": "error", "message": "database unreachable"}

    return {
        "status": database["status"],
        "version": APP_VERSION,
        "components": {"database": database},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
