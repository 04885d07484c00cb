"""
Shared response helpers for the sprint routers.

Feedback routers report every service failure as 400 with a fixed summary
and the error message; permission failures are an empty 403.
"""

import logging
from typing import Union

from fastapi import status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from reflect.core.errors import ReflectError

logger = logging.getLogger(__name__)

SPRINT_PREFIX = "/api/v1/sprints/{sprint_id}/retrospectives/{retro_id}"
FEEDBACK_TRAIL_ITEM = "Retrospective Feedback"


def forbidden() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={})


def failed(summary: str, exc: Union[ReflectError, SQLAlchemyError]) -> JSONResponse:
    """400 with ``{"message": summary, "error": <reason>}``."""
    if isinstance(exc, ReflectError):
        reason = exc.message
        logger.info(summary, extra={"error.code": exc.code, "error.message": exc.detail})
    else:
        reason = "database operation failed"
        logger.error(summary, extra={"error.message": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": summary, "error": reason},
    )
