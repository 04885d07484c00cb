"""
FastAPI exception handlers.

- ReflectError          → registry lookup, structured JSON, registry status.
- RequestValidationError → 400 "Invalid request data" (malformed JSON or schema).
- SQLAlchemyError       → 500 via REF-DB-004, logged with the driver message.
- Exception             → 500 via REF-SYS-001, logged with the traceback.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from reflect.core.errors import ReflectError
from reflect.core.errors.registry import error_registry

logger = logging.getLogger(__name__)


async def reflect_error_handler(request: Request, exc: ReflectError) -> JSONResponse:
    """Convert ReflectError into a structured JSON response."""
    entry = error_registry.get(exc.code)

    if entry is None:
        logger.error(
            "unregistered_error_code",
            extra={"error.code": exc.code, "error.message": exc.detail},
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": exc.code,
                    "title": "Internal error",
                    "message": "an unexpected error occurred",
                    "retryable": False,
                    "remediation": [],
                }
            },
        )

    log_extra = {
        "error.code": exc.code,
        "error.kind": type(exc).__name__,
        "error.message_safe": entry.safe_message,
        "error.message": exc.detail,
        **{f"error.ctx.{k}": v for k, v in exc.context.items()},
    }
    _severity_to_log_fn(entry.severity)(entry.title, extra=log_extra)

    return JSONResponse(
        status_code=entry.http_status,
        content={
            "error": {
                "code": entry.code,
                "title": entry.title,
                "message": entry.safe_message,
                "retryable": entry.retryable,
                "remediation": entry.remediation,
            }
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or schema-violating bodies are a 400, not FastAPI's default 422."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    logger.info(
        "invalid_request_data",
        extra={"error.code": "REF-API-001", "http.path": request.url.path, "errors": problems},
    )
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "error": problems},
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures are terminal for the request; surface them as REF-DB-004."""
    return await reflect_error_handler(request, ReflectError("REF-DB-004", detail=str(exc)))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected returns the REF-SYS-001 JSON body instead of bare text."""
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={"http.method": request.method, "http.path": request.url.path},
    )
    return await reflect_error_handler(request, ReflectError("REF-SYS-001", detail=str(exc)))


def _severity_to_log_fn(severity: str):
    """Map registry severity to logger method."""
    return {
        "DEBUG": logger.debug,
        "INFO": logger.info,
        "WARN": logger.warning,
        "ERROR": logger.error,
        "CRITICAL": logger.critical,
    }.get(severity, logger.error)
