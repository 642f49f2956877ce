"""
Global Exception Handlers for FastAPI Application.

Unhandled exceptions are logged with an error ID and the request context and
answered with a 500. Database integrity violations (duplicate names, URLs,
likes or join rows that slipped past the routers' own checks) become a 409.
"""

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from usogui_db.core.logging_config import get_logger
from usogui_db.core.monitoring import log_error

logger = get_logger(__name__)


def _request_context(request: Request, exc: Exception, error_id: int) -> Dict[str, Any]:
    return {
        "error_id": error_id,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client": request.client.host if request.client else "unknown",
        "error_type": type(exc).__name__,
    }


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)
    context = _request_context(request, exc, error_id)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={**context, "traceback": traceback.format_exc()},
    )
    log_error(type(exc).__name__, str(exc), context)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Translate a database constraint violation into a 409 Conflict.

    Args:
        request: The HTTP request that caused the exception
        exc: The IntegrityError raised by the database driver

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)
    logger.warning(
        f"Integrity error [{error_id}] in {request.method} {request.url.path}: {exc.orig}",
        extra=_request_context(request, exc, error_id),
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": "Resource conflicts with an existing record",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
