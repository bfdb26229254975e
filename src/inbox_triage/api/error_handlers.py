"""
FastAPI exception handlers for structured error responses.
"""

from datetime import datetime

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from inbox_triage.persistence.exceptions import (
    StoreClosedError,
    StoreCorruptedError,
    StoreError,
    UnknownPropertyError,
)

logger = structlog.get_logger(__name__)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """
    Handle store failures.
    
    Corrupted or closed stores map to 503; anything else to 500.
    """
    logger.error(
        "Store error",
        error_type=type(exc).__name__,
        details=exc.details,
        path=request.url.path,
    )
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if isinstance(exc, (StoreCorruptedError, StoreClosedError))
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": "store_error",
            "message": exc.message,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


async def unknown_property_handler(request: Request, exc: UnknownPropertyError) -> JSONResponse:
    logger.warning("Unknown property", details=exc.details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "unknown_property",
            "message": exc.message,
            "details": exc.details,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    UnknownPropertyError: unknown_property_handler,
    StoreError: store_error_handler,
    Exception: generic_error_handler,
}
