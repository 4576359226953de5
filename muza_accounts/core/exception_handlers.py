"""
FastAPI exception handlers for custom exceptions.

WHY: Exception handlers convert our custom exceptions into properly
formatted JSON responses with correct HTTP status codes, ensuring
consistent error handling across the entire API.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import AppException, DownstreamError
from muza_accounts.core.messages import get_message


logger = logging.getLogger(__name__)


def _request_id(request: Request):
    context = getattr(request.state, "context", None)
    return context.request_id if context else None


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom AppException and its subclasses.

    WHY: Downstream failures are logged with their raw cause before the
    sanitized body goes out; client errors are logged at info level only.
    """
    if isinstance(exc, DownstreamError):
        logger.error(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={
                "request_id": _request_id(request),
                "path": request.url.path,
                "context": exc.context,
            },
        )
    else:
        logger.info(
            f"Request rejected with {exc.status_code}: {exc.__class__.__name__}",
            extra={
                "request_id": _request_id(request),
                "path": request.url.path,
                "error_code": exc.error_code,
            },
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    WHY: Request body shape errors (wrong JSON types, malformed body) get
    the same 400 envelope as the ValidationError raised by services.
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "code": None,
            "status_code": 400,
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions.

    WHY: Some HTTP exceptions (404, 405, missing bearer token) are raised by
    Starlette/FastAPI before reaching our routes. This handler ensures they
    match our error format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTPException",
            "message": exc.detail,
            "code": None,
            "status_code": exc.status_code,
            "details": None,
        },
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    WHY: Log the full traceback but return a generic error to avoid leaking
    implementation details (OWASP A04: Insecure Design).
    """
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={"request_id": _request_id(request), "path": request.url.path},
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": get_message("internal_error"),
            "code": None,
            "status_code": 500,
            "details": {"reason": str(exc)} if settings.EXPOSE_ERROR_DETAILS else None,
        },
    )
