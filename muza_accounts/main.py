"""
Main FastAPI application.

WHY: This is the entry point for the accounts service. It wires middleware,
routes, exception handlers, the mail provider and avatar storage.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from muza_accounts.api import auth, bought_products, users
from muza_accounts.core.config import settings
from muza_accounts.core.exception_handlers import (
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from muza_accounts.core.exceptions import AppException
from muza_accounts.middleware import (
    RateLimitMiddleware,
    RequestContextMiddleware,
    RequestIdLogFilter,
)
from muza_accounts.services.avatar_storage import PUBLIC_PREFIX, ProfileImageStorage
from muza_accounts.services.email import EmailService


def create_app(
    email_service: Optional[EmailService] = None,
    image_storage: Optional[ProfileImageStorage] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern lets tests inject a mock mail provider and a
    temporary upload directory without touching global settings.

    Args:
        email_service: Mail sender (defaults to the configured provider)
        image_storage: Avatar storage (defaults to UPLOAD_DIR)

    Returns:
        Configured FastAPI application instance
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdLogFilter) for f in handler.filters):
            handler.addFilter(RequestIdLogFilter())

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Muza Life user accounts API",
        version=settings.VERSION,
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )

    app.state.email_service = email_service or EmailService()
    app.state.image_storage = image_storage or ProfileImageStorage()

    # Register exception handlers
    # WHY: One error envelope for every failure, with downstream details
    # hidden unless EXPOSE_ERROR_DETAILS is set.
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Added first so it runs innermost; request context wraps it and has the
    # client IP ready for per-client limits.
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Avatars are served from the same directory they are written to
    upload_root = Path(app.state.image_storage.root)
    upload_root.mkdir(parents=True, exist_ok=True)
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(upload_root)), name="uploads")

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """Liveness probe; does not touch the database or mail provider."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": f"{settings.API_PREFIX}/docs",
        }

    app.include_router(users.router, prefix=settings.API_PREFIX)
    app.include_router(bought_products.router, prefix=settings.API_PREFIX)
    app.include_router(auth.router, prefix=settings.API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "muza_accounts.main:app",
        host="0.0.0.0",
        port=5000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
