"""Storefront catalog main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from storefront.api.catalog import router as catalog_router
from storefront.api.categories import router as categories_router
from storefront.api.health import router as health_router
from storefront.api.middleware import setup_middleware
from storefront.api.products import router as products_router
from storefront.application.catalog_view import reset_catalog_view
from storefront.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StorageError,
    UploadError,
    ValidationError,
)
from storefront.infrastructure.config import settings
from storefront.infrastructure.logging_config import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting storefront catalog",
        version=settings.api_version,
        debug=settings.debug,
        storage_backend=settings.storage_backend,
    )

    yield

    reset_catalog_view()
    logger.info("Shutting down storefront catalog")


app = FastAPI(
    title="Storefront Catalog API",
    description="Product catalog with image storage and change notification",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, admin auth, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(catalog_router)

# Serve locally stored images under the public base URL
if settings.storage_backend == "local":
    app.mount(
        "/media",
        StaticFiles(directory=settings.storage_path, check_dir=False),
        name="media",
    )


# ============================================================================
# Custom Exception Handlers
# ============================================================================


# Most specific first; UploadError must precede StorageError
ERROR_STATUS: list[tuple[type[DomainError], int, str]] = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR"),
    (ConflictError, status.HTTP_409_CONFLICT, "CONFLICT"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (UploadError, status.HTTP_502_BAD_GATEWAY, "UPLOAD_FAILED"),
    (StorageError, status.HTTP_502_BAD_GATEWAY, "STORAGE_ERROR"),
    (AuthorizationError, status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED"),
]


def error_status(exc: DomainError) -> tuple[int, str]:
    """Map a domain error to an HTTP status and error code."""
    for error_type, status_code, error_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, error_code
    return status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR"


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors with consistent format."""
    request_id = getattr(request.state, "request_id", None)
    status_code, error_code = error_status(exc)

    details = []
    if isinstance(exc, ValidationError):
        details = [{"field": exc.field, "message": exc.reason}]

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        path=request.url.path,
        method=request.method,
        error_code=error_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
    )
