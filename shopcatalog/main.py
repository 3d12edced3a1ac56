"""Shop Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopcatalog.api import (
    categories_router,
    health_router,
    products_router,
    reviews_router,
)
from shopcatalog.api.middleware import setup_middleware
from shopcatalog.domain.exceptions import (
    AlreadyReviewedError,
    AuthenticationError,
    CatalogError,
    ConflictError,
    DuplicateNameError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
)
from shopcatalog.infrastructure.config import settings
from shopcatalog.infrastructure.database import create_tables, engine
from shopcatalog.infrastructure.logging_config import configure_logging

configure_logging(settings)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting Shop Catalog API",
        version=settings.api_version,
        debug=settings.debug,
    )

    if settings.auto_create_tables:
        await create_tables()
        logger.info("Catalog tables ensured")

    yield

    # Shutdown
    logger.info("Shutting down Shop Catalog API")
    await engine.dispose()


app = FastAPI(
    title="Shop Catalog API",
    description="Product catalog backend: categories, products, reviews and listings",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, caller context, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(reviews_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=headers,
    )


def _classify(exc: CatalogError) -> tuple[int, str]:
    """Map a catalog error to its HTTP status and error code."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND, f"{exc.entity_type.upper()}_NOT_FOUND"
    if isinstance(exc, DuplicateNameError):
        return status.HTTP_409_CONFLICT, "DUPLICATE_NAME"
    if isinstance(exc, AlreadyReviewedError):
        return status.HTTP_409_CONFLICT, "ALREADY_REVIEWED"
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT, "CONFLICT"
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR"
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED, "AUTHENTICATION_REQUIRED"
    if isinstance(exc, PermissionDeniedError):
        return status.HTTP_403_FORBIDDEN, "PERMISSION_DENIED"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "STORE_ERROR"


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Handle catalog errors with consistent format."""
    status_code, error_code = _classify(exc)

    if isinstance(exc, ValidationError):
        details = [{"field": exc.field, "message": exc.details.get("reason", exc.message)}]
    else:
        details = [{"field": key, "message": str(value)} for key, value in exc.details.items()]

    message = exc.message
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.exception(
            "Catalog store failure",
            path=request.url.path,
            method=request.method,
            error=str(exc.__cause__ or exc),
        )
        if not settings.debug:
            message = "An internal error occurred"
            details = []
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error_code=error_code,
            reason=exc.message,
        )

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return _error_response(request, status_code, error_code, message, details, headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request bodies and parameters as 400."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return _error_response(
        request,
        exc.status_code,
        error_code,
        message,
        details,
        getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
