"""Back-office API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown
events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.api.errors import error_response
from backoffice.api.health import router as health_router
from backoffice.api.middleware import setup_middleware
from backoffice.api.orders import router as orders_router
from backoffice.api.returns import router as returns_router
from backoffice.api.warehouses import router as warehouses_router
from backoffice.infrastructure.config import settings
from backoffice.infrastructure.database import dispose_engine
from backoffice.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging()
    logger.info(
        "Starting back-office API",
        version=settings.api_version,
        debug=settings.debug,
        storage_backend=settings.storage_backend,
    )

    yield

    logger.info("Shutting down back-office API")
    if settings.storage_backend == "sql":
        await dispose_engine()


app = FastAPI(
    title="Back-Office Fulfillment API",
    description="Order fulfillment and returns workflow for the retail back-office",
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

# Setup custom middleware (request ID, API key auth, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(orders_router)
app.include_router(returns_router)
app.include_router(warehouses_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


_KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "invalid_argument",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "invalid_argument",
    status.HTTP_409_CONFLICT: "invalid_state",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    default_kind = _KIND_BY_STATUS.get(
        exc.status_code, "internal" if exc.status_code >= 500 else "invalid_argument"
    )
    if isinstance(detail, dict):
        kind = detail.get("kind", default_kind)
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details")
    else:
        kind = default_kind
        error_code = kind.upper()
        message = str(detail)
        details = None

    return error_response(request, exc.status_code, kind, error_code, message, details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as invalid arguments."""
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "invalid_argument",
        "VALIDATION_ERROR",
        "Request validation failed",
        jsonable_encoder(exc.errors()),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal",
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
