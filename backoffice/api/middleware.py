"""HTTP middleware: request correlation, API key plus actor identity, last-resort errors.

Added in reverse order of execution, so a request id exists before
authentication runs and every 401 carries it.
"""

import secrets
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from backoffice.api.errors import error_response
from backoffice.infrastructure.config import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
ACTOR_HEADER = "X-Actor-ID"

PUBLIC_PATHS = {"/health", "/ready", "/docs", "/redoc", "/openapi.json"}


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign or propagate ``X-Request-ID`` and log one line per request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# API Key Authentication Middleware
# ============================================================================


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(("/docs", "/redoc"))


def _unauthorized(request: Request, error_code: str, message: str) -> Response:
    return error_response(
        request,
        status.HTTP_401_UNAUTHORIZED,
        "unauthorized",
        error_code,
        message,
        headers={"WWW-Authenticate": "Bearer"},
    )


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require ``Authorization: Bearer <api key>`` on every non-public path.

    Staff and customer front-ends share the key; the person acting is
    named per request in ``X-Actor-ID``. It is exposed to handlers as
    ``request.state.actor_id`` (``None`` when the header is absent) and
    bound into the log context. Handlers decide whether an actor is
    required.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path.rstrip("/") or "/"
        if _is_public(path):
            return await call_next(request)

        scheme, _, api_key = request.headers.get("Authorization", "").partition(" ")
        if not scheme:
            logger.warning("Missing authorization header", path=path, method=request.method)
            return _unauthorized(request, "UNAUTHORIZED", "Missing Authorization header")
        if scheme.lower() != "bearer" or not api_key:
            logger.warning("Invalid authorization format", path=path, method=request.method)
            return _unauthorized(
                request,
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <api_key>'",
            )
        if not secrets.compare_digest(api_key.encode(), settings.backoffice_api_key.encode()):
            logger.warning("Invalid API key", path=path, method=request.method)
            return _unauthorized(request, "INVALID_API_KEY", "Invalid API key")

        actor_id = request.headers.get(ACTOR_HEADER, "").strip() or None
        request.state.actor_id = actor_id
        if actor_id is None:
            return await call_next(request)

        structlog.contextvars.bind_contextvars(actor_id=actor_id)
        try:
            return await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("actor_id")


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn anything that escapes the exception handlers into an ``internal`` envelope."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "internal",
                "INTERNAL_ERROR",
                "An internal error occurred",
            )


def setup_middleware(app: FastAPI) -> None:
    """Install the middleware stack: request id, then API key, then errors."""
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(RequestIdMiddleware)
