"""Health and readiness endpoints (unauthenticated)."""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backoffice.infrastructure.config import settings
from backoffice.infrastructure.database import check_database
from backoffice.infrastructure.storage import get_storage

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe; never touches storage."""
    return HealthResponse(
        status="healthy",
        service="backoffice-api",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check():
    """Readiness probe.

    The SQL backend must answer a trivial query, and on either backend
    the warehouse directory must be readable, since allocation depends
    on it.

    Returns:
        ``ready`` with the backend name and warehouse count, or a 503.
    """
    try:
        if settings.storage_backend == "sql":
            await check_database()
        warehouses = await get_storage().warehouses.list_all()
    except Exception as e:
        logger.warning(
            "Readiness check failed", storage=settings.storage_backend, error=str(e)
        )
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "storage": settings.storage_backend,
                "error": type(e).__name__,
            },
        )
    return {
        "status": "ready",
        "storage": settings.storage_backend,
        "warehouses": len(warehouses),
    }
