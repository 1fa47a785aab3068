"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from backoffice.api.health import router as health_router
from backoffice.api.orders import router as orders_router
from backoffice.api.returns import router as returns_router
from backoffice.api.warehouses import router as warehouses_router

__all__ = [
    "health_router",
    "orders_router",
    "returns_router",
    "warehouses_router",
]
