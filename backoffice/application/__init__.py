"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from backoffice.application.allocation_service import (
    AllocationService,
    get_allocation_service,
)
from backoffice.application.order_service import (
    OrderService,
    get_order_service,
)
from backoffice.application.return_service import (
    ReturnService,
    get_return_service,
)

__all__ = [
    "AllocationService",
    "get_allocation_service",
    "OrderService",
    "get_order_service",
    "ReturnService",
    "get_return_service",
]
