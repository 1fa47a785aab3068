"""Allocation application service.

Binds an order to a warehouse on behalf of an explicit staff actor.
Re-allocation overwrites the previous binding. Inventory is not
reserved or moved.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from backoffice.application.repositories import OrderRepository, WarehouseDirectory
from backoffice.application.results import ServiceResult, publish_events
from backoffice.domain.base import utcnow
from backoffice.domain.entities import Order
from backoffice.domain.exceptions import (
    DomainError,
    InvalidArgumentError,
    OrderNotFoundError,
    WarehouseNotFoundError,
)
from backoffice.infrastructure.storage import get_storage

logger = structlog.get_logger()


@dataclass
class AllocateResult(ServiceResult):
    """Result of allocating an order."""

    order: Order | None = None
    previous_warehouse_id: str | None = None


class AllocationService:
    """Coordinates warehouse allocation of orders."""

    def __init__(
        self,
        orders: OrderRepository | None = None,
        warehouses: WarehouseDirectory | None = None,
        request_id: str | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        storage = get_storage()
        self.orders = orders or storage.orders
        self.warehouses = warehouses or storage.warehouses
        self.request_id = request_id
        self.clock = clock

    async def allocate(
        self,
        order_id: str,
        warehouse_id: str | None,
        actor_id: str | None,
    ) -> AllocateResult:
        """Allocate an order to a warehouse.

        Args:
            order_id: Order identifier.
            warehouse_id: Target warehouse.
            actor_id: Staff identity performing the allocation.

        Returns:
            AllocateResult with the updated order.
        """
        try:
            if not warehouse_id or not actor_id:
                raise InvalidArgumentError("warehouseId and allocating actor are required")

            order = await self.orders.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if await self.warehouses.get(warehouse_id) is None:
                raise WarehouseNotFoundError(warehouse_id)

            previous = order.allocated_warehouse_id
            order.allocate(warehouse_id, actor_id, now=self.clock())
            await self.orders.save(order)
        except DomainError as e:
            logger.warning(
                "Order allocation rejected",
                order_id=order_id,
                warehouse_id=warehouse_id,
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return AllocateResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to allocate order",
                order_id=order_id,
                warehouse_id=warehouse_id,
                request_id=self.request_id,
            )
            return AllocateResult.internal("Failed to allocate order")

        logger.info(
            "Order allocated",
            order_id=order_id,
            warehouse_id=warehouse_id,
            previous_warehouse_id=previous,
            actor=actor_id,
            request_id=self.request_id,
        )
        publish_events(order, self.request_id)
        return AllocateResult(order=order, previous_warehouse_id=previous)


def get_allocation_service(request_id: str | None = None) -> AllocationService:
    """Get allocation service instance."""
    return AllocationService(request_id=request_id)
