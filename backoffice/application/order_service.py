"""Order application service.

Orchestrates the Order aggregate:
- Intake of orders handed over by checkout
- Status writes with audit history (delivery is monotonic)
- Delivery confirmation
- Joined reads and filtered listing
- Administrative hard delete (returns are left in place)
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import structlog

from backoffice.application.repositories import (
    CatalogDirectory,
    OrderRepository,
    ReturnRepository,
    WarehouseDirectory,
)
from backoffice.application.results import (
    ServiceResult,
    parse_date,
    publish_events,
)
from backoffice.domain.base import utcnow
from backoffice.domain.criteria import OrderCriteria
from backoffice.domain.entities import Order, Warehouse
from backoffice.domain.exceptions import DomainError, OrderNotFoundError
from backoffice.domain.state_machines import OrderStatus, PaymentMethod, PaymentStatus
from backoffice.domain.value_objects import (
    LineItem,
    ProductDescriptor,
    ShippingAddress,
    VariantDescriptor,
)
from backoffice.infrastructure.config import settings
from backoffice.infrastructure.storage import get_storage

logger = structlog.get_logger()


# ============================================================================
# Read Models
# ============================================================================


@dataclass
class OrderView:
    """An order joined with its directory descriptors."""

    order: Order
    warehouse: Warehouse | None = None
    products: dict[str, ProductDescriptor] = field(default_factory=dict)
    variants: dict[str, VariantDescriptor] = field(default_factory=dict)


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class PlaceOrderResult(ServiceResult):
    """Result of placing an order."""

    order: Order | None = None


@dataclass
class GetOrderResult(ServiceResult):
    """Result of getting an order."""

    view: OrderView | None = None


@dataclass
class UpdateOrderResult(ServiceResult):
    """Result of a status write or delivery confirmation."""

    order: Order | None = None


@dataclass
class ListOrdersResult(ServiceResult):
    """Result of listing orders."""

    views: list[OrderView] = field(default_factory=list)


@dataclass
class DeleteOrderResult(ServiceResult):
    """Result of deleting an order."""

    order_id: str | None = None
    orphaned_returns: int = 0


# ============================================================================
# Order Service
# ============================================================================


class OrderService:
    """Application service for the Order aggregate."""

    def __init__(
        self,
        orders: OrderRepository | None = None,
        returns: ReturnRepository | None = None,
        warehouses: WarehouseDirectory | None = None,
        catalog: CatalogDirectory | None = None,
        request_id: str | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize service.

        Args:
            orders: Order repository.
            returns: Return repository (for orphan accounting on delete).
            warehouses: Warehouse directory.
            catalog: Catalog directory.
            request_id: Request ID for correlation.
            clock: Time source.
        """
        storage = get_storage()
        self.orders = orders or storage.orders
        self.returns = returns or storage.returns
        self.warehouses = warehouses or storage.warehouses
        self.catalog = catalog or storage.catalog
        self.request_id = request_id
        self.clock = clock

    async def place_order(
        self,
        *,
        items: list[LineItem],
        shipping_address: ShippingAddress,
        user_id: str | None = None,
        billing_address: ShippingAddress | None = None,
        payment_method: PaymentMethod | str = PaymentMethod.COD,
        payment_status: PaymentStatus | str = PaymentStatus.PENDING,
        final_amount: Decimal | None = None,
        status: OrderStatus | str = OrderStatus.PROCESSING,
    ) -> PlaceOrderResult:
        """Accept an order handed over by checkout.

        Args:
            items: Line items.
            shipping_address: Shipping snapshot.
            user_id: Customer reference.
            billing_address: Billing snapshot.
            payment_method: Payment method.
            payment_status: Payment state.
            final_amount: Charged amount.
            status: Initial status.

        Returns:
            PlaceOrderResult with the new order.
        """
        try:
            order = Order.place(
                items=items,
                shipping_address=shipping_address,
                user_id=user_id,
                billing_address=billing_address,
                payment_method=PaymentMethod.parse(payment_method),
                payment_status=PaymentStatus.parse(payment_status),
                final_amount=final_amount,
                status=OrderStatus.parse(status),
                created_at=self.clock(),
            )
            await self.orders.save(order)
        except DomainError as e:
            logger.warning(
                "Order intake rejected",
                error_code=e.error_code,
                error=e.message,
                request_id=self.request_id,
            )
            return PlaceOrderResult.from_error(e)
        except Exception:
            logger.exception("Failed to place order", request_id=self.request_id)
            return PlaceOrderResult.internal("Failed to place order")

        logger.info(
            "Order placed",
            order_id=order.id,
            order_number=order.order_number,
            item_count=order.item_count,
            final_amount=str(order.final_amount),
            request_id=self.request_id,
        )
        publish_events(order, self.request_id)
        return PlaceOrderResult(order=order)

    async def get_order(self, order_id: str) -> GetOrderResult:
        """Get an order joined with warehouse and catalog descriptors.

        Args:
            order_id: Order identifier.

        Returns:
            GetOrderResult with the joined view if found.
        """
        try:
            order = await self.orders.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            views = await self._join([order])
        except DomainError as e:
            return GetOrderResult.from_error(e)
        except Exception:
            logger.exception("Failed to load order", order_id=order_id, request_id=self.request_id)
            return GetOrderResult.internal("Failed to load order")
        return GetOrderResult(view=views[0])

    async def list_orders(
        self,
        search: str | None = None,
        status: OrderStatus | str | None = None,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        warehouse_id: str | None = None,
    ) -> ListOrdersResult:
        """List orders matching the filters, newest first.

        Args:
            search: Substring of shipping name or phone (case-insensitive).
            status: Exact order status.
            start_date: Inclusive start day.
            end_date: Inclusive end day.
            warehouse_id: Allocated warehouse.

        Returns:
            ListOrdersResult with joined views.
        """
        try:
            criteria = OrderCriteria(
                search=search,
                status=OrderStatus.parse(status) if status else None,
                start_date=parse_date(start_date, "startDate"),
                end_date=parse_date(end_date, "endDate"),
                warehouse_id=warehouse_id or None,
                tz=ZoneInfo(settings.business_timezone),
            )
            orders = await self.orders.list(criteria)
            views = await self._join(orders)
        except DomainError as e:
            return ListOrdersResult.from_error(e)
        except Exception:
            logger.exception("Failed to list orders", request_id=self.request_id)
            return ListOrdersResult.internal("Failed to list orders")
        return ListOrdersResult(views=views)

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus | str,
        actor: str | None = None,
    ) -> UpdateOrderResult:
        """Write an order status.

        Any status value is accepted from any other, except that a
        delivered order cannot leave ``delivered``. Writing ``delivered``
        confirms delivery.

        Args:
            order_id: Order identifier.
            status: Target status.
            actor: Staff identity.

        Returns:
            UpdateOrderResult with the updated order.
        """
        try:
            target = OrderStatus.parse(status)
            order = await self._load(order_id)
            from_status = order.status
            order.update_status(target, actor=actor, now=self.clock())
            await self.orders.save(order)
        except DomainError as e:
            logger.warning(
                "Order status update rejected",
                order_id=order_id,
                target_status=str(status),
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return UpdateOrderResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to update order status", order_id=order_id, request_id=self.request_id
            )
            return UpdateOrderResult.internal("Failed to update order status")

        logger.info(
            "Order status transitioned",
            order_id=order_id,
            from_status=from_status.value,
            to_status=order.status.value,
            actor=actor,
            request_id=self.request_id,
        )
        publish_events(order, self.request_id)
        return UpdateOrderResult(order=order)

    async def mark_delivered(self, order_id: str, actor: str | None = None) -> UpdateOrderResult:
        """Confirm delivery; repeating re-stamps the delivery time.

        Args:
            order_id: Order identifier.
            actor: Staff identity.

        Returns:
            UpdateOrderResult with the updated order.
        """
        try:
            order = await self._load(order_id)
            from_status = order.status
            order.mark_delivered(actor=actor, now=self.clock())
            await self.orders.save(order)
        except DomainError as e:
            return UpdateOrderResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to mark order delivered", order_id=order_id, request_id=self.request_id
            )
            return UpdateOrderResult.internal("Failed to mark order delivered")

        logger.info(
            "Order delivered",
            order_id=order_id,
            from_status=from_status.value,
            delivered_at=order.delivered_at.isoformat(),
            actor=actor,
            request_id=self.request_id,
        )
        publish_events(order, self.request_id)
        return UpdateOrderResult(order=order)

    async def delete_order(self, order_id: str, actor: str | None = None) -> DeleteOrderResult:
        """Hard-delete an order. Its returns are not touched.

        Args:
            order_id: Order identifier.
            actor: Staff identity.

        Returns:
            DeleteOrderResult with the number of returns left orphaned.
        """
        try:
            deleted = await self.orders.delete(order_id)
            if not deleted:
                raise OrderNotFoundError(order_id)
            orphaned = await self.returns.count_for_order(order_id)
        except DomainError as e:
            return DeleteOrderResult.from_error(e)
        except Exception:
            logger.exception("Failed to delete order", order_id=order_id, request_id=self.request_id)
            return DeleteOrderResult.internal("Failed to delete order")

        logger.info("Order deleted", order_id=order_id, actor=actor, request_id=self.request_id)
        if orphaned:
            logger.warning(
                "Deleted order still has returns",
                order_id=order_id,
                orphaned_returns=orphaned,
                request_id=self.request_id,
            )
        return DeleteOrderResult(order_id=order_id, orphaned_returns=orphaned)

    async def _load(self, order_id: str) -> Order:
        order = await self.orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _join(self, orders: list[Order]) -> list[OrderView]:
        """Batch-join orders with warehouse and catalog descriptors."""
        warehouse_ids = {o.allocated_warehouse_id for o in orders if o.allocated_warehouse_id}
        product_ids = {item.product_id for o in orders for item in o.items}
        variant_ids = {item.variant_id for o in orders for item in o.items if item.variant_id}

        warehouses = await self.warehouses.get_many(warehouse_ids)
        products = await self.catalog.get_products(product_ids)
        variants = await self.catalog.get_variants(variant_ids)

        return [
            OrderView(
                order=o,
                warehouse=warehouses.get(o.allocated_warehouse_id or ""),
                products={
                    i.product_id: products[i.product_id]
                    for i in o.items
                    if i.product_id in products
                },
                variants={
                    i.variant_id: variants[i.variant_id]
                    for i in o.items
                    if i.variant_id and i.variant_id in variants
                },
            )
            for o in orders
        ]


# ============================================================================
# Service Factory
# ============================================================================


def get_order_service(request_id: str | None = None) -> OrderService:
    """Get order service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        OrderService instance.
    """
    return OrderService(request_id=request_id)
