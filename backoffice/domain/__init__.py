"""Domain layer - Entities, value objects, state machines, domain events.

This module exports the core domain building blocks following DDD patterns:

- **Entities**: Objects with identity (Order, Return, Warehouse)
- **Value Objects**: Immutable snapshots (ShippingAddress, LineItem, WarehouseAllocation)
- **State Machines**: Order status values and the Return approval machine
- **Criteria**: Filter values for order and return queries
- **Domain Events**: Represent significant domain occurrences
- **Exceptions**: Domain-specific errors, each tagged with an ErrorKind

Example usage:
    from backoffice.domain import LineItem, Order, OrderStatus, ShippingAddress

    order = Order.place(
        items=[LineItem(product_id="p-1", quantity=2, unit_price=Decimal("19.99"))],
        shipping_address=ShippingAddress(
            full_name="Asha Rao", phone="9876543210", address_line1="12 MG Road"
        ),
    )
    order.allocate("wh-blr-1", actor_id="staff-7")
    order.update_status(OrderStatus.SHIPPED, actor="staff-7")
    order.mark_delivered(actor="staff-7")
"""

# Base classes
from backoffice.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject

# Criteria
from backoffice.domain.criteria import OrderCriteria, Page, PageMeta, ReturnCriteria, day_bounds

# Entities
from backoffice.domain.entities import Order, Return, Warehouse

# Domain Events
from backoffice.domain.events import (
    OrderAllocated,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
    ReturnCancelled,
    ReturnOpened,
    ReturnPickupUpdated,
    ReturnRefundStatusChanged,
    ReturnStatusChanged,
)

# Exceptions
from backoffice.domain.exceptions import (
    DomainError,
    ErrorKind,
    InvalidArgumentError,
    InvalidStateError,
    InvalidStateTransitionError,
    NotFoundError,
    OrderAlreadyDeliveredError,
    OrderNotDeliveredError,
    OrderNotFoundError,
    ReturnItemMismatchError,
    ReturnNotApprovedError,
    ReturnNotCancellableError,
    ReturnNotFoundError,
    WarehouseNotFoundError,
)

# State Machines
from backoffice.domain.state_machines import (
    AllocationStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
    ReturnStatus,
    WarehouseStatus,
    validate_return_transition,
)

# Value Objects
from backoffice.domain.value_objects import (
    GeoPoint,
    LineItem,
    MapLocation,
    OrderNumber,
    ProductDescriptor,
    ReturnItem,
    ShippingAddress,
    StatusChange,
    VariantDescriptor,
    WarehouseAddress,
    WarehouseAllocation,
)

__all__ = [
    # Base classes
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "ValueObject",
    # Entities
    "Order",
    "Return",
    "Warehouse",
    # Criteria
    "OrderCriteria",
    "ReturnCriteria",
    "Page",
    "PageMeta",
    "day_bounds",
    # Value Objects
    "GeoPoint",
    "LineItem",
    "MapLocation",
    "OrderNumber",
    "ProductDescriptor",
    "ReturnItem",
    "ShippingAddress",
    "StatusChange",
    "VariantDescriptor",
    "WarehouseAddress",
    "WarehouseAllocation",
    # State Machines
    "AllocationStatus",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "RefundStatus",
    "ReturnStatus",
    "WarehouseStatus",
    "validate_return_transition",
    # Domain Events - Order
    "OrderPlaced",
    "OrderStatusChanged",
    "OrderDelivered",
    "OrderAllocated",
    # Domain Events - Return
    "ReturnOpened",
    "ReturnStatusChanged",
    "ReturnRefundStatusChanged",
    "ReturnPickupUpdated",
    "ReturnCancelled",
    # Exceptions
    "DomainError",
    "ErrorKind",
    "NotFoundError",
    "InvalidArgumentError",
    "InvalidStateError",
    "InvalidStateTransitionError",
    "OrderNotFoundError",
    "OrderAlreadyDeliveredError",
    "OrderNotDeliveredError",
    "WarehouseNotFoundError",
    "ReturnNotFoundError",
    "ReturnNotApprovedError",
    "ReturnNotCancellableError",
    "ReturnItemMismatchError",
]
