"""Domain events for the fulfillment and returns workflow.

Events describe every state change of an Order or Return. Application
services collect them after persistence and write them to the audit
log.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from backoffice.domain.base import DomainEvent


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ============================================================================
# Order Events
# ============================================================================


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Event raised when checkout hands over a new order."""

    event_type: ClassVar[str] = "order.placed"

    order_id: str = ""
    order_number: str = ""
    status: str = ""
    item_count: int = 0

    def _payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "status": self.status,
            "item_count": self.item_count,
        }


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Event raised on every order status write, including no-op rewrites."""

    event_type: ClassVar[str] = "order.status_changed"

    order_id: str = ""
    from_status: str = ""
    to_status: str = ""
    actor: str | None = None

    def _payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
        }


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    """Event raised when an order is marked delivered."""

    event_type: ClassVar[str] = "order.delivered"

    order_id: str = ""
    delivered_at: datetime | None = None
    redelivered: bool = False

    def _payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "delivered_at": _iso(self.delivered_at),
            "redelivered": self.redelivered,
        }


@dataclass(frozen=True)
class OrderAllocated(DomainEvent):
    """Event raised when an order is (re-)allocated to a warehouse."""

    event_type: ClassVar[str] = "order.allocated"

    order_id: str = ""
    warehouse_id: str = ""
    previous_warehouse_id: str | None = None
    allocated_by: str = ""
    allocated_at: datetime | None = None

    def _payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "warehouse_id": self.warehouse_id,
            "previous_warehouse_id": self.previous_warehouse_id,
            "allocated_by": self.allocated_by,
            "allocated_at": _iso(self.allocated_at),
        }


# ============================================================================
# Return Events
# ============================================================================


@dataclass(frozen=True)
class ReturnOpened(DomainEvent):
    """Event raised when a customer opens a return request."""

    event_type: ClassVar[str] = "return.opened"

    return_id: str = ""
    order_id: str = ""
    product_id: str = ""
    variant_id: str | None = None
    quantity: int = 0

    def _payload(self) -> dict[str, Any]:
        return {
            "return_id": self.return_id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class ReturnStatusChanged(DomainEvent):
    """Event raised when a return is approved, rejected or completed."""

    event_type: ClassVar[str] = "return.status_changed"

    return_id: str = ""
    from_status: str = ""
    to_status: str = ""
    processed_at: datetime | None = None

    def _payload(self) -> dict[str, Any]:
        return {
            "return_id": self.return_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "processed_at": _iso(self.processed_at),
        }


@dataclass(frozen=True)
class ReturnRefundStatusChanged(DomainEvent):
    """Event raised when the refund sub-state changes."""

    event_type: ClassVar[str] = "return.refund_status_changed"

    return_id: str = ""
    from_status: str = ""
    to_status: str = ""
    refunded_at: datetime | None = None

    def _payload(self) -> dict[str, Any]:
        return {
            "return_id": self.return_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "refunded_at": _iso(self.refunded_at),
        }


@dataclass(frozen=True)
class ReturnPickupUpdated(DomainEvent):
    """Event raised when any pickup field changes."""

    event_type: ClassVar[str] = "return.pickup_updated"

    return_id: str = ""
    changed_fields: tuple[str, ...] = ()

    def _payload(self) -> dict[str, Any]:
        return {
            "return_id": self.return_id,
            "changed_fields": list(self.changed_fields),
        }


@dataclass(frozen=True)
class ReturnCancelled(DomainEvent):
    """Event raised when a requester withdraws a pending return."""

    event_type: ClassVar[str] = "return.cancelled"

    return_id: str = ""
    user_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"return_id": self.return_id, "user_id": self.user_id}
