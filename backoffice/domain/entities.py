"""Domain entities for the fulfillment and returns workflow.

The Order aggregate owns line items, the address snapshot, delivery
and warehouse allocation. The Return aggregate is a child workflow
that points back at one order line; the order never embeds its
returns. Warehouse is a read-only directory entry.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from backoffice.domain.base import AggregateRoot, Entity, new_id, utcnow
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
from backoffice.domain.exceptions import (
    InvalidArgumentError,
    OrderAlreadyDeliveredError,
    OrderNotDeliveredError,
    ReturnItemMismatchError,
    ReturnNotApprovedError,
    ReturnNotCancellableError,
    ReturnNotFoundError,
)
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
from backoffice.domain.value_objects import (
    GeoPoint,
    LineItem,
    OrderNumber,
    ReturnItem,
    ShippingAddress,
    StatusChange,
    WarehouseAddress,
    WarehouseAllocation,
)


# ============================================================================
# Warehouse Entity
# ============================================================================


@dataclass(eq=False)
class Warehouse(Entity):
    """A warehouse as published by the warehouse directory.

    Attributes:
        id: Warehouse identifier.
        name: Display name.
        address: Postal address.
        location: Geo point.
        status: Operating status.
    """

    id: str
    name: str
    address: WarehouseAddress | None = None
    location: GeoPoint | None = None
    status: WarehouseStatus = WarehouseStatus.ACTIVE


# ============================================================================
# Order Aggregate Root
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Order(AggregateRoot):
    """Order aggregate root.

    Orders are handed over by checkout and then moved through
    fulfillment by staff. ``status`` is deliberately open: any member
    of ``OrderStatus`` may be written from any other, except that a
    delivered order stays delivered.

    Attributes:
        id: Unique order identifier.
        order_number: Human-facing order reference.
        user_id: Customer who placed the order.
        items: Line items, immutable after placement.
        shipping_address: Address snapshot, immutable after placement.
        billing_address: Optional billing snapshot.
        payment_method: Payment method chosen at checkout.
        payment_status: Payment state recorded by checkout.
        total_amount: Sum of line totals.
        final_amount: Amount charged after discounts.
        status: Current user-visible status.
        is_delivered: Delivery flag, monotonic.
        delivered_at: When delivery was (last) confirmed.
        allocation: Warehouse binding, or None when unallocated.
        status_history: Audit trail of status writes.
    """

    order_number: str
    items: tuple[LineItem, ...]
    shipping_address: ShippingAddress
    total_amount: Decimal
    final_amount: Decimal
    user_id: str | None = None
    billing_address: ShippingAddress | None = None
    payment_method: PaymentMethod = PaymentMethod.COD
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: OrderStatus = OrderStatus.PROCESSING
    is_delivered: bool = False
    delivered_at: datetime | None = None
    allocation: WarehouseAllocation | None = None
    status_history: list[StatusChange] = field(default_factory=list, compare=False)

    @classmethod
    def place(
        cls,
        *,
        items: list[LineItem],
        shipping_address: ShippingAddress,
        user_id: str | None = None,
        billing_address: ShippingAddress | None = None,
        payment_method: PaymentMethod = PaymentMethod.COD,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        final_amount: Decimal | None = None,
        status: OrderStatus = OrderStatus.PROCESSING,
        order_id: str | None = None,
        created_at: datetime | None = None,
    ) -> "Order":
        """Create an order from checkout data.

        Args:
            items: Line items; at least one.
            shipping_address: Shipping snapshot.
            user_id: Customer reference.
            billing_address: Billing snapshot.
            payment_method: Payment method.
            payment_status: Payment state.
            final_amount: Charged amount; defaults to the line total.
            status: Initial status.
            order_id: Optional pre-generated id.
            created_at: Optional creation time (imports and tests).

        Returns:
            New Order instance.

        Raises:
            InvalidArgumentError: If there are no items or the status is delivered.
        """
        if not items:
            raise InvalidArgumentError("An order needs at least one line item", field="items")
        if status == OrderStatus.DELIVERED:
            raise InvalidArgumentError(
                "Orders cannot be placed as delivered", field="status", value=status.value
            )

        now = created_at or utcnow()
        total = sum((item.total_price for item in items), Decimal("0"))
        order = cls(
            id=order_id or new_id(),
            order_number=str(OrderNumber.generate()),
            user_id=user_id,
            items=tuple(items),
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            payment_status=payment_status,
            total_amount=total,
            final_amount=total if final_amount is None else final_amount,
            status=status,
            created_at=now,
            updated_at=now,
        )
        order.status_history.append(
            StatusChange(
                from_status=None,
                to_status=status.value,
                at=now,
                actor="checkout",
                reason="Order placed",
            )
        )
        order._record_event(
            OrderPlaced(
                aggregate_id=order.id,
                aggregate_type="Order",
                order_id=order.id,
                order_number=order.order_number,
                status=status.value,
                item_count=order.item_count,
            )
        )
        return order

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def allocation_status(self) -> AllocationStatus:
        if self.allocation is None:
            return AllocationStatus.UNALLOCATED
        return AllocationStatus.ALLOCATED

    @property
    def allocated_warehouse_id(self) -> str | None:
        return self.allocation.warehouse_id if self.allocation else None

    @property
    def allocated_by(self) -> str | None:
        return self.allocation.allocated_by if self.allocation else None

    @property
    def allocated_at(self) -> datetime | None:
        return self.allocation.allocated_at if self.allocation else None

    def find_line(self, product_id: str, variant_id: str | None) -> LineItem | None:
        """Find the line item for a (product, variant) pair."""
        for item in self.items:
            if item.refers_to(product_id, variant_id):
                return item
        return None

    # -------------------------------------------------------------------------
    # State Transitions
    # -------------------------------------------------------------------------

    def update_status(
        self,
        new_status: OrderStatus,
        actor: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Set the order status.

        Any status may follow any other. Writing ``delivered`` performs
        a delivery confirmation so the delivery flag and timestamp stay
        in step with the status.

        Args:
            new_status: Target status.
            actor: Staff identity, for the audit trail.
            now: Override for the transition time.

        Raises:
            OrderAlreadyDeliveredError: If the order is delivered and the
                target is any other status.
        """
        if new_status == OrderStatus.DELIVERED:
            self.mark_delivered(actor=actor, now=now)
            return
        if self.is_delivered:
            raise OrderAlreadyDeliveredError(self.id, new_status.value)

        now = now or utcnow()
        from_status = self.status
        self.status = new_status
        self._append_history(from_status, new_status, now, actor, None)
        self._touch(now)
        self._record_event(
            OrderStatusChanged(
                aggregate_id=self.id,
                aggregate_type="Order",
                order_id=self.id,
                from_status=from_status.value,
                to_status=new_status.value,
                actor=actor,
            )
        )

    def mark_delivered(self, actor: str | None = None, now: datetime | None = None) -> None:
        """Confirm delivery.

        Safe to repeat: the status stays ``delivered`` but ``delivered_at``
        is re-stamped with the time of the latest call.

        Args:
            actor: Staff identity, for the audit trail.
            now: Override for the delivery time.
        """
        now = now or utcnow()
        from_status = self.status
        redelivered = self.is_delivered

        self.is_delivered = True
        self.delivered_at = now
        self.status = OrderStatus.DELIVERED
        self._append_history(
            from_status,
            OrderStatus.DELIVERED,
            now,
            actor,
            "Delivery re-confirmed" if redelivered else "Delivery confirmed",
        )
        self._touch(now)
        self._record_event(
            OrderDelivered(
                aggregate_id=self.id,
                aggregate_type="Order",
                order_id=self.id,
                delivered_at=now,
                redelivered=redelivered,
            )
        )

    def allocate(self, warehouse_id: str, actor_id: str, now: datetime | None = None) -> None:
        """Bind the order to a warehouse, replacing any previous binding.

        Args:
            warehouse_id: Target warehouse.
            actor_id: Staff identity making the allocation.
            now: Override for the allocation time.

        Raises:
            InvalidArgumentError: If either id is empty.
        """
        if not warehouse_id or not actor_id:
            raise InvalidArgumentError("warehouseId and allocating actor are required")

        now = now or utcnow()
        previous = self.allocated_warehouse_id
        self.allocation = WarehouseAllocation(
            warehouse_id=warehouse_id,
            allocated_by=actor_id,
            allocated_at=now,
        )
        self._touch(now)
        self._record_event(
            OrderAllocated(
                aggregate_id=self.id,
                aggregate_type="Order",
                order_id=self.id,
                warehouse_id=warehouse_id,
                previous_warehouse_id=previous,
                allocated_by=actor_id,
                allocated_at=now,
            )
        )

    def _append_history(
        self,
        from_status: OrderStatus,
        to_status: OrderStatus,
        at: datetime,
        actor: str | None,
        reason: str | None,
    ) -> None:
        self.status_history.append(
            StatusChange(
                from_status=from_status.value,
                to_status=to_status.value,
                at=at,
                actor=actor,
                reason=reason,
            )
        )


# ============================================================================
# Return Aggregate Root
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Return(AggregateRoot):
    """Return request aggregate root.

    Three sub-states move independently: ``status`` follows the
    approval state machine, ``refund_status`` and the pickup fields are
    plain settable values.

    Attributes:
        id: Unique return identifier.
        order_id: Back-reference to the owning order (no cascade).
        user_id: Customer who requested the return.
        item: The order line being returned.
        reason: Customer's reason.
        refund_amount: Amount to refund.
        comments: Free-text comments.
        status: Approval status.
        refund_status: Refund sub-state.
        refunded_at: Set while refund_status is ``refunded``.
        processed_at: Set when status leaves ``pending``.
        pickup_scheduled: Whether a pickup has been booked.
        pickup_date: Booked pickup time.
        pickup_status: Free-text pickup progress.
    """

    order_id: str
    item: ReturnItem
    user_id: str | None = None
    reason: str | None = None
    refund_amount: Decimal | None = None
    comments: str | None = None
    status: ReturnStatus = ReturnStatus.PENDING
    refund_status: RefundStatus = RefundStatus.PENDING
    refunded_at: datetime | None = None
    processed_at: datetime | None = None
    pickup_scheduled: bool = False
    pickup_date: datetime | None = None
    pickup_status: str | None = None

    @classmethod
    def open(
        cls,
        *,
        order: Order,
        product_id: str,
        variant_id: str | None,
        quantity: int,
        user_id: str | None = None,
        reason: str | None = None,
        refund_amount: Decimal | None = None,
        comments: str | None = None,
        return_id: str | None = None,
        now: datetime | None = None,
    ) -> "Return":
        """Open a return for one line of a delivered order.

        Raises:
            OrderNotDeliveredError: If the order is not delivered.
            ReturnItemMismatchError: If the order has no such line.
            InvalidArgumentError: If quantity is outside 1..ordered.
        """
        now = now or utcnow()
        if not order.is_delivered:
            raise OrderNotDeliveredError(order.id, order.status.value)

        line = order.find_line(product_id, variant_id)
        if line is None:
            raise ReturnItemMismatchError(order.id, product_id, variant_id)
        if quantity < 1 or quantity > line.quantity:
            raise InvalidArgumentError(
                f"Return quantity must be between 1 and {line.quantity}, got {quantity}",
                field="quantity",
                value=quantity,
            )

        item = ReturnItem(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            price_at_order=line.unit_price,
        )
        returned = cls(
            id=return_id or new_id(),
            order_id=order.id,
            user_id=user_id,
            item=item,
            reason=reason,
            refund_amount=(
                refund_amount if refund_amount is not None else line.unit_price * quantity
            ),
            comments=comments,
            created_at=now,
            updated_at=now,
        )
        returned._record_event(
            ReturnOpened(
                aggregate_id=returned.id,
                aggregate_type="Return",
                return_id=returned.id,
                order_id=order.id,
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
            )
        )
        return returned

    # -------------------------------------------------------------------------
    # Status Machine
    # -------------------------------------------------------------------------

    def decide(
        self,
        decision: ReturnStatus,
        processed_at: datetime | None = None,
        now: datetime | None = None,
    ) -> None:
        """Approve or reject a pending return.

        Args:
            decision: ``approved`` or ``rejected``.
            processed_at: Explicit processing time (back-dated corrections);
                defaults to now.

        Raises:
            InvalidArgumentError: If decision is not approved/rejected.
            InvalidStateTransitionError: If the return is not pending.
        """
        if decision not in (ReturnStatus.APPROVED, ReturnStatus.REJECTED):
            raise InvalidArgumentError(
                f"Invalid status '{decision.value}'", field="status", value=decision.value
            )
        validate_return_transition(self.id, self.status, decision)

        now = now or utcnow()
        from_status = self.status
        self.status = decision
        self.processed_at = processed_at or now
        self._touch(now)
        self._record_event(
            ReturnStatusChanged(
                aggregate_id=self.id,
                aggregate_type="Return",
                return_id=self.id,
                from_status=from_status.value,
                to_status=decision.value,
                processed_at=self.processed_at,
            )
        )

    def complete(self, now: datetime | None = None) -> None:
        """Close an approved return.

        Raises:
            ReturnNotApprovedError: If the return is not approved. State
                is left untouched.
        """
        if self.status != ReturnStatus.APPROVED:
            raise ReturnNotApprovedError(self.id, self.status.value)
        validate_return_transition(self.id, self.status, ReturnStatus.COMPLETED)

        self.status = ReturnStatus.COMPLETED
        self._touch(now)
        self._record_event(
            ReturnStatusChanged(
                aggregate_id=self.id,
                aggregate_type="Return",
                return_id=self.id,
                from_status=ReturnStatus.APPROVED.value,
                to_status=ReturnStatus.COMPLETED.value,
                processed_at=self.processed_at,
            )
        )

    # -------------------------------------------------------------------------
    # Independent Sub-States
    # -------------------------------------------------------------------------

    def set_refund_status(self, refund_status: RefundStatus, now: datetime | None = None) -> None:
        """Set the refund sub-state.

        ``refunded`` stamps ``refunded_at``; any other value clears it.
        """
        now = now or utcnow()
        from_status = self.refund_status
        self.refund_status = refund_status
        self.refunded_at = now if refund_status == RefundStatus.REFUNDED else None
        self._touch(now)
        self._record_event(
            ReturnRefundStatusChanged(
                aggregate_id=self.id,
                aggregate_type="Return",
                return_id=self.id,
                from_status=from_status.value,
                to_status=refund_status.value,
                refunded_at=self.refunded_at,
            )
        )

    def update_pickup(
        self,
        scheduled: bool | None = None,
        date: datetime | None = None,
        pickup_status: str | None = None,
        now: datetime | None = None,
    ) -> list[str]:
        """Update supplied pickup fields; omitted fields are left alone.

        Returns:
            Names of the fields that were written.
        """
        changed: list[str] = []
        if scheduled is not None:
            self.pickup_scheduled = scheduled
            changed.append("pickup_scheduled")
        if date is not None:
            self.pickup_date = date
            changed.append("pickup_date")
        if pickup_status:
            self.pickup_status = pickup_status
            changed.append("pickup_status")

        if changed:
            self._touch(now)
            self._record_event(
                ReturnPickupUpdated(
                    aggregate_id=self.id,
                    aggregate_type="Return",
                    return_id=self.id,
                    changed_fields=tuple(changed),
                )
            )
        return changed

    def withdraw(self, user_id: str) -> None:
        """Check that ``user_id`` may withdraw this return and record it.

        Raises:
            ReturnNotFoundError: If the return belongs to someone else.
            ReturnNotCancellableError: If it is no longer pending.
        """
        if self.user_id != user_id:
            raise ReturnNotFoundError(self.id)
        if not self.status.is_open():
            raise ReturnNotCancellableError(self.id, self.status.value)
        self._record_event(
            ReturnCancelled(
                aggregate_id=self.id,
                aggregate_type="Return",
                return_id=self.id,
                user_id=user_id,
            )
        )
