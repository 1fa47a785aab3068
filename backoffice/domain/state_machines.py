"""State machines for domain entities.

Order status is an open tagged value: staff may correct it to any
member, so it carries no transition table. Return status is a real
state machine. Allocation and refund are independent sub-states.
"""

from enum import Enum

from backoffice.domain.exceptions import InvalidArgumentError, InvalidStateTransitionError


# ============================================================================
# Order Status
# ============================================================================


class OrderStatus(str, Enum):
    """User-visible order states.

    No transition table is enforced between these values; see
    ``Order.update_status`` for the single guard (delivery is monotonic).
    """

    PROCESSING = "processing"
    PENDING = "pending"
    PICKED = "picked"
    PACKED = "packed"
    DISPATCHED = "dispatched"
    ASSIGNED = "assigned"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str | None) -> "OrderStatus":
        """Parse a wire value.

        Raises:
            InvalidArgumentError: If the value is not a known status.
        """
        return _parse_enum(cls, value, "status")


class AllocationStatus(str, Enum):
    """Warehouse allocation states."""

    UNALLOCATED = "unallocated"
    ALLOCATED = "allocated"


class WarehouseStatus(str, Enum):
    """Operating status of a warehouse in the directory."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    UNDER_MAINTENANCE = "under_maintenance"


class PaymentMethod(str, Enum):
    """Payment methods recorded by checkout."""

    COD = "cod"
    CARD = "card"
    UPI = "upi"
    PAYPAL = "paypal"

    @classmethod
    def parse(cls, value: str | None) -> "PaymentMethod":
        return _parse_enum(cls, value, "paymentMethod")


class PaymentStatus(str, Enum):
    """Payment states recorded by checkout."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: str | None) -> "PaymentStatus":
        return _parse_enum(cls, value, "paymentStatus")


# ============================================================================
# Return State Machine
# ============================================================================


class ReturnStatus(str, Enum):
    """Return request lifecycle states.

    State diagram:
        PENDING ──────────────► REJECTED
          │
          │ approve
          ▼
        APPROVED
          │
          │ complete
          ▼
        COMPLETED
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str | None) -> "ReturnStatus":
        return _parse_enum(cls, value, "status")

    @classmethod
    def parse_decision(cls, value: str | None) -> "ReturnStatus":
        """Parse a staff decision; only ``approved`` and ``rejected`` are accepted.

        Raises:
            InvalidArgumentError: For any other value.
        """
        raw = value.value if isinstance(value, Enum) else value
        if raw not in _DECISIONS:
            raise InvalidArgumentError(
                f"Invalid status '{raw}'. Allowed: {sorted(_DECISIONS)}",
                field="status",
                value=raw,
            )
        return cls(raw)

    def can_transition_to(self, target: "ReturnStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _RETURN_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["ReturnStatus"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return sorted(_RETURN_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state.

        Returns:
            True if no further transitions are possible.
        """
        return len(_RETURN_TRANSITIONS.get(self, set())) == 0

    def is_open(self) -> bool:
        """Check if the return is still awaiting a staff decision."""
        return self == ReturnStatus.PENDING


# Return state transitions (defined outside enum to avoid Enum restrictions)
_RETURN_TRANSITIONS: dict[ReturnStatus, set[ReturnStatus]] = {
    ReturnStatus.PENDING: {ReturnStatus.APPROVED, ReturnStatus.REJECTED},
    ReturnStatus.APPROVED: {ReturnStatus.COMPLETED},
    ReturnStatus.REJECTED: set(),  # Terminal state
    ReturnStatus.COMPLETED: set(),  # Terminal state
}

_DECISIONS = {ReturnStatus.APPROVED.value, ReturnStatus.REJECTED.value}


class RefundStatus(str, Enum):
    """Refund sub-state of a return, independent of its main status."""

    PENDING = "pending"
    REFUNDED = "refunded"
    NOT_APPLICABLE = "not_applicable"

    @classmethod
    def parse(cls, value: str | None) -> "RefundStatus":
        return _parse_enum(cls, value, "refundStatus")


# ============================================================================
# Helpers
# ============================================================================


def _parse_enum(enum_cls: type[Enum], value: str | None, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = [member.value for member in enum_cls]
        raise InvalidArgumentError(
            f"Invalid {field} '{value}'. Allowed: {allowed}",
            field=field,
            value=value,
        ) from None


def validate_return_transition(
    return_id: str,
    current_status: ReturnStatus,
    target_status: ReturnStatus,
) -> None:
    """Validate and raise if return state transition is invalid.

    Args:
        return_id: Return identifier for error message.
        current_status: Current return status.
        target_status: Target return status.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise InvalidStateTransitionError(
            entity_type="Return",
            entity_id=return_id,
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
        )
