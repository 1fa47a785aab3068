"""Domain exceptions.

All domain-level errors that represent business rule violations.
Every error carries a ``kind`` from a small taxonomy so the application
and API layers can map it to a client or server failure without
inspecting concrete exception types.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure taxonomy shared by every layer."""

    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_STATE = "invalid_state"
    INTERNAL = "internal"
    UNAUTHORIZED = "unauthorized"


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    kind: ErrorKind = ErrorKind.INVALID_STATE
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Taxonomy Roots
# ============================================================================


class NotFoundError(DomainError):
    """Raised when an entity id does not resolve."""

    kind = ErrorKind.NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidArgumentError(DomainError):
    """Raised for malformed or out-of-enum input."""

    kind = ErrorKind.INVALID_ARGUMENT
    error_code = "INVALID_ARGUMENT"

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        details: dict[str, Any] = {}
        if field is not None:
            details["field"] = field
            details["value"] = value
        super().__init__(message, details=details)
        self.field = field


class InvalidStateError(DomainError):
    """Raised when an operation is not legal in the current state."""

    kind = ErrorKind.INVALID_STATE
    error_code = "INVALID_STATE"


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(InvalidStateError):
    """Raised when an invalid state transition is attempted.

    This error indicates that the requested operation cannot be performed
    in the current state of the entity.
    """

    error_code = "INVALID_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "Return").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Order Errors
# ============================================================================


class OrderNotFoundError(NotFoundError):
    """Raised when an order id does not resolve."""

    error_code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str) -> None:
        super().__init__("Order", order_id)


class OrderAlreadyDeliveredError(InvalidStateError):
    """Raised when a delivered order would be moved off ``delivered``."""

    error_code = "ORDER_ALREADY_DELIVERED"

    def __init__(self, order_id: str, target_status: str) -> None:
        super().__init__(
            f"Order {order_id} is delivered and cannot move to '{target_status}'",
            details={"order_id": order_id, "target_status": target_status},
        )


class OrderNotDeliveredError(InvalidStateError):
    """Raised when a return is requested for an undelivered order."""

    error_code = "ORDER_NOT_DELIVERED"

    def __init__(self, order_id: str, current_status: str) -> None:
        super().__init__(
            f"Order {order_id} must be delivered before a return can be opened "
            f"(current status '{current_status}')",
            details={"order_id": order_id, "current_status": current_status},
        )


# ============================================================================
# Warehouse Errors
# ============================================================================


class WarehouseNotFoundError(NotFoundError):
    """Raised when a warehouse id does not resolve in the directory."""

    error_code = "WAREHOUSE_NOT_FOUND"

    def __init__(self, warehouse_id: str) -> None:
        super().__init__("Warehouse", warehouse_id)


# ============================================================================
# Return Errors
# ============================================================================


class ReturnNotFoundError(NotFoundError):
    """Raised when a return id does not resolve."""

    error_code = "RETURN_NOT_FOUND"

    def __init__(self, return_id: str) -> None:
        super().__init__("Return", return_id)


class ReturnNotApprovedError(InvalidStateError):
    """Raised when completing a return that has not been approved."""

    error_code = "RETURN_NOT_APPROVED"

    def __init__(self, return_id: str, current_status: str) -> None:
        super().__init__(
            f"Return {return_id} must be approved before completion "
            f"(current status '{current_status}')",
            details={"return_id": return_id, "current_status": current_status},
        )


class ReturnNotCancellableError(InvalidStateError):
    """Raised when a requester withdraws a return that is already processed."""

    error_code = "RETURN_NOT_CANCELLABLE"

    def __init__(self, return_id: str, current_status: str) -> None:
        super().__init__(
            f"Return {return_id} cannot be cancelled after approval or rejection",
            details={"return_id": return_id, "current_status": current_status},
        )


class ReturnItemMismatchError(InvalidArgumentError):
    """Raised when a return references a line item the order does not have."""

    error_code = "RETURN_ITEM_MISMATCH"

    def __init__(self, order_id: str, product_id: str, variant_id: str | None) -> None:
        super().__init__(
            f"Order {order_id} has no line item for product {product_id}"
            + (f" variant {variant_id}" if variant_id else ""),
            field="productId",
            value=product_id,
        )
