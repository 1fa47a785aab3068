"""Tests for domain state machines."""

import pytest

from backoffice.domain import (
    InvalidArgumentError,
    InvalidStateTransitionError,
    OrderStatus,
    PaymentMethod,
    RefundStatus,
    ReturnStatus,
)
from backoffice.domain.state_machines import validate_return_transition


class TestOrderStatus:
    """Tests for OrderStatus values."""

    def test_all_wire_values_parse(self) -> None:
        """Every documented status value parses."""
        for value in (
            "processing",
            "pending",
            "picked",
            "packed",
            "dispatched",
            "assigned",
            "shipped",
            "delivered",
            "cancelled",
        ):
            assert OrderStatus.parse(value).value == value

    def test_unknown_value_is_invalid_argument(self) -> None:
        """Unknown status raises InvalidArgumentError naming the field."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            OrderStatus.parse("teleported")
        assert exc_info.value.details["field"] == "status"
        assert exc_info.value.details["value"] == "teleported"

    def test_none_is_invalid_argument(self) -> None:
        """A missing status is rejected."""
        with pytest.raises(InvalidArgumentError):
            OrderStatus.parse(None)

    def test_parse_is_case_sensitive(self) -> None:
        """Wire values are lowercase only."""
        with pytest.raises(InvalidArgumentError):
            OrderStatus.parse("SHIPPED")


class TestReturnStatus:
    """Tests for ReturnStatus state machine."""

    def test_pending_can_be_approved_or_rejected(self) -> None:
        """PENDING can transition to APPROVED or REJECTED."""
        assert ReturnStatus.PENDING.can_transition_to(ReturnStatus.APPROVED)
        assert ReturnStatus.PENDING.can_transition_to(ReturnStatus.REJECTED)

    def test_pending_cannot_complete(self) -> None:
        """PENDING cannot transition directly to COMPLETED."""
        assert not ReturnStatus.PENDING.can_transition_to(ReturnStatus.COMPLETED)

    def test_approved_can_only_complete(self) -> None:
        """APPROVED can only transition to COMPLETED."""
        assert ReturnStatus.APPROVED.allowed_transitions() == [ReturnStatus.COMPLETED]

    def test_rejected_is_terminal(self) -> None:
        """REJECTED is a terminal state."""
        assert ReturnStatus.REJECTED.is_terminal()
        assert ReturnStatus.REJECTED.allowed_transitions() == []

    def test_completed_is_terminal(self) -> None:
        """COMPLETED is a terminal state."""
        assert ReturnStatus.COMPLETED.is_terminal()

    def test_only_pending_is_open(self) -> None:
        """Only PENDING awaits a staff decision."""
        assert ReturnStatus.PENDING.is_open()
        assert not ReturnStatus.APPROVED.is_open()
        assert not ReturnStatus.REJECTED.is_open()
        assert not ReturnStatus.COMPLETED.is_open()

    @pytest.mark.parametrize("value", ["approved", "rejected"])
    def test_parse_decision_accepts_decisions(self, value: str) -> None:
        """Staff decisions parse."""
        assert ReturnStatus.parse_decision(value).value == value

    @pytest.mark.parametrize("value", ["pending", "completed", "maybe", None])
    def test_parse_decision_rejects_other_values(self, value) -> None:
        """Anything but approved/rejected is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            ReturnStatus.parse_decision(value)

    def test_validate_transition_raises_with_allowed_list(self) -> None:
        """Invalid transition error lists the allowed targets."""
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            validate_return_transition("ret-1", ReturnStatus.REJECTED, ReturnStatus.APPROVED)
        assert exc_info.value.details["allowed_transitions"] == []
        assert exc_info.value.details["current_state"] == "rejected"

    def test_validate_transition_passes_for_valid_move(self) -> None:
        """Valid transitions do not raise."""
        validate_return_transition("ret-1", ReturnStatus.APPROVED, ReturnStatus.COMPLETED)


class TestRefundAndPayment:
    """Tests for the independent sub-state enums."""

    def test_refund_status_values(self) -> None:
        """Refund sub-state has three values."""
        assert {s.value for s in RefundStatus} == {"pending", "refunded", "not_applicable"}

    def test_refund_status_parse_names_field(self) -> None:
        """Invalid refund status names the refundStatus field."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            RefundStatus.parse("partially")
        assert exc_info.value.field == "refundStatus"

    def test_payment_method_parse(self) -> None:
        """Payment method accepts known values only."""
        assert PaymentMethod.parse("upi") == PaymentMethod.UPI
        with pytest.raises(InvalidArgumentError):
            PaymentMethod.parse("barter")
