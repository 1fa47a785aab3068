"""Tests for domain value objects."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from backoffice.domain import (
    InvalidArgumentError,
    LineItem,
    OrderNumber,
    ShippingAddress,
    StatusChange,
    VariantDescriptor,
)


class TestOrderNumber:
    """Tests for OrderNumber value object."""

    def test_generate_has_prefix_and_length(self) -> None:
        """Generated numbers carry the prefix and a fixed-length suffix."""
        number = OrderNumber.generate()
        assert str(number).startswith("#ORD")
        assert len(str(number)) == len("#ORD") + OrderNumber.LENGTH

    def test_generate_is_random(self) -> None:
        """Two generated numbers differ."""
        assert OrderNumber.generate() != OrderNumber.generate()


class TestShippingAddress:
    """Tests for ShippingAddress snapshot."""

    def test_requires_name_and_phone(self) -> None:
        """Blank name or phone is rejected."""
        with pytest.raises(InvalidArgumentError):
            ShippingAddress(full_name="  ", phone="123", address_line1="x")
        with pytest.raises(InvalidArgumentError):
            ShippingAddress(full_name="Asha", phone="", address_line1="x")

    def test_matches_name_case_insensitive(self, shipping_address) -> None:
        """Search term matches the name regardless of case."""
        assert shipping_address.matches("asha")
        assert shipping_address.matches("RAO")

    def test_matches_phone_substring(self, shipping_address) -> None:
        """Search term matches a phone substring."""
        assert shipping_address.matches("76543")

    def test_no_match(self, shipping_address) -> None:
        """Unrelated terms do not match."""
        assert not shipping_address.matches("vikram")

    def test_format_single_line(self, shipping_address) -> None:
        """Single line format skips empty parts."""
        assert shipping_address.format_single_line() == "12 MG Road, Pune, MH, 411001, IN"

    def test_is_immutable(self, shipping_address) -> None:
        """Snapshots cannot be modified."""
        with pytest.raises(AttributeError):
            shipping_address.full_name = "Someone Else"


class TestLineItem:
    """Tests for LineItem value object."""

    def test_total_price(self) -> None:
        """Total is unit price times quantity."""
        item = LineItem(product_id="p", quantity=3, unit_price=Decimal("2.50"))
        assert item.total_price == Decimal("7.50")

    def test_quantity_must_be_positive(self) -> None:
        """Zero quantity is rejected."""
        with pytest.raises(InvalidArgumentError):
            LineItem(product_id="p", quantity=0, unit_price=Decimal("1"))

    def test_negative_price_rejected(self) -> None:
        """Negative unit price is rejected."""
        with pytest.raises(InvalidArgumentError):
            LineItem(product_id="p", quantity=1, unit_price=Decimal("-1"))

    def test_refers_to_requires_variant_match(self) -> None:
        """The (product, variant) pair must match exactly."""
        item = LineItem(product_id="p", variant_id="v", quantity=1, unit_price=Decimal("1"))
        assert item.refers_to("p", "v")
        assert not item.refers_to("p", None)
        assert not item.refers_to("p", "other")


class TestStatusChange:
    """Tests for StatusChange serialization."""

    def test_dict_round_trip(self) -> None:
        """to_dict/from_dict preserve every field."""
        change = StatusChange(
            from_status="packed",
            to_status="shipped",
            at=datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc),
            actor="staff-1",
            reason=None,
        )
        assert StatusChange.from_dict(change.to_dict()) == change


class TestVariantDescriptor:
    """Tests for VariantDescriptor."""

    def test_attribute_map(self) -> None:
        """Attributes are exposed as a dict."""
        variant = VariantDescriptor(
            id="v", product_id="p", attributes=(("size", "M"), ("color", "blue"))
        )
        assert variant.attribute_map == {"size": "M", "color": "blue"}
