"""Value Objects for the domain layer.

Immutable snapshots copied onto orders and returns at creation time,
plus the allocation record and the read-only descriptors joined in
from the warehouse and catalog directories.
"""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Self

from backoffice.domain.base import ValueObject
from backoffice.domain.exceptions import InvalidArgumentError


# ============================================================================
# Order Number
# ============================================================================


_ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


@dataclass(frozen=True)
class OrderNumber(ValueObject):
    """Human-facing order reference, e.g. ``#ORDX4K2P9QA``."""

    value: str

    PREFIX = "#ORD"
    LENGTH = 8

    @classmethod
    def generate(cls) -> Self:
        """Generate a new order number with a random suffix."""
        suffix = "".join(secrets.choice(_ORDER_NUMBER_ALPHABET) for _ in range(cls.LENGTH))
        return cls(value=f"{cls.PREFIX}{suffix}")

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Address Snapshot
# ============================================================================


@dataclass(frozen=True)
class MapLocation(ValueObject):
    """Latitude/longitude pair."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class ShippingAddress(ValueObject):
    """Shipping or billing address snapshot.

    Copied from the customer's address book at checkout and never
    updated afterwards.

    Attributes:
        full_name: Recipient name (searchable).
        phone: Recipient phone (searchable).
        address_line1: Primary address line.
        address_line2: Secondary address line.
        city: City name.
        state: State/province/region.
        postal_code: Postal/PIN code.
        country: Country name or code.
        landmark: Optional delivery landmark.
        district: Optional district.
        map_location: Optional geo point.
    """

    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    landmark: str | None = None
    district: str | None = None
    map_location: MapLocation | None = None

    def __post_init__(self) -> None:
        if not self.full_name or not self.full_name.strip():
            raise InvalidArgumentError("Shipping full name cannot be empty", field="fullName")
        if not self.phone or not self.phone.strip():
            raise InvalidArgumentError("Shipping phone cannot be empty", field="phone")

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name or phone."""
        needle = term.casefold()
        return needle in self.full_name.casefold() or needle in self.phone.casefold()

    def format_single_line(self) -> str:
        parts = [self.address_line1]
        if self.address_line2:
            parts.append(self.address_line2)
        parts.extend(p for p in (self.city, self.state, self.postal_code, self.country) if p)
        return ", ".join(parts)


# ============================================================================
# Line Items
# ============================================================================


@dataclass(frozen=True)
class LineItem(ValueObject):
    """An order line item, immutable after order creation.

    Attributes:
        product_id: Catalog product reference.
        variant_id: Catalog variant reference, if the product has variants.
        quantity: Ordered quantity (>= 1).
        unit_price: Price per unit at order time.
    """

    product_id: str
    quantity: int
    unit_price: Decimal
    variant_id: str | None = None

    def __post_init__(self) -> None:
        if not self.product_id:
            raise InvalidArgumentError("Line item product id cannot be empty", field="productId")
        if self.quantity < 1:
            raise InvalidArgumentError(
                f"Line item quantity must be at least 1, got {self.quantity}",
                field="quantity",
                value=self.quantity,
            )
        if self.unit_price < 0:
            raise InvalidArgumentError(
                "Line item unit price cannot be negative",
                field="unitPrice",
                value=str(self.unit_price),
            )

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    def refers_to(self, product_id: str, variant_id: str | None) -> bool:
        """Check whether this line is the (product, variant) pair."""
        return self.product_id == product_id and self.variant_id == variant_id


@dataclass(frozen=True)
class ReturnItem(ValueObject):
    """The single line item a return covers.

    Attributes:
        product_id: Catalog product reference.
        variant_id: Catalog variant reference.
        quantity: Quantity being returned.
        price_at_order: Unit price copied from the order line.
    """

    product_id: str
    quantity: int
    price_at_order: Decimal
    variant_id: str | None = None


# ============================================================================
# Warehouse Allocation
# ============================================================================


@dataclass(frozen=True)
class WarehouseAllocation(ValueObject):
    """Binding of an order to a warehouse.

    Holding the warehouse, actor and time in one value keeps the
    "all set or none set" rule structural.

    Attributes:
        warehouse_id: Warehouse the order is fulfilled from.
        allocated_by: Staff identity that made the allocation.
        allocated_at: When the allocation was made.
    """

    warehouse_id: str
    allocated_by: str
    allocated_at: datetime


# ============================================================================
# Status History
# ============================================================================


@dataclass(frozen=True)
class StatusChange(ValueObject):
    """One entry of an order's status audit trail."""

    from_status: str | None
    to_status: str
    at: datetime
    actor: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
            "reason": self.reason,
            "at": self.at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            from_status=data.get("from_status"),
            to_status=data["to_status"],
            actor=data.get("actor"),
            reason=data.get("reason"),
            at=datetime.fromisoformat(data["at"]),
        )


# ============================================================================
# Directory Descriptors
# ============================================================================


@dataclass(frozen=True)
class WarehouseAddress(ValueObject):
    street: str
    city: str
    state: str
    pin_code: str


@dataclass(frozen=True)
class GeoPoint(ValueObject):
    lat: float
    lng: float


@dataclass(frozen=True)
class ProductDescriptor(ValueObject):
    """Catalog product fields joined into order and return read models."""

    id: str
    name: str
    sku: str | None = None


@dataclass(frozen=True)
class VariantDescriptor(ValueObject):
    """Catalog variant fields joined into order and return read models."""

    id: str
    product_id: str
    sku: str | None = None
    attributes: tuple[tuple[str, str], ...] = ()

    @property
    def attribute_map(self) -> dict[str, str]:
        return dict(self.attributes)
