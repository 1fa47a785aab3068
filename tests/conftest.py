"""Shared fixtures for all tests.

Every test runs against a fresh in-memory storage seeded with two
warehouses and a small catalog, and a controllable clock.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from backoffice.application.allocation_service import AllocationService
from backoffice.application.order_service import OrderService
from backoffice.application.return_service import ReturnService
from backoffice.domain.entities import Order, Warehouse
from backoffice.domain.value_objects import (
    GeoPoint,
    LineItem,
    ProductDescriptor,
    ShippingAddress,
    VariantDescriptor,
    WarehouseAddress,
)
from backoffice.infrastructure.memory import (
    InMemoryCatalogDirectory,
    InMemoryOrderRepository,
    InMemoryReturnRepository,
    InMemoryWarehouseDirectory,
)
from backoffice.infrastructure.storage import Storage, reset_storage

WAREHOUSE_NORTH = Warehouse(
    id="wh-north",
    name="North Hub",
    address=WarehouseAddress(street="1 Depot Lane", city="Pune", state="MH", pin_code="411001"),
    location=GeoPoint(lat=18.52, lng=73.85),
)
WAREHOUSE_SOUTH = Warehouse(id="wh-south", name="South Hub")

PRODUCT_SHIRT = ProductDescriptor(id="prod-shirt", name="Linen Shirt", sku="SHIRT-1")
PRODUCT_MUG = ProductDescriptor(id="prod-mug", name="Stoneware Mug", sku="MUG-1")
VARIANT_SHIRT_M = VariantDescriptor(
    id="var-shirt-m",
    product_id="prod-shirt",
    sku="SHIRT-1-M",
    attributes=(("size", "M"),),
)


class FakeClock:
    """Controllable time source for services."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_address(full_name: str = "Asha Rao", phone: str = "9876543210") -> ShippingAddress:
    return ShippingAddress(
        full_name=full_name,
        phone=phone,
        address_line1="12 MG Road",
        city="Pune",
        state="MH",
        postal_code="411001",
        country="IN",
    )


def make_items() -> list[LineItem]:
    return [
        LineItem(
            product_id="prod-shirt",
            variant_id="var-shirt-m",
            quantity=2,
            unit_price=Decimal("25.00"),
        ),
        LineItem(product_id="prod-mug", quantity=1, unit_price=Decimal("9.50")),
    ]


def make_order(**overrides) -> Order:
    values = {"items": make_items(), "shipping_address": make_address(), "user_id": "cust-1"}
    values.update(overrides)
    order = Order.place(**values)
    order.collect_events()
    return order


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory storage installed as the process-wide storage."""
    storage = Storage(
        orders=InMemoryOrderRepository(),
        returns=InMemoryReturnRepository(),
        warehouses=InMemoryWarehouseDirectory([WAREHOUSE_NORTH, WAREHOUSE_SOUTH]),
        catalog=InMemoryCatalogDirectory(
            products=[PRODUCT_SHIRT, PRODUCT_MUG],
            variants=[VARIANT_SHIRT_M],
        ),
    )
    reset_storage(storage)
    yield storage
    reset_storage()


@pytest.fixture(autouse=True)
def _isolated_storage(storage: Storage) -> None:
    """Install fresh storage for every test."""


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def order_service(storage: Storage, clock: FakeClock) -> OrderService:
    return OrderService(
        orders=storage.orders,
        returns=storage.returns,
        warehouses=storage.warehouses,
        catalog=storage.catalog,
        request_id="test-request",
        clock=clock,
    )


@pytest.fixture
def allocation_service(storage: Storage, clock: FakeClock) -> AllocationService:
    return AllocationService(
        orders=storage.orders,
        warehouses=storage.warehouses,
        request_id="test-request",
        clock=clock,
    )


@pytest.fixture
def return_service(storage: Storage, clock: FakeClock) -> ReturnService:
    return ReturnService(
        returns=storage.returns,
        orders=storage.orders,
        catalog=storage.catalog,
        request_id="test-request",
        clock=clock,
    )


@pytest.fixture
def line_items() -> list[LineItem]:
    return make_items()


@pytest.fixture
def shipping_address() -> ShippingAddress:
    return make_address()


@pytest.fixture
def new_order():
    """Factory for placed, unsaved orders."""
    return make_order


@pytest.fixture
def address_factory():
    return make_address
