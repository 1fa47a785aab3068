#!/usr/bin/env python3
"""Seed warehouse directory and catalog descriptors.

Loads a small set of demo warehouses and catalog entries into the
configured storage backend. Optionally places demo orders.

Usage:
    python scripts/seed_directory.py
    python scripts/seed_directory.py --with-orders
    STORAGE_BACKEND=sql python scripts/seed_directory.py --create-tables
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from backoffice.application.order_service import OrderService
from backoffice.domain.entities import Warehouse
from backoffice.domain.state_machines import WarehouseStatus
from backoffice.domain.value_objects import (
    GeoPoint,
    LineItem,
    ProductDescriptor,
    ShippingAddress,
    VariantDescriptor,
    WarehouseAddress,
)
from backoffice.infrastructure.config import settings
from backoffice.infrastructure.database import create_tables
from backoffice.infrastructure.logging import configure_logging
from backoffice.infrastructure.storage import Storage, get_storage

WAREHOUSES = [
    Warehouse(
        id="wh-blr-1",
        name="Bengaluru Central",
        address=WarehouseAddress(
            street="14 Peenya Industrial Area", city="Bengaluru", state="Karnataka", pin_code="560058"
        ),
        location=GeoPoint(lat=13.0285, lng=77.5197),
    ),
    Warehouse(
        id="wh-del-1",
        name="Delhi North",
        address=WarehouseAddress(
            street="Plot 7, Narela", city="New Delhi", state="Delhi", pin_code="110040"
        ),
        location=GeoPoint(lat=28.8526, lng=77.0932),
    ),
    Warehouse(
        id="wh-mum-1",
        name="Mumbai Bhiwandi",
        address=WarehouseAddress(
            street="Gala 21, Vadape", city="Bhiwandi", state="Maharashtra", pin_code="421302"
        ),
        location=GeoPoint(lat=19.2813, lng=73.0483),
        status=WarehouseStatus.UNDER_MAINTENANCE,
    ),
]

PRODUCTS = [
    ProductDescriptor(id="prod-kurta", name="Cotton Kurta", sku="KRT-100"),
    ProductDescriptor(id="prod-saree", name="Silk Saree", sku="SAR-200"),
    ProductDescriptor(id="prod-dupatta", name="Chiffon Dupatta", sku="DUP-300"),
]

VARIANTS = [
    VariantDescriptor(
        id="var-kurta-m-blue",
        product_id="prod-kurta",
        sku="KRT-100-M-BLU",
        attributes=(("color", "blue"), ("size", "M")),
    ),
    VariantDescriptor(
        id="var-kurta-l-white",
        product_id="prod-kurta",
        sku="KRT-100-L-WHT",
        attributes=(("color", "white"), ("size", "L")),
    ),
    VariantDescriptor(
        id="var-saree-red",
        product_id="prod-saree",
        sku="SAR-200-RED",
        attributes=(("color", "red"),),
    ),
]


async def seed_directory(storage: Storage) -> dict:
    """Load demo warehouses and catalog descriptors.

    Args:
        storage: Target storage.

    Returns:
        Seeding counts.
    """
    for warehouse in WAREHOUSES:
        await storage.warehouses.add(warehouse)
    for product in PRODUCTS:
        await storage.catalog.add_product(product)
    for variant in VARIANTS:
        await storage.catalog.add_variant(variant)
    return {
        "warehouses": len(WAREHOUSES),
        "products": len(PRODUCTS),
        "variants": len(VARIANTS),
    }


async def seed_orders(storage: Storage) -> int:
    """Place a few demo orders through the order service."""
    service = OrderService(
        orders=storage.orders,
        returns=storage.returns,
        warehouses=storage.warehouses,
        catalog=storage.catalog,
        request_id="seed",
    )
    customers = [
        ("Asha Rao", "9876543210", "Bengaluru"),
        ("Vikram Mehta", "9123456780", "New Delhi"),
    ]
    placed = 0
    for name, phone, city in customers:
        result = await service.place_order(
            items=[
                LineItem(
                    product_id="prod-kurta",
                    variant_id="var-kurta-m-blue",
                    quantity=2,
                    unit_price=Decimal("799.00"),
                ),
                LineItem(product_id="prod-dupatta", quantity=1, unit_price=Decimal("349.00")),
            ],
            shipping_address=ShippingAddress(
                full_name=name, phone=phone, address_line1="1 Main Road", city=city, country="IN"
            ),
            user_id=f"cust-{phone[-4:]}",
        )
        if not result.success:
            raise RuntimeError(result.error)
        placed += 1
    return placed


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed warehouse directory and catalog descriptors",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create database tables first (SQL backend only)",
    )
    parser.add_argument(
        "--with-orders",
        action="store_true",
        help="Also place demo orders",
    )
    args = parser.parse_args()

    configure_logging(json_logs=False)

    print("=" * 60)
    print("Back-Office Directory Seeder")
    print("=" * 60)
    print(f"Storage backend: {settings.storage_backend}")
    print()

    if args.create_tables and settings.storage_backend == "sql":
        print("Creating database tables...")
        await create_tables()
        print("Tables ready.")
        print()

    storage = get_storage()
    counts = await seed_directory(storage)
    print(f"  ✓ Warehouses: {counts['warehouses']}")
    print(f"  ✓ Products: {counts['products']}")
    print(f"  ✓ Variants: {counts['variants']}")

    if args.with_orders:
        placed = await seed_orders(storage)
        print(f"  ✓ Orders: {placed}")

    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
