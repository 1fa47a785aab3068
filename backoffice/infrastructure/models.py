"""SQLAlchemy models for database tables.

Provides ORM models for orders, returns and the read-only warehouse
and catalog directories. Orders and returns are independent records:
``returns.order_id`` carries no foreign key and nothing cascades.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    Text,
    TypeDecorator,
)

from backoffice.infrastructure.database import Base


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC timestamps on every dialect.

    SQLite drops tzinfo, so values are stored as naive UTC and tagged
    with UTC again when loaded.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


Money = Numeric(12, 2)


# ============================================================================
# Order Models
# ============================================================================


class OrderRecord(Base):
    """Order model for database persistence.

    Line items, addresses and the status history are stored as JSON
    documents. Fields used by list filters are also kept in columns.
    """

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    order_number = Column(String(20), nullable=False, unique=True)
    user_id = Column(String(64), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="processing", index=True)

    # Address snapshots
    shipping_full_name = Column(String(255), nullable=False)
    shipping_phone = Column(String(50), nullable=False)
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=True)

    # Items and totals
    items = Column(JSON, nullable=False)
    total_amount = Column(Money, nullable=False)
    final_amount = Column(Money, nullable=False)
    payment_method = Column(String(20), nullable=False, default="cod")
    payment_status = Column(String(20), nullable=False, default="pending")

    # Delivery
    is_delivered = Column(Boolean, nullable=False, default=False)
    delivered_at = Column(UTCDateTime, nullable=True)

    # Allocation
    allocated_warehouse_id = Column(String(64), nullable=True, index=True)
    allocated_by = Column(String(64), nullable=True)
    allocated_at = Column(UTCDateTime, nullable=True)

    status_history = Column(JSON, nullable=False, default=list)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, nullable=False, index=True)
    updated_at = Column(UTCDateTime, nullable=False)


# ============================================================================
# Return Models
# ============================================================================


class ReturnRecord(Base):
    """Return request model for database persistence."""

    __tablename__ = "returns"

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(64), nullable=True, index=True)

    # Returned line
    product_id = Column(String(64), nullable=False, index=True)
    variant_id = Column(String(64), nullable=True)
    quantity = Column(Integer, nullable=False)
    price_at_order = Column(Money, nullable=False)

    reason = Column(Text, nullable=True)
    comments = Column(Text, nullable=True)
    refund_amount = Column(Money, nullable=True)

    status = Column(String(20), nullable=False, default="pending", index=True)
    processed_at = Column(UTCDateTime, nullable=True)
    refund_status = Column(String(20), nullable=False, default="pending", index=True)
    refunded_at = Column(UTCDateTime, nullable=True)

    pickup_scheduled = Column(Boolean, nullable=False, default=False)
    pickup_date = Column(UTCDateTime, nullable=True)
    pickup_status = Column(String(100), nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, nullable=False, index=True)
    updated_at = Column(UTCDateTime, nullable=False)


# ============================================================================
# Directory Models
# ============================================================================


class WarehouseRecord(Base):
    """Warehouse directory entry."""

    __tablename__ = "warehouses"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    pin_code = Column(String(20), nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    status = Column(String(30), nullable=False, default="active")


class CatalogProductRecord(Base):
    __tablename__ = "catalog_products"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True)


class CatalogVariantRecord(Base):
    __tablename__ = "catalog_variants"

    id = Column(String(64), primary_key=True)
    product_id = Column(String(64), nullable=False, index=True)
    sku = Column(String(100), nullable=True)
    attributes = Column(JSON, nullable=False, default=dict)
