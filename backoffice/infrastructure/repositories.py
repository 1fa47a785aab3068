"""SQLAlchemy repository adapters.

Each call opens its own session and commits its own transaction, so a
mutation is one atomic read-modify-write at the store. The ``version``
column is written but not compared.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backoffice.application.repositories import (
    CatalogDirectory,
    OrderRepository,
    ReturnRepository,
    WarehouseDirectory,
)
from backoffice.domain.criteria import OrderCriteria, ReturnCriteria
from backoffice.domain.entities import Order, Return, Warehouse
from backoffice.domain.state_machines import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
    ReturnStatus,
    WarehouseStatus,
)
from backoffice.domain.value_objects import (
    GeoPoint,
    LineItem,
    MapLocation,
    ProductDescriptor,
    ReturnItem,
    ShippingAddress,
    StatusChange,
    VariantDescriptor,
    WarehouseAddress,
    WarehouseAllocation,
)
from backoffice.infrastructure.models import (
    CatalogProductRecord,
    CatalogVariantRecord,
    OrderRecord,
    ReturnRecord,
    WarehouseRecord,
)


# ============================================================================
# Document Converters
# ============================================================================


def _address_to_doc(address: ShippingAddress | None) -> dict[str, Any] | None:
    if address is None:
        return None
    doc = {
        "full_name": address.full_name,
        "phone": address.phone,
        "address_line1": address.address_line1,
        "address_line2": address.address_line2,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "country": address.country,
        "landmark": address.landmark,
        "district": address.district,
        "map_location": None,
    }
    if address.map_location:
        doc["map_location"] = {
            "latitude": address.map_location.latitude,
            "longitude": address.map_location.longitude,
        }
    return doc


def _address_from_doc(doc: dict[str, Any] | None) -> ShippingAddress | None:
    if not doc:
        return None
    data = dict(doc)
    location = data.pop("map_location", None)
    return ShippingAddress(
        **data,
        map_location=MapLocation(**location) if location else None,
    )


def _item_to_doc(item: LineItem) -> dict[str, Any]:
    return {
        "product_id": item.product_id,
        "variant_id": item.variant_id,
        "quantity": item.quantity,
        "unit_price": str(item.unit_price),
    }


def _item_from_doc(doc: dict[str, Any]) -> LineItem:
    return LineItem(
        product_id=doc["product_id"],
        variant_id=doc.get("variant_id"),
        quantity=doc["quantity"],
        unit_price=Decimal(doc["unit_price"]),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ============================================================================
# Order Repository
# ============================================================================


class SqlOrderRepository(OrderRepository):
    """Order repository backed by the ``orders`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get(self, order_id: str) -> Order | None:
        async with self.session_factory() as session:
            record = await session.get(OrderRecord, order_id)
            return self._to_entity(record) if record else None

    async def save(self, order: Order) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                record = await session.get(OrderRecord, order.id)
                if record is None:
                    record = OrderRecord(id=order.id)
                    session.add(record)
                self._apply(record, order)

    async def delete(self, order_id: str) -> bool:
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(delete(OrderRecord).where(OrderRecord.id == order_id))
                return result.rowcount > 0

    async def list(self, criteria: OrderCriteria) -> list[Order]:
        query = select(OrderRecord)

        term = criteria.search_term
        if term:
            pattern = f"%{_escape_like(term)}%"
            query = query.where(
                or_(
                    OrderRecord.shipping_full_name.ilike(pattern, escape="\\"),
                    OrderRecord.shipping_phone.ilike(pattern, escape="\\"),
                )
            )
        if criteria.status is not None:
            query = query.where(OrderRecord.status == criteria.status.value)
        if criteria.warehouse_id is not None:
            query = query.where(OrderRecord.allocated_warehouse_id == criteria.warehouse_id)

        lower, upper = criteria.created_bounds
        if lower is not None:
            query = query.where(OrderRecord.created_at >= lower)
        if upper is not None:
            query = query.where(OrderRecord.created_at <= upper)

        query = query.order_by(OrderRecord.created_at.desc())
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._to_entity(r) for r in result.scalars().all()]

    async def ids_allocated_to(self, warehouse_id: str) -> set[str]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrderRecord.id).where(OrderRecord.allocated_warehouse_id == warehouse_id)
            )
            return set(result.scalars().all())

    @staticmethod
    def _apply(record: OrderRecord, order: Order) -> None:
        record.order_number = order.order_number
        record.user_id = order.user_id
        record.status = order.status.value
        record.shipping_full_name = order.shipping_address.full_name
        record.shipping_phone = order.shipping_address.phone
        record.shipping_address = _address_to_doc(order.shipping_address)
        record.billing_address = _address_to_doc(order.billing_address)
        record.items = [_item_to_doc(i) for i in order.items]
        record.total_amount = order.total_amount
        record.final_amount = order.final_amount
        record.payment_method = order.payment_method.value
        record.payment_status = order.payment_status.value
        record.is_delivered = order.is_delivered
        record.delivered_at = order.delivered_at
        record.allocated_warehouse_id = order.allocated_warehouse_id
        record.allocated_by = order.allocated_by
        record.allocated_at = order.allocated_at
        record.status_history = [entry.to_dict() for entry in order.status_history]
        record.version = order.version
        record.created_at = order.created_at
        record.updated_at = order.updated_at

    @staticmethod
    def _to_entity(record: OrderRecord) -> Order:
        allocation = None
        if record.allocated_warehouse_id:
            allocation = WarehouseAllocation(
                warehouse_id=record.allocated_warehouse_id,
                allocated_by=record.allocated_by,
                allocated_at=record.allocated_at,
            )
        return Order(
            id=record.id,
            order_number=record.order_number,
            user_id=record.user_id,
            items=tuple(_item_from_doc(d) for d in record.items),
            shipping_address=_address_from_doc(record.shipping_address),
            billing_address=_address_from_doc(record.billing_address),
            payment_method=PaymentMethod(record.payment_method),
            payment_status=PaymentStatus(record.payment_status),
            total_amount=Decimal(record.total_amount),
            final_amount=Decimal(record.final_amount),
            status=OrderStatus(record.status),
            is_delivered=record.is_delivered,
            delivered_at=record.delivered_at,
            allocation=allocation,
            status_history=[StatusChange.from_dict(d) for d in record.status_history or []],
            version=record.version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


# ============================================================================
# Return Repository
# ============================================================================


class SqlReturnRepository(ReturnRepository):
    """Return repository backed by the ``returns`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get(self, return_id: str) -> Return | None:
        async with self.session_factory() as session:
            record = await session.get(ReturnRecord, return_id)
            return self._to_entity(record) if record else None

    async def save(self, returned: Return) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                record = await session.get(ReturnRecord, returned.id)
                if record is None:
                    record = ReturnRecord(id=returned.id)
                    session.add(record)
                self._apply(record, returned)

    async def delete(self, return_id: str) -> bool:
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(ReturnRecord).where(ReturnRecord.id == return_id)
                )
                return result.rowcount > 0

    async def list(
        self,
        criteria: ReturnCriteria,
        order_ids: set[str] | None = None,
    ) -> tuple[list[Return], int]:
        conditions = []
        if criteria.status is not None:
            conditions.append(ReturnRecord.status == criteria.status.value)
        if criteria.refund_status is not None:
            conditions.append(ReturnRecord.refund_status == criteria.refund_status.value)
        if criteria.order_id is not None:
            conditions.append(ReturnRecord.order_id == criteria.order_id)
        if criteria.product_id is not None:
            conditions.append(ReturnRecord.product_id == criteria.product_id)
        if criteria.user_id is not None:
            conditions.append(ReturnRecord.user_id == criteria.user_id)
        if criteria.warehouse_id is not None:
            conditions.append(ReturnRecord.order_id.in_(sorted(order_ids or ())))

        async with self.session_factory() as session:
            total = await session.scalar(
                select(func.count()).select_from(ReturnRecord).where(*conditions)
            )
            result = await session.execute(
                select(ReturnRecord)
                .where(*conditions)
                .order_by(ReturnRecord.created_at.desc())
                .offset(criteria.offset)
                .limit(criteria.limit)
            )
            return [self._to_entity(r) for r in result.scalars().all()], total or 0

    async def count_for_order(self, order_id: str) -> int:
        async with self.session_factory() as session:
            total = await session.scalar(
                select(func.count())
                .select_from(ReturnRecord)
                .where(ReturnRecord.order_id == order_id)
            )
            return total or 0

    @staticmethod
    def _apply(record: ReturnRecord, returned: Return) -> None:
        record.order_id = returned.order_id
        record.user_id = returned.user_id
        record.product_id = returned.item.product_id
        record.variant_id = returned.item.variant_id
        record.quantity = returned.item.quantity
        record.price_at_order = returned.item.price_at_order
        record.reason = returned.reason
        record.comments = returned.comments
        record.refund_amount = returned.refund_amount
        record.status = returned.status.value
        record.processed_at = returned.processed_at
        record.refund_status = returned.refund_status.value
        record.refunded_at = returned.refunded_at
        record.pickup_scheduled = returned.pickup_scheduled
        record.pickup_date = returned.pickup_date
        record.pickup_status = returned.pickup_status
        record.version = returned.version
        record.created_at = returned.created_at
        record.updated_at = returned.updated_at

    @staticmethod
    def _to_entity(record: ReturnRecord) -> Return:
        return Return(
            id=record.id,
            order_id=record.order_id,
            user_id=record.user_id,
            item=ReturnItem(
                product_id=record.product_id,
                variant_id=record.variant_id,
                quantity=record.quantity,
                price_at_order=Decimal(record.price_at_order),
            ),
            reason=record.reason,
            comments=record.comments,
            refund_amount=(
                Decimal(record.refund_amount) if record.refund_amount is not None else None
            ),
            status=ReturnStatus(record.status),
            processed_at=record.processed_at,
            refund_status=RefundStatus(record.refund_status),
            refunded_at=record.refunded_at,
            pickup_scheduled=record.pickup_scheduled,
            pickup_date=record.pickup_date,
            pickup_status=record.pickup_status,
            version=record.version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


# ============================================================================
# Directories
# ============================================================================


class SqlWarehouseDirectory(WarehouseDirectory):
    """Warehouse directory backed by the ``warehouses`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get(self, warehouse_id: str) -> Warehouse | None:
        async with self.session_factory() as session:
            record = await session.get(WarehouseRecord, warehouse_id)
            return self._to_entity(record) if record else None

    async def get_many(self, warehouse_ids: Iterable[str]) -> dict[str, Warehouse]:
        ids = sorted(set(warehouse_ids))
        if not ids:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(WarehouseRecord).where(WarehouseRecord.id.in_(ids))
            )
            return {r.id: self._to_entity(r) for r in result.scalars().all()}

    async def list_all(self) -> list[Warehouse]:
        async with self.session_factory() as session:
            result = await session.execute(select(WarehouseRecord).order_by(WarehouseRecord.name))
            return [self._to_entity(r) for r in result.scalars().all()]

    async def add(self, warehouse: Warehouse) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(
                    WarehouseRecord(
                        id=warehouse.id,
                        name=warehouse.name,
                        street=warehouse.address.street if warehouse.address else None,
                        city=warehouse.address.city if warehouse.address else None,
                        state=warehouse.address.state if warehouse.address else None,
                        pin_code=warehouse.address.pin_code if warehouse.address else None,
                        lat=warehouse.location.lat if warehouse.location else None,
                        lng=warehouse.location.lng if warehouse.location else None,
                        status=warehouse.status.value,
                    )
                )

    @staticmethod
    def _to_entity(record: WarehouseRecord) -> Warehouse:
        address = None
        if record.street is not None:
            address = WarehouseAddress(
                street=record.street,
                city=record.city or "",
                state=record.state or "",
                pin_code=record.pin_code or "",
            )
        location = None
        if record.lat is not None and record.lng is not None:
            location = GeoPoint(lat=record.lat, lng=record.lng)
        return Warehouse(
            id=record.id,
            name=record.name,
            address=address,
            location=location,
            status=WarehouseStatus(record.status),
        )


class SqlCatalogDirectory(CatalogDirectory):
    """Catalog descriptors backed by ``catalog_products`` and ``catalog_variants``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get_products(self, product_ids: Iterable[str]) -> dict[str, ProductDescriptor]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(CatalogProductRecord).where(CatalogProductRecord.id.in_(ids))
            )
            return {
                r.id: ProductDescriptor(id=r.id, name=r.name, sku=r.sku)
                for r in result.scalars().all()
            }

    async def get_variants(self, variant_ids: Iterable[str]) -> dict[str, VariantDescriptor]:
        ids = sorted(set(variant_ids))
        if not ids:
            return {}
        async with self.session_factory() as session:
            result = await session.execute(
                select(CatalogVariantRecord).where(CatalogVariantRecord.id.in_(ids))
            )
            return {
                r.id: VariantDescriptor(
                    id=r.id,
                    product_id=r.product_id,
                    sku=r.sku,
                    attributes=tuple(sorted((r.attributes or {}).items())),
                )
                for r in result.scalars().all()
            }

    async def add_product(self, product: ProductDescriptor) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(
                    CatalogProductRecord(id=product.id, name=product.name, sku=product.sku)
                )

    async def add_variant(self, variant: VariantDescriptor) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(
                    CatalogVariantRecord(
                        id=variant.id,
                        product_id=variant.product_id,
                        sku=variant.sku,
                        attributes=variant.attribute_map,
                    )
                )
