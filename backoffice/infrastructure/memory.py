"""In-memory repository adapters.

The default store for local runs and tests. Aggregates are copied on
the way in and out so callers never share state with the store, the
same as with a database.
"""

import copy
from collections.abc import Iterable
from typing import TypeVar

from backoffice.application.repositories import (
    CatalogDirectory,
    OrderRepository,
    ReturnRepository,
    WarehouseDirectory,
)
from backoffice.domain.base import AggregateRoot
from backoffice.domain.criteria import OrderCriteria, ReturnCriteria
from backoffice.domain.entities import Order, Return, Warehouse
from backoffice.domain.value_objects import ProductDescriptor, VariantDescriptor

A = TypeVar("A", bound=AggregateRoot)


def _detach(aggregate: A) -> A:
    stored = copy.deepcopy(aggregate)
    stored.collect_events()
    return stored


class InMemoryOrderRepository(OrderRepository):
    """In-memory repository for orders."""

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}

    async def get(self, order_id: str) -> Order | None:
        order = self._orders.get(order_id)
        return _detach(order) if order else None

    async def save(self, order: Order) -> None:
        self._orders[order.id] = _detach(order)

    async def delete(self, order_id: str) -> bool:
        return self._orders.pop(order_id, None) is not None

    async def list(self, criteria: OrderCriteria) -> list[Order]:
        orders = [o for o in self._orders.values() if criteria.matches(o)]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [_detach(o) for o in orders]

    async def ids_allocated_to(self, warehouse_id: str) -> set[str]:
        return {
            o.id for o in self._orders.values() if o.allocated_warehouse_id == warehouse_id
        }


class InMemoryReturnRepository(ReturnRepository):
    """In-memory repository for returns."""

    def __init__(self) -> None:
        self._returns: dict[str, Return] = {}

    async def get(self, return_id: str) -> Return | None:
        returned = self._returns.get(return_id)
        return _detach(returned) if returned else None

    async def save(self, returned: Return) -> None:
        self._returns[returned.id] = _detach(returned)

    async def delete(self, return_id: str) -> bool:
        return self._returns.pop(return_id, None) is not None

    async def list(
        self,
        criteria: ReturnCriteria,
        order_ids: set[str] | None = None,
    ) -> tuple[list[Return], int]:
        matched = [r for r in self._returns.values() if criteria.matches(r, order_ids)]
        matched.sort(key=lambda r: r.created_at, reverse=True)
        page = matched[criteria.offset : criteria.offset + criteria.limit]
        return [_detach(r) for r in page], len(matched)

    async def count_for_order(self, order_id: str) -> int:
        return sum(1 for r in self._returns.values() if r.order_id == order_id)


class InMemoryWarehouseDirectory(WarehouseDirectory):
    """In-memory warehouse directory."""

    def __init__(self, warehouses: Iterable[Warehouse] = ()) -> None:
        self._warehouses: dict[str, Warehouse] = {w.id: w for w in warehouses}

    async def get(self, warehouse_id: str) -> Warehouse | None:
        return self._warehouses.get(warehouse_id)

    async def get_many(self, warehouse_ids: Iterable[str]) -> dict[str, Warehouse]:
        return {wid: self._warehouses[wid] for wid in warehouse_ids if wid in self._warehouses}

    async def list_all(self) -> list[Warehouse]:
        return sorted(self._warehouses.values(), key=lambda w: w.name)

    async def add(self, warehouse: Warehouse) -> None:
        self._warehouses[warehouse.id] = warehouse


class InMemoryCatalogDirectory(CatalogDirectory):
    """In-memory product and variant descriptors."""

    def __init__(
        self,
        products: Iterable[ProductDescriptor] = (),
        variants: Iterable[VariantDescriptor] = (),
    ) -> None:
        self._products: dict[str, ProductDescriptor] = {p.id: p for p in products}
        self._variants: dict[str, VariantDescriptor] = {v.id: v for v in variants}

    async def get_products(self, product_ids: Iterable[str]) -> dict[str, ProductDescriptor]:
        return {pid: self._products[pid] for pid in product_ids if pid in self._products}

    async def get_variants(self, variant_ids: Iterable[str]) -> dict[str, VariantDescriptor]:
        return {vid: self._variants[vid] for vid in variant_ids if vid in self._variants}

    async def add_product(self, product: ProductDescriptor) -> None:
        self._products[product.id] = product

    async def add_variant(self, variant: VariantDescriptor) -> None:
        self._variants[variant.id] = variant
