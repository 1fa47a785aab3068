"""Repository ports used by the application services.

Two adapter families implement these: the in-memory store in
``backoffice.infrastructure.memory`` and the SQLAlchemy store in
``backoffice.infrastructure.repositories``. Every call is one atomic
store operation; nothing spans the Order and Return aggregates.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from backoffice.domain.criteria import OrderCriteria, ReturnCriteria
from backoffice.domain.entities import Order, Return, Warehouse
from backoffice.domain.value_objects import ProductDescriptor, VariantDescriptor


class OrderRepository(ABC):
    """Persistence port for Order aggregates."""

    @abstractmethod
    async def get(self, order_id: str) -> Order | None:
        """Load one order, or None."""

    @abstractmethod
    async def save(self, order: Order) -> None:
        """Insert or overwrite an order (last writer wins)."""

    @abstractmethod
    async def delete(self, order_id: str) -> bool:
        """Hard-delete an order. Returns False if it did not exist."""

    @abstractmethod
    async def list(self, criteria: OrderCriteria) -> list[Order]:
        """List orders matching ``criteria``, newest first."""

    @abstractmethod
    async def ids_allocated_to(self, warehouse_id: str) -> set[str]:
        """Ids of orders currently allocated to ``warehouse_id``."""


class ReturnRepository(ABC):
    """Persistence port for Return aggregates."""

    @abstractmethod
    async def get(self, return_id: str) -> Return | None:
        """Load one return, or None."""

    @abstractmethod
    async def save(self, returned: Return) -> None:
        """Insert or overwrite a return (last writer wins)."""

    @abstractmethod
    async def delete(self, return_id: str) -> bool:
        """Hard-delete a return. Returns False if it did not exist."""

    @abstractmethod
    async def list(
        self,
        criteria: ReturnCriteria,
        order_ids: set[str] | None = None,
    ) -> tuple[list[Return], int]:
        """List one page of returns, newest first.

        Args:
            criteria: Filters and paging.
            order_ids: Resolved order ids for a warehouse filter.

        Returns:
            Tuple of (page items, total matching count).
        """

    @abstractmethod
    async def count_for_order(self, order_id: str) -> int:
        """Number of returns pointing at ``order_id``."""


class WarehouseDirectory(ABC):
    """Read-only warehouse directory."""

    @abstractmethod
    async def get(self, warehouse_id: str) -> Warehouse | None:
        pass

    @abstractmethod
    async def get_many(self, warehouse_ids: Iterable[str]) -> dict[str, Warehouse]:
        pass

    @abstractmethod
    async def list_all(self) -> list[Warehouse]:
        pass

    @abstractmethod
    async def add(self, warehouse: Warehouse) -> None:
        """Register a warehouse (seeding and tests)."""


class CatalogDirectory(ABC):
    """Read-only product and variant descriptors."""

    @abstractmethod
    async def get_products(self, product_ids: Iterable[str]) -> dict[str, ProductDescriptor]:
        pass

    @abstractmethod
    async def get_variants(self, variant_ids: Iterable[str]) -> dict[str, VariantDescriptor]:
        pass

    @abstractmethod
    async def add_product(self, product: ProductDescriptor) -> None:
        """Register a product (seeding and tests)."""

    @abstractmethod
    async def add_variant(self, variant: VariantDescriptor) -> None:
        """Register a variant (seeding and tests)."""
