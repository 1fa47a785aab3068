"""Storage provider.

Selects the repository adapters named by ``settings.storage_backend``
and keeps one process-wide set, with a reset hook for tests.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from backoffice.infrastructure.config import settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from backoffice.application.repositories import (
        CatalogDirectory,
        OrderRepository,
        ReturnRepository,
        WarehouseDirectory,
    )


@dataclass
class Storage:
    """One consistent set of repositories."""

    orders: "OrderRepository"
    returns: "ReturnRepository"
    warehouses: "WarehouseDirectory"
    catalog: "CatalogDirectory"


def memory_storage() -> Storage:
    """Build a fresh in-memory storage."""
    from backoffice.infrastructure.memory import (
        InMemoryCatalogDirectory,
        InMemoryOrderRepository,
        InMemoryReturnRepository,
        InMemoryWarehouseDirectory,
    )

    return Storage(
        orders=InMemoryOrderRepository(),
        returns=InMemoryReturnRepository(),
        warehouses=InMemoryWarehouseDirectory(),
        catalog=InMemoryCatalogDirectory(),
    )


def sql_storage(session_factory: "async_sessionmaker[AsyncSession] | None" = None) -> Storage:
    """Build SQL-backed storage over ``session_factory`` (default: settings engine)."""
    from backoffice.infrastructure.database import get_session_factory
    from backoffice.infrastructure.repositories import (
        SqlCatalogDirectory,
        SqlOrderRepository,
        SqlReturnRepository,
        SqlWarehouseDirectory,
    )

    factory = session_factory or get_session_factory()
    return Storage(
        orders=SqlOrderRepository(factory),
        returns=SqlReturnRepository(factory),
        warehouses=SqlWarehouseDirectory(factory),
        catalog=SqlCatalogDirectory(factory),
    )


# Global storage instance
_storage: Storage | None = None


def get_storage() -> Storage:
    """Get storage singleton."""
    global _storage
    if _storage is None:
        if settings.storage_backend == "sql":
            _storage = sql_storage()
        elif settings.storage_backend == "memory":
            _storage = memory_storage()
        else:
            raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    return _storage


def reset_storage(storage: Storage | None = None) -> None:
    """Reset storage (for testing); installs ``storage`` or a fresh default."""
    global _storage
    _storage = storage
