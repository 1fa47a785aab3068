"""Database configuration and session management.

Provides the async SQLAlchemy engine and session factory used by the
SQL repository adapters. The engine is created on first use so the
in-memory backend never needs a database driver.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from backoffice.infrastructure.config import settings

# Base class for models
Base = declarative_base()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with driver-appropriate options.

    SQLite in-memory URLs share one connection so every session sees
    the same database.
    """
    if database_url.startswith("sqlite"):
        options: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/").endswith("aiosqlite:"):
            options["poolclass"] = StaticPool
        return create_async_engine(database_url, echo=echo, **options)
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to ``engine``."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it from settings."""
    global _engine
    if _engine is None:
        _engine = create_engine(settings.database_url, echo=settings.debug)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create all tables (tests and local development; production uses alembic)."""
    from backoffice.infrastructure import models  # noqa: F401

    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database(session_factory: async_sessionmaker[AsyncSession] | None = None) -> bool:
    """Run a trivial query to check connectivity."""
    async with (session_factory or get_session_factory())() as session:
        await session.execute(text("SELECT 1"))
    return True


async def dispose_engine() -> None:
    """Dispose the process-wide engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
