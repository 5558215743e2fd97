"""Database engine creation for the durable key-value store.

The store is local to one device, so the default URL points at a SQLite
file through aiosqlite; any SQLAlchemy async URL works.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from infrastructure.storage.models import Base

if TYPE_CHECKING:
    from infrastructure.settings import StoreSettings

__all__ = [
    "create_store_engine",
    "create_session_factory",
    "create_schema",
]


def create_store_engine(settings: StoreSettings) -> AsyncEngine:
    """Create the async engine for the durable store.

    Args:
        settings: Store settings

    Returns:
        Configured async engine
    """
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.echo,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the key-value table if it does not exist."""
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
