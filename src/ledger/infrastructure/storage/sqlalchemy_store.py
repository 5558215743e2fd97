"""SQLAlchemy implementation of the PersistentStore port."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.storage.models import KeyValueModel
from shared_kernel.exceptions import StorageUnavailableError
from shared_kernel.storage.protocols import PersistentStore


class SqlAlchemyPersistentStore(PersistentStore):
    """Durable string store kept in a single ``kv_entries`` table.

    Each call runs in its own short transaction so a failure never leaves
    a session half-committed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory for creating database sessions
        """
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KeyValueModel.value).where(KeyValueModel.key == key)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Failed to read key '{key}'") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    model = await session.get(KeyValueModel, key)
                    if model:
                        model.value = value
                    else:
                        session.add(KeyValueModel(key=key, value=value))
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Failed to write key '{key}'") from e

    async def remove(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(KeyValueModel).where(KeyValueModel.key == key)
                    )
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Failed to remove key '{key}'") from e
