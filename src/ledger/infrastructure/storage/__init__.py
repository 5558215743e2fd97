"""Durable key-value store adapters."""

from infrastructure.storage.in_memory_store import InMemoryPersistentStore
from infrastructure.storage.sqlalchemy_store import SqlAlchemyPersistentStore

__all__ = [
    "InMemoryPersistentStore",
    "SqlAlchemyPersistentStore",
]
