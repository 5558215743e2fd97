"""Durable key-value store port shared by all bounded contexts."""

from shared_kernel.storage.protocols import PersistentStore

__all__ = ["PersistentStore"]
