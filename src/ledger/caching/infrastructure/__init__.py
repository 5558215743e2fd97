"""Infrastructure layer for the layered cache."""

from caching.infrastructure.legacy_reader import LegacyReader
from caching.infrastructure.memory_tier import MemoryTier
from caching.infrastructure.observability import (
    CacheStorageProbe,
    DefaultCacheStorageProbe,
)
from caching.infrastructure.persistent_tier import PersistedEntry, PersistentTier

__all__ = [
    "CacheStorageProbe",
    "DefaultCacheStorageProbe",
    "LegacyReader",
    "MemoryTier",
    "PersistedEntry",
    "PersistentTier",
]
