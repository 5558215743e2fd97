"""Durable tier on top of the PersistentStore port.

Entries are stored as JSON envelopes ``{"value": ..., "fetched_at": ...}``
under the tenant-scoped tier key. The same store holds the seeded markers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as EnvelopeError

from caching.domain.entry import CacheEntry, CacheTier
from caching.domain.keys import seeded_marker_key, tier_key
from caching.infrastructure.observability import (
    CacheStorageProbe,
    DefaultCacheStorageProbe,
)
from shared_kernel.exceptions import StorageUnavailableError
from shared_kernel.scope import ScopeKey
from shared_kernel.storage.protocols import PersistentStore


class PersistedEntry(BaseModel):
    """Envelope written to the durable store."""

    value: Any
    fetched_at: datetime


class PersistentTier:
    """Tenant-scoped durable entries and seeded markers."""

    def __init__(
        self,
        store: PersistentStore,
        probe: CacheStorageProbe | None = None,
    ):
        self._store = store
        self._probe = probe or DefaultCacheStorageProbe()

    async def get(self, scope: ScopeKey, collection: str) -> CacheEntry | None:
        """Read an entry; unreadable or corrupt entries count as a miss."""
        key = tier_key(scope, collection)
        try:
            raw = await self._store.get(key)
        except StorageUnavailableError as e:
            self._probe.persistent_read_failed(key=key, error=e)
            return None
        if raw is None:
            return None

        try:
            persisted = PersistedEntry.model_validate_json(raw)
        except EnvelopeError as e:
            self._probe.corrupt_entry(key=key, error=e)
            return None

        return CacheEntry(
            value=persisted.value,
            tier=CacheTier.PERSISTENT,
            fetched_at=persisted.fetched_at,
        )

    async def put(
        self, scope: ScopeKey, collection: str, value: Any, fetched_at: datetime
    ) -> None:
        key = tier_key(scope, collection)
        raw = PersistedEntry(value=value, fetched_at=fetched_at).model_dump_json()
        try:
            await self._store.set(key, raw)
        except StorageUnavailableError as e:
            self._probe.persistent_write_failed(key=key, error=e)

    async def drop(self, scope: ScopeKey, collection: str) -> None:
        key = tier_key(scope, collection)
        try:
            await self._store.remove(key)
        except StorageUnavailableError as e:
            self._probe.persistent_write_failed(key=key, error=e)

    async def is_marked(self, scope: ScopeKey, collection: str) -> bool:
        """Whether the collection instance was seeded before.

        Raises:
            StorageUnavailableError: If the marker cannot be read
        """
        return await self._store.get(seeded_marker_key(scope, collection)) is not None

    async def mark(self, scope: ScopeKey, collection: str, stamp: datetime) -> None:
        """Record the collection instance as seeded.

        Raises:
            StorageUnavailableError: If the marker cannot be written
        """
        await self._store.set(seeded_marker_key(scope, collection), stamp.isoformat())

    async def unmark(self, scope: ScopeKey, collection: str) -> None:
        key = seeded_marker_key(scope, collection)
        try:
            await self._store.remove(key)
        except StorageUnavailableError as e:
            self._probe.persistent_write_failed(key=key, error=e)
