"""Reader for pre-tenant (legacy) records.

Single-user versions kept their data in the same durable store under bare
keys such as ``purchase_categories_v1`` or ``shoppingList_2026-10-19``.
Those records are read-only input for the migration seeder.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from caching.domain.collection import CollectionSpec
from caching.infrastructure.observability import (
    CacheStorageProbe,
    DefaultCacheStorageProbe,
)
from shared_kernel.exceptions import StorageUnavailableError
from shared_kernel.scope import ScopeKey
from shared_kernel.storage.protocols import PersistentStore


class LegacyReader:
    """Reads the legacy record matching a collection instance."""

    def __init__(
        self,
        store: PersistentStore,
        probe: CacheStorageProbe | None = None,
    ):
        self._store = store
        self._probe = probe or DefaultCacheStorageProbe()

    async def read(self, spec: CollectionSpec, scope: ScopeKey) -> Any | None:
        """Return the first non-empty legacy value, or None.

        Keys are tried in the order the collection lists them, so a
        week-specific record wins over a global one.
        """
        if not spec.migrates_legacy or spec.legacy_keys is None:
            return None

        for key in spec.legacy_keys(scope.bucket):
            value = await self.read_key(key, spec.legacy_parser)
            if value is not None and not spec.is_empty(value):
                return value

        return None

    async def read_key(
        self, key: str, parser: Callable[[Any], Any] | None = None
    ) -> Any | None:
        """Decode one legacy record; unreadable records count as absent."""
        try:
            raw = await self._store.get(key)
        except StorageUnavailableError as e:
            self._probe.legacy_record_unreadable(key=key, error=e)
            return None
        if raw is None:
            return None

        try:
            decoded = json.loads(raw)
        except ValueError as e:
            self._probe.legacy_record_unreadable(key=key, error=e)
            return None

        return parser(decoded) if parser else decoded
