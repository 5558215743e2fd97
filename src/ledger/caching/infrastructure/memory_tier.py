"""Process-lifetime memory tier."""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

from caching.domain.entry import CacheEntry, CacheTier
from caching.domain.keys import tier_key
from shared_kernel.scope import ScopeKey


class MemoryTier:
    """Mutable map of collection instances held for the process lifetime.

    Values are deep-copied on the way in and out, so callers mutating a
    returned list never change what the next reader sees.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[ScopeKey, str, CacheEntry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, scope: ScopeKey, collection: str) -> CacheEntry | None:
        found = self._entries.get(tier_key(scope, collection))
        if found is None:
            return None
        entry = found[2]
        return CacheEntry(
            value=copy.deepcopy(entry.value),
            tier=CacheTier.MEMORY,
            fetched_at=entry.fetched_at,
        )

    def put(
        self, scope: ScopeKey, collection: str, value: Any, fetched_at: datetime
    ) -> None:
        entry = CacheEntry(
            value=copy.deepcopy(value), tier=CacheTier.MEMORY, fetched_at=fetched_at
        )
        self._entries[tier_key(scope, collection)] = (scope, collection, entry)

    def drop(self, scope: ScopeKey, collection: str) -> bool:
        return self._entries.pop(tier_key(scope, collection), None) is not None

    def drop_matching(
        self,
        tenant_id: str | None = None,
        bucket: str | None = None,
        collection: str | None = None,
    ) -> int:
        """Drop every entry matching all given criteria; no criteria drops all."""
        doomed = [
            key
            for key, (scope, name, _) in self._entries.items()
            if (tenant_id is None or scope.tenant_id == tenant_id)
            and (bucket is None or scope.bucket == bucket)
            and (collection is None or name == collection)
        ]
        for key in doomed:
            del self._entries[key]
        return len(doomed)
