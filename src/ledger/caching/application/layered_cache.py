"""Layered cache.

Generic read-through / write-through cache for tenant-scoped collections
with three tiers: memory (process lifetime), persistent (durable store)
and remote (authoritative data service).

Reads are stale-while-revalidate: a memory or persistent hit is returned
without waiting on the remote tier, and a refresh runs in the background
when the value is stale (memory) or unverified (persistent). Only a full
miss blocks on the remote tier. When that blocking read fails, the legacy
record or the collection default is returned and never cached, so a later
successful read still wins.
"""

from __future__ import annotations

import asyncio
import weakref
from collections import defaultdict
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from caching.application.migration_seeder import MigrationSeeder
from caching.application.observability import (
    DefaultLayeredCacheProbe,
    LayeredCacheProbe,
    MigrationSeederProbe,
)
from caching.domain.collection import CollectionSpec
from caching.domain.keys import tenant_prefix, tier_key
from caching.infrastructure.legacy_reader import LegacyReader
from caching.infrastructure.memory_tier import MemoryTier
from caching.infrastructure.observability import CacheStorageProbe
from caching.infrastructure.persistent_tier import PersistentTier
from shared_kernel.datasource.protocols import RemoteSource
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import RemoteUnavailableError
from shared_kernel.scope import ScopeKey
from shared_kernel.storage.protocols import PersistentStore

DEFAULT_STALENESS = timedelta(minutes=5)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class LayeredCache:
    """Memory, persistent and remote tiers behind one read/write API.

    Every tier key embeds the tenant id, so no tier ever answers a read for
    one tenant with data stored for another.

    Stored results are guarded by a version token made of a global epoch,
    the tenant's epoch and the key's write counter. A fetch started before
    an invalidation or a write never installs its (older) result.
    """

    def __init__(
        self,
        remote: RemoteSource,
        store: PersistentStore,
        *,
        staleness: timedelta = DEFAULT_STALENESS,
        clock: Callable[[], datetime] = _utc_now,
        probe: LayeredCacheProbe | None = None,
        storage_probe: CacheStorageProbe | None = None,
        seeder_probe: MigrationSeederProbe | None = None,
    ):
        """Initialize the cache.

        Args:
            remote: Authoritative data service
            store: Durable key-value store for the persistent tier, the
                seeded markers and the legacy records
            staleness: Age after which a memory hit triggers a refresh
            clock: Source of fetch timestamps
            probe: Domain probe for cache events
            storage_probe: Domain probe for durable-store problems
            seeder_probe: Domain probe for the migration seeder
        """
        if staleness <= timedelta(0):
            raise ValueError("staleness must be positive")

        self._remote = remote
        self._staleness = staleness
        self._clock = clock
        self._probe = probe or DefaultLayeredCacheProbe()
        self._memory = MemoryTier()
        self._persistent = PersistentTier(store, probe=storage_probe)
        self._legacy = LegacyReader(store, probe=storage_probe)
        self._seeder = MigrationSeeder(
            remote, self._persistent, self._legacy, clock=clock, probe=seeder_probe
        )

        self._refreshes: dict[str, asyncio.Task[None]] = {}
        self._write_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._global_epoch = 0
        self._tenant_epochs: defaultdict[str, int] = defaultdict(int)
        self._key_versions: defaultdict[str, int] = defaultdict(int)

    @property
    def staleness(self) -> timedelta:
        return self._staleness

    @property
    def memory(self) -> MemoryTier:
        return self._memory

    @property
    def seeder(self) -> MigrationSeeder:
        return self._seeder

    async def read(self, spec: CollectionSpec, scope: ScopeKey) -> Any:
        """Return the freshest available value for a collection instance.

        Never raises RemoteUnavailableError: a failing remote tier falls
        back to the legacy record or the collection default.

        Raises:
            ValidationError: If a bucketed collection gets the global bucket
        """
        scope = spec.normalize(scope)

        entry = self._memory.get(scope, spec.name)
        if entry is not None:
            stale = entry.is_stale(self._clock(), self._staleness)
            self._probe.cache_hit(spec.name, scope, tier=entry.tier, stale=stale)
            if stale:
                self._schedule_refresh(spec, scope)
            return entry.value

        token = self._token(scope, spec.name)
        entry = await self._persistent.get(scope, spec.name)
        if entry is not None:
            current = self._memory.get(scope, spec.name)
            if current is not None:
                return current.value
            if token == self._token(scope, spec.name):
                self._memory.put(scope, spec.name, entry.value, entry.fetched_at)
            self._probe.cache_hit(spec.name, scope, tier=entry.tier, stale=True)
            self._schedule_refresh(spec, scope)
            return entry.value

        self._probe.cache_miss(spec.name, scope)
        try:
            value, authoritative = await self._fetch(spec, scope)
        except RemoteUnavailableError as e:
            self._probe.remote_read_failed(spec.name, scope, error=e)
            value, source = await self._seeder.fallback(spec, scope)
            self._probe.fallback_served(spec.name, scope, source=source)
            return value

        if authoritative:
            await self._install(spec, scope, value, token)
        else:
            self._probe.fallback_served(spec.name, scope, source="seeding")
        return value

    async def write(
        self,
        spec: CollectionSpec,
        scope: ScopeKey,
        operation: WriteOperation | str,
        payload: Any = None,
        *,
        match: Mapping[str, Any] | None = None,
    ) -> Any | None:
        """Apply a mutation remotely, then refresh the local tiers.

        Writes to the same collection instance run one at a time, in the
        order they were issued. The local tiers are only touched once the
        remote mutation succeeded, and only with state re-read from the
        remote tier.

        Args:
            spec: Target collection
            scope: Target collection instance
            operation: insert, update, upsert or delete
            payload: Row(s) or column values
            match: Extra equality filters for update and delete

        Returns:
            The post-write collection value, or None when the mutation
            succeeded but the follow-up read failed (the local entries are
            dropped so the next read refetches)

        Raises:
            ValidationError: If the payload is rejected, before any remote call
            RemoteUnavailableError: If the mutation fails; the cache is untouched
        """
        operation = WriteOperation(operation)
        scope = spec.normalize(scope)
        spec.validate(operation, payload)

        key = tier_key(scope, spec.name)
        lock = self._write_locks.get(key)
        if lock is None:
            lock = self._write_locks[key] = asyncio.Lock()
        async with lock:
            try:
                await spec.store(self._remote, scope, operation, payload, match)
            except RemoteUnavailableError as e:
                self._probe.write_failed(spec.name, scope, str(operation), error=e)
                raise
            self._probe.write_completed(spec.name, scope, str(operation))

            self._key_versions[key] += 1
            token = self._token(scope, spec.name)
            await self._seeder.note_populated(spec, scope)

            try:
                value = await spec.fetch(self._remote, scope)
            except RemoteUnavailableError as e:
                self._probe.post_write_refresh_failed(spec.name, scope, error=e)
                self._memory.drop(scope, spec.name)
                await self._persistent.drop(scope, spec.name)
                return None

            await self._install(spec, scope, value, token)
            return value

    async def legacy_value(
        self, key: str, parser: Callable[[Any], Any] | None = None
    ) -> Any | None:
        """Read a pre-tenant record that belongs to no collection instance.

        The value is never cached; callers use it as a last-resort fallback.
        """
        return await self._legacy.read_key(key, parser)

    def peek(self, spec: CollectionSpec, scope: ScopeKey) -> Any | None:
        """Return the memory-tier value without any I/O, or None."""
        entry = self._memory.get(spec.normalize(scope), spec.name)
        return entry.value if entry is not None else None

    def invalidate(
        self,
        tenant_id: str | None = None,
        scope: ScopeKey | None = None,
        collection: CollectionSpec | str | None = None,
    ) -> int:
        """Drop memory entries.

        With no arguments every entry is dropped. A tenant id drops all of
        that tenant's scopes, a scope drops one bucket and a collection
        narrows either to one collection. Refreshes already in flight for
        the affected tenant will not repopulate the dropped entries. Dropping
        a whole tenant also forgets its write counters.

        Returns:
            Number of entries dropped
        """
        name = collection.name if isinstance(collection, CollectionSpec) else collection
        bucket = None
        if scope is not None:
            if isinstance(collection, CollectionSpec) and not collection.bucketed:
                scope = scope.unbucketed()
            tenant_id, bucket = scope.tenant_id, scope.bucket

        dropped = self._memory.drop_matching(
            tenant_id=tenant_id, bucket=bucket, collection=name
        )
        if tenant_id is None:
            self._global_epoch += 1
            self._tenant_epochs.clear()
            self._key_versions.clear()
        elif bucket is None and name is None:
            # Counters restart from zero, so the global epoch moves instead
            self._global_epoch += 1
            self._tenant_epochs.pop(tenant_id, None)
            prefix = tenant_prefix(tenant_id)
            for key in [k for k in self._key_versions if k.startswith(prefix)]:
                del self._key_versions[key]
        else:
            self._tenant_epochs[tenant_id] += 1

        self._probe.invalidated(tenant_id, bucket, name, dropped=dropped)
        return dropped

    def on_tenant_invalidated(self, previous_tenant_id: str | None) -> None:
        """Tenant resolver listener: forget the previous tenant's entries."""
        self.invalidate(tenant_id=previous_tenant_id)

    async def drain(self) -> None:
        """Wait for all background refreshes, including ones they trigger."""
        while self._refreshes:
            await asyncio.gather(*list(self._refreshes.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel background refreshes and wait for them to finish."""
        tasks = list(self._refreshes.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._refreshes.clear()

    async def _fetch(self, spec: CollectionSpec, scope: ScopeKey) -> tuple[Any, bool]:
        """Remote read plus seeding. Returns the value and whether it may be cached."""
        value = await spec.fetch(self._remote, scope)
        if not spec.is_empty(value):
            await self._seeder.note_populated(spec, scope)
            return value, True
        if not self._seeder.participates(spec):
            return value, True

        outcome = await self._seeder.seed(spec, scope, value)
        return outcome.value, outcome.authoritative

    async def _install(
        self,
        spec: CollectionSpec,
        scope: ScopeKey,
        value: Any,
        token: tuple[int, int, int],
    ) -> bool:
        if token != self._token(scope, spec.name):
            return False
        fetched_at = self._clock()
        self._memory.put(scope, spec.name, value, fetched_at)
        await self._persistent.put(scope, spec.name, value, fetched_at)
        return True

    def _schedule_refresh(self, spec: CollectionSpec, scope: ScopeKey) -> None:
        key = tier_key(scope, spec.name)
        if key in self._refreshes:
            return

        task = asyncio.create_task(
            self._refresh(spec, scope, self._token(scope, spec.name))
        )
        self._refreshes[key] = task

        def forget(done: asyncio.Task[None]) -> None:
            if self._refreshes.get(key) is done:
                del self._refreshes[key]

        task.add_done_callback(forget)
        self._probe.refresh_scheduled(spec.name, scope)

    async def _refresh(
        self, spec: CollectionSpec, scope: ScopeKey, token: tuple[int, int, int]
    ) -> None:
        try:
            value, authoritative = await self._fetch(spec, scope)
            if authoritative and await self._install(spec, scope, value, token):
                self._probe.refresh_completed(spec.name, scope)
        except Exception as e:
            self._probe.refresh_failed(spec.name, scope, error=e)

    def _token(self, scope: ScopeKey, collection: str) -> tuple[int, int, int]:
        return (
            self._global_epoch,
            self._tenant_epochs.get(scope.tenant_id, 0),
            self._key_versions.get(tier_key(scope, collection), 0),
        )
