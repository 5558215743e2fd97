"""Migration seeder.

Populates a tenant's remote collection the first time it is found empty:
with the pre-tenant (legacy) record when one exists, otherwise with the
collection's built-in defaults. A persisted seeded marker distinguishes
"never seeded" from "emptied by the user", so a collection the user
cleared is never seeded again.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from caching.application.observability import (
    DefaultMigrationSeederProbe,
    MigrationSeederProbe,
)
from caching.domain.collection import CollectionSpec
from caching.domain.keys import seeded_marker_key
from caching.infrastructure.legacy_reader import LegacyReader
from caching.infrastructure.persistent_tier import PersistentTier
from shared_kernel.datasource.protocols import RemoteSource
from shared_kernel.exceptions import RemoteUnavailableError, StorageUnavailableError
from shared_kernel.scope import ScopeKey


@dataclass(frozen=True)
class SeedOutcome:
    """Result of a seeding attempt.

    Attributes:
        value: The collection value to hand to the caller
        authoritative: Whether the value reflects the remote tier and may
            be cached
        source: "remote", "legacy", "defaults" or "default"
    """

    value: Any
    authoritative: bool
    source: str


class MigrationSeeder:
    """Seeds empty tenant collections at most once.

    Seeding runs are not coalesced. Within this process a run holds a
    claim on its marker key, and a second caller arriving while the claim
    is held gets the legacy or default value as a non-authoritative answer
    instead of seeding again. Across processes sharing the remote tier
    the marker, written right before the insert, only narrows the race.
    """

    def __init__(
        self,
        remote: RemoteSource,
        persistent: PersistentTier,
        legacy: LegacyReader,
        clock: Callable[[], datetime],
        probe: MigrationSeederProbe | None = None,
    ):
        self._remote = remote
        self._persistent = persistent
        self._legacy = legacy
        self._clock = clock
        self._probe = probe or DefaultMigrationSeederProbe()
        self._claims: set[str] = set()
        self._known_marked: set[str] = set()

    @staticmethod
    def participates(spec: CollectionSpec) -> bool:
        return spec.migrates_legacy or spec.seeds_defaults

    async def seed(self, spec: CollectionSpec, scope: ScopeKey, empty: Any) -> SeedOutcome:
        """Handle a remote read that came back empty.

        Args:
            spec: The collection that was read
            scope: Normalized scope of the read
            empty: The (empty) value the remote read produced

        Returns:
            The outcome; never raises for remote or storage failures
        """
        marker = seeded_marker_key(scope, spec.name)
        if marker in self._claims:
            self._probe.seeding_skipped(spec.name, scope, reason="in_progress")
            value, source = await self.fallback(spec, scope)
            return SeedOutcome(value=value, authoritative=False, source=source)

        self._claims.add(marker)
        try:
            return await self._seed_claimed(spec, scope, empty, marker)
        finally:
            self._claims.discard(marker)

    async def fallback(self, spec: CollectionSpec, scope: ScopeKey) -> tuple[Any, str]:
        """Last-resort value: the legacy record, else the default."""
        legacy = await self._legacy.read(spec, scope)
        if legacy is not None:
            return legacy, "legacy"
        return spec.default(), "default"

    async def note_populated(self, spec: CollectionSpec, scope: ScopeKey) -> None:
        """Mark a collection seeded once it is known to hold user data."""
        if not self.participates(spec):
            return
        marker = seeded_marker_key(scope, spec.name)
        if marker in self._known_marked:
            return
        try:
            await self._persistent.mark(scope, spec.name, self._clock())
        except StorageUnavailableError as e:
            self._probe.seeding_failed(spec.name, scope, error=e)
            return
        self._known_marked.add(marker)

    async def _seed_claimed(
        self, spec: CollectionSpec, scope: ScopeKey, empty: Any, marker: str
    ) -> SeedOutcome:
        try:
            marked = marker in self._known_marked or await self._persistent.is_marked(
                scope, spec.name
            )
        except StorageUnavailableError as e:
            self._probe.seeding_failed(spec.name, scope, error=e)
            value, source = await self.fallback(spec, scope)
            return SeedOutcome(value=value, authoritative=False, source=source)

        if marked:
            self._known_marked.add(marker)
            self._probe.seeding_skipped(spec.name, scope, reason="already_seeded")
            return SeedOutcome(value=empty, authoritative=True, source="remote")

        legacy = await self._legacy.read(spec, scope)
        if legacy is not None:
            value, source = legacy, "legacy"
        elif spec.seeds_defaults:
            value, source = spec.default(), "defaults"
        else:
            await self.note_populated(spec, scope)
            self._probe.nothing_to_seed(spec.name, scope)
            return SeedOutcome(value=empty, authoritative=True, source="remote")

        try:
            await self._persistent.mark(scope, spec.name, self._clock())
        except StorageUnavailableError as e:
            self._probe.seeding_failed(spec.name, scope, error=e)
            return SeedOutcome(value=value, authoritative=False, source=source)

        try:
            rows = await spec.seed(self._remote, scope, value)
        except RemoteUnavailableError as e:
            await self._persistent.unmark(scope, spec.name)
            self._probe.seeding_failed(spec.name, scope, error=e)
            return SeedOutcome(value=value, authoritative=False, source=source)

        self._known_marked.add(marker)
        self._probe.collection_seeded(spec.name, scope, source=source, row_count=len(rows))

        try:
            refreshed = await spec.fetch(self._remote, scope)
        except RemoteUnavailableError as e:
            # The insert landed, so the marker stays; the next read refetches
            self._probe.seeding_failed(spec.name, scope, error=e)
            return SeedOutcome(value=value, authoritative=False, source=source)

        return SeedOutcome(value=refreshed, authoritative=True, source=source)
