"""Shared plumbing for household accessors."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from caching.domain.collection import CollectionSpec
from coordination.coordinator import HouseholdCoordinator
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.scope import ScopeKey


class HouseholdService:
    """Base class giving accessors scoped read and write helpers."""

    def __init__(self, coordinator: HouseholdCoordinator):
        self._coordinator = coordinator

    async def _scope(self, week: str | date | None = None) -> ScopeKey:
        return await self._coordinator.scope(week)

    async def _read(self, spec: CollectionSpec, scope: ScopeKey) -> Any:
        return await self._coordinator.read(spec, scope)

    async def _write(
        self,
        spec: CollectionSpec,
        scope: ScopeKey,
        operation: WriteOperation,
        payload: Any = None,
        match: Mapping[str, Any] | None = None,
    ) -> Any:
        """Write, returning the post-write value.

        When the re-read after a successful write failed, the value comes
        from a regular read instead.
        """
        value = await self._coordinator.write(spec, scope, operation, payload, match=match)
        if value is None:
            value = await self._read(spec, scope)
        return value
