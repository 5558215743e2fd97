"""Grocery store accessor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from household.application.services.base import HouseholdService
from household.domain.value_objects import Store
from household.infrastructure.collections import STORES
from shared_kernel.datasource.types import WriteOperation


def _to_stores(rows: Any) -> list[Store]:
    stores = [Store.from_row(row) for row in rows or []]
    return [store for store in stores if store is not None]


class StoreService(HouseholdService):
    """The stores a household shops at."""

    async def load_stores(self) -> list[Store]:
        return _to_stores(await self._read(STORES, await self._scope()))

    async def active_stores(self) -> list[Store]:
        return [store for store in await self.load_stores() if store.enabled]

    async def save_stores(self, stores: Sequence[Store | dict[str, Any]]) -> list[Store]:
        """Replace the store list.

        Stores are matched by name: listed ones are upserted in the given
        order, stores missing from the list are deleted. Entries without a
        name are ignored.
        """
        wanted: list[dict[str, Any]] = []
        for entry in stores:
            store = entry if isinstance(entry, Store) else Store.from_row(entry)
            if store is None or any(row["name"] == store.name for row in wanted):
                continue
            wanted.append(
                {"name": store.name, "enabled": store.enabled, "sort_order": len(wanted)}
            )

        scope = await self._scope()
        current = _to_stores(await self._read(STORES, scope))

        rows = current
        if wanted:
            rows = await self._write(STORES, scope, WriteOperation.UPSERT, wanted)

        names = {row["name"] for row in wanted}
        for store in current:
            if store.name not in names and store.id is not None:
                rows = await self._write(
                    STORES, scope, WriteOperation.DELETE, match={"id": store.id}
                )
        return _to_stores(rows)
