"""Purchase category accessor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from household.application.services.base import HouseholdService
from household.domain.value_objects import Category
from household.infrastructure.collections import CATEGORIES
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import ValidationError


def _to_categories(rows: Any) -> list[Category]:
    categories = [Category.from_row(row, index) for index, row in enumerate(rows or [])]
    return [category for category in categories if category is not None]


def _clean_name(name: Any) -> str:
    clean = name.strip() if isinstance(name, str) else ""
    if not clean:
        raise ValidationError("Name cannot be empty", field="name")
    return clean


class CategoryService(HouseholdService):
    """Household purchase categories, ordered by sort order then name."""

    async def load_categories(self) -> list[Category]:
        return _to_categories(await self._read(CATEGORIES, await self._scope()))

    async def active_categories(self) -> list[Category]:
        return [category for category in await self.load_categories() if category.enabled]

    def cached_categories(self) -> list[Category] | None:
        """Categories held in memory for the resolved household, without I/O."""
        rows = self._coordinator.peek(CATEGORIES)
        return None if rows is None else _to_categories(rows)

    async def add_category(
        self,
        name: str,
        enabled: bool = True,
        sort_order: int | None = None,
    ) -> list[Category]:
        """Add a category; without a sort order it goes last.

        Raises:
            ValidationError: If the name is empty
        """
        clean = _clean_name(name)
        scope = await self._scope()
        if sort_order is None:
            existing = _to_categories(await self._read(CATEGORIES, scope))
            sort_order = max((c.sort_order for c in existing), default=-1) + 1

        rows = await self._write(
            CATEGORIES,
            scope,
            WriteOperation.INSERT,
            {"name": clean, "enabled": bool(enabled), "sort_order": sort_order},
        )
        return _to_categories(rows)

    async def rename_category(self, category_id: str, name: str) -> list[Category]:
        clean = _clean_name(name)
        return await self._update(category_id, {"name": clean})

    async def toggle_category(self, category_id: str, enabled: bool) -> list[Category]:
        return await self._update(category_id, {"enabled": bool(enabled)})

    async def delete_category(self, category_id: str) -> list[Category]:
        self._require_id(category_id)
        scope = await self._scope()
        rows = await self._write(
            CATEGORIES, scope, WriteOperation.DELETE, match={"id": category_id}
        )
        return _to_categories(rows)

    async def reorder_categories(
        self, ordered: Sequence[str | Category | dict[str, Any]]
    ) -> list[Category]:
        """Persist a new order given ids, categories or ``{id, sort_order}`` rows.

        Entries without an id are skipped; an explicit sort order wins over
        the position in the sequence.
        """
        rows = []
        for index, entry in enumerate(ordered or []):
            if isinstance(entry, str):
                category_id, sort_order = entry, None
            elif isinstance(entry, Category):
                category_id, sort_order = entry.id, entry.sort_order
            elif isinstance(entry, dict):
                category_id, sort_order = entry.get("id"), entry.get("sort_order")
            else:
                continue
            if not category_id:
                continue
            if not isinstance(sort_order, int) or isinstance(sort_order, bool):
                sort_order = index
            rows.append({"id": category_id, "sort_order": sort_order})

        if not rows:
            return await self.load_categories()

        scope = await self._scope()
        return _to_categories(await self._write(CATEGORIES, scope, WriteOperation.UPSERT, rows))

    async def _update(self, category_id: str, values: dict[str, Any]) -> list[Category]:
        self._require_id(category_id)
        scope = await self._scope()
        rows = await self._write(
            CATEGORIES, scope, WriteOperation.UPDATE, values, match={"id": category_id}
        )
        return _to_categories(rows)

    @staticmethod
    def _require_id(category_id: str) -> None:
        if not category_id:
            raise ValidationError("Category id is required", field="id")
