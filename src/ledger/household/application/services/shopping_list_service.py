"""Weekly shopping list accessor."""

from __future__ import annotations

from datetime import date
from typing import Any

from household.application.services.base import HouseholdService
from household.domain.value_objects import ShoppingItem, clamp_quantity
from household.infrastructure.collections import SHOPPING_ITEMS
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import ValidationError


def _to_items(rows: Any) -> list[ShoppingItem]:
    items = [ShoppingItem.from_row(row) for row in rows or []]
    return [item for item in items if item is not None]


def _require_id(item_id: str | None) -> str:
    if not item_id:
        raise ValidationError("Item id is required", field="id")
    return item_id


class ShoppingListService(HouseholdService):
    """Shopping list items of one week."""

    async def load_items(self, week: str | date | None = None) -> list[ShoppingItem]:
        return _to_items(await self._read(SHOPPING_ITEMS, await self._scope(week)))

    async def add_item(
        self,
        name: str,
        category: str | None = None,
        quantity: Any = 1,
        week: str | date | None = None,
    ) -> list[ShoppingItem]:
        """Add an item.

        Raises:
            ValidationError: If the name is empty
        """
        clean = name.strip() if isinstance(name, str) else ""
        if not clean:
            raise ValidationError("Name cannot be empty", field="name")
        payload = {
            "name": clean,
            "category": category.strip() if isinstance(category, str) and category.strip() else None,
            "quantity": clamp_quantity(quantity),
            "checked": False,
        }
        scope = await self._scope(week)
        return _to_items(await self._write(SHOPPING_ITEMS, scope, WriteOperation.INSERT, payload))

    async def update_quantity(
        self, item_id: str, quantity: Any, week: str | date | None = None
    ) -> list[ShoppingItem]:
        return await self._update(_require_id(item_id), {"quantity": clamp_quantity(quantity)}, week)

    async def toggle_checked(
        self, item_id: str, checked: bool, week: str | date | None = None
    ) -> list[ShoppingItem]:
        return await self._update(_require_id(item_id), {"checked": bool(checked)}, week)

    async def delete_item(
        self, item_id: str | None, week: str | date | None = None
    ) -> list[ShoppingItem]:
        if not item_id:
            return await self.load_items(week)
        scope = await self._scope(week)
        rows = await self._write(
            SHOPPING_ITEMS, scope, WriteOperation.DELETE, match={"id": item_id}
        )
        return _to_items(rows)

    async def mark_all_checked(self, week: str | date | None = None) -> list[ShoppingItem]:
        scope = await self._scope(week)
        rows = await self._write(SHOPPING_ITEMS, scope, WriteOperation.UPDATE, {"checked": True})
        return _to_items(rows)

    async def clear_checked(self, week: str | date | None = None) -> list[ShoppingItem]:
        scope = await self._scope(week)
        rows = await self._write(
            SHOPPING_ITEMS, scope, WriteOperation.DELETE, match={"checked": True}
        )
        return _to_items(rows)

    async def _update(
        self, item_id: str, values: dict[str, Any], week: str | date | None
    ) -> list[ShoppingItem]:
        scope = await self._scope(week)
        rows = await self._write(
            SHOPPING_ITEMS, scope, WriteOperation.UPDATE, values, match={"id": item_id}
        )
        return _to_items(rows)
