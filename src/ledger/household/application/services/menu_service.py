"""Weekly dinner menu accessor."""

from __future__ import annotations

from datetime import date

from household.application.services.base import HouseholdService
from household.domain.value_objects import empty_menu
from household.infrastructure.collections import WEEKLY_MENU
from scoping.domain.week import DAY_KEYS
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import ValidationError


class MenuService(HouseholdService):
    """Dish per weekday (``mon`` .. ``sun``) for one week."""

    async def load_menu(self, week: str | date | None = None) -> dict[str, str]:
        menu = await self._read(WEEKLY_MENU, await self._scope(week))
        return {**empty_menu(), **(menu or {})}

    async def save_dish(
        self, day: str, dish: str | None, week: str | date | None = None
    ) -> dict[str, str]:
        """Set (or with an empty dish, clear) the dish of one day.

        Raises:
            ValidationError: If the day key is unknown
        """
        if day not in DAY_KEYS:
            raise ValidationError(f"Unknown day key: {day!r}", field="day_key")
        clean = dish.strip() if isinstance(dish, str) else ""
        scope = await self._scope(week)
        menu = await self._write(
            WEEKLY_MENU,
            scope,
            WriteOperation.UPSERT,
            {"day_key": day, "dish_name": clean or None},
        )
        return {**empty_menu(), **(menu or {})}
