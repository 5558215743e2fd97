"""Weekly budget and purchases accessor."""

from __future__ import annotations

from datetime import date
from typing import Any

from coordination.coordinator import HouseholdCoordinator
from household.application.services.base import HouseholdService
from household.domain.amounts import parse_amount, positive_amount, safe_sum_purchases
from household.domain.defaults import DEFAULT_WEEKLY_BUDGET
from household.domain.value_objects import Purchase, WeekSummary
from household.infrastructure.collections import (
    HOUSEHOLD_SETTINGS,
    PURCHASES,
    WEEKLY_BUDGET,
)
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import ValidationError
from shared_kernel.scope import ScopeKey

# Single-user versions kept the last budget entered for any week here
LEGACY_GLOBAL_BUDGET_KEY = "weeklyBudget"


class BudgetService(HouseholdService):
    """Budget status per week.

    The budget of a week is, in order: the week's own budget row (or its
    migrated legacy value), the household's default weekly budget, the
    pre-tenant global budget, and finally the configured fallback. The
    global record is never copied into a week.
    """

    def __init__(
        self,
        coordinator: HouseholdCoordinator,
        default_weekly_budget: float = DEFAULT_WEEKLY_BUDGET,
    ):
        super().__init__(coordinator)
        self._default_weekly_budget = default_weekly_budget

    async def load_week_summary(
        self,
        week: str | date | None = None,
        include_purchases: bool = True,
    ) -> WeekSummary:
        scope = await self._scope(week)
        budget = await self._budget_for(scope)
        purchases: list[dict[str, Any]] = []
        if include_purchases:
            purchases = list(await self._read(PURCHASES, scope) or [])

        spent = safe_sum_purchases(purchases)
        return WeekSummary(
            week=scope.bucket,
            budget=budget,
            spent=spent,
            remaining=budget - spent,
            purchases=purchases,
        )

    async def set_week_budget(self, amount: Any, week: str | date | None = None) -> float:
        """Set the budget of a week.

        Raises:
            ValidationError: If the amount is not positive
        """
        value = positive_amount(amount)
        if value is None:
            raise ValidationError("Budget must be a positive amount", field="amount")
        scope = await self._scope(week)
        stored = await self._write(WEEKLY_BUDGET, scope, WriteOperation.UPSERT, {"amount": value})
        return stored if stored is not None else value

    async def list_purchases(self, week: str | date | None = None) -> list[Purchase]:
        scope = await self._scope(week)
        return [Purchase.from_row(row) for row in await self._read(PURCHASES, scope) or []]

    async def add_purchase(
        self,
        amount: Any,
        category: str | None = None,
        store: str | None = None,
        week: str | date | None = None,
    ) -> list[Purchase]:
        """Record a purchase and return the week's purchases.

        Raises:
            ValidationError: If the amount is not positive
        """
        value = parse_amount(amount)
        if value <= 0:
            raise ValidationError("Purchase amount must be positive", field="amount")
        scope = await self._scope(week)
        rows = await self._write(
            PURCHASES,
            scope,
            WriteOperation.INSERT,
            {"amount": value, "category": category, "store": store},
        )
        return [Purchase.from_row(row) for row in rows or []]

    async def _budget_for(self, scope: ScopeKey) -> float:
        budget = await self._read(WEEKLY_BUDGET, scope)
        if budget is not None:
            return float(budget)

        settings = await self._read(HOUSEHOLD_SETTINGS, scope)
        if isinstance(settings, dict):
            household_default = positive_amount(settings.get("default_weekly_budget"))
            if household_default is not None:
                return household_default

        legacy_global = await self._coordinator.legacy_value(
            LEGACY_GLOBAL_BUDGET_KEY, positive_amount
        )
        if legacy_global is not None:
            return legacy_global

        return float(self._default_weekly_budget)
