"""Value objects for the household domain.

Rows coming from the remote tier, the durable store or legacy records are
loosely typed; each value object has a ``from_row`` that sanitizes one row
(returning None for rows that cannot be used) and a ``to_row`` producing
the column values written back.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from household.domain.amounts import parse_amount, safe_sum_purchases
from scoping.domain.week import DAY_KEYS, week_label


def _clean_name(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _finite_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if math.isfinite(value) else None


def clamp_quantity(value: Any) -> int:
    """Quantities are whole numbers of at least 1."""
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, quantity)


@dataclass(frozen=True)
class Category:
    """A purchase category of a household."""

    name: str
    enabled: bool = True
    sort_order: int = 0
    id: str | None = None

    @classmethod
    def from_row(cls, raw: Any, fallback_order: int = 0) -> Category | None:
        if not isinstance(raw, dict):
            return None
        name = _clean_name(raw.get("name"))
        if not name:
            return None
        sort_order = _finite_int(raw.get("sort_order"))
        return cls(
            name=name,
            enabled=raw.get("enabled") is not False,
            sort_order=fallback_order if sort_order is None else sort_order,
            id=raw.get("id"),
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "name": self.name,
            "enabled": self.enabled,
            "sort_order": self.sort_order,
        }
        if self.id is not None:
            row["id"] = self.id
        return row


@dataclass(frozen=True)
class Store:
    """A grocery store the household shops at."""

    name: str
    enabled: bool = True
    id: str | None = None

    @classmethod
    def from_row(cls, raw: Any) -> Store | None:
        if not isinstance(raw, dict):
            return None
        name = _clean_name(raw.get("name"))
        if not name:
            return None
        return cls(name=name, enabled=raw.get("enabled") is not False, id=raw.get("id"))

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {"name": self.name, "enabled": self.enabled}
        if self.id is not None:
            row["id"] = self.id
        return row


@dataclass(frozen=True)
class ShoppingItem:
    """An entry on a week's shopping list."""

    name: str
    category: str | None = None
    quantity: int = 1
    checked: bool = False
    id: str | None = None

    @classmethod
    def from_row(cls, raw: Any, default_category: str | None = None) -> ShoppingItem | None:
        if not isinstance(raw, dict):
            return None
        name = str(raw.get("name") or "").strip()
        if not name:
            return None
        category = str(raw.get("category") or default_category or "").strip()
        return cls(
            name=name,
            category=category or None,
            quantity=clamp_quantity(raw.get("quantity", 1)),
            checked=bool(raw.get("checked")),
            id=raw.get("id"),
        )

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "checked": self.checked,
        }
        if self.id is not None:
            row["id"] = self.id
        return row


@dataclass(frozen=True)
class Purchase:
    """A recorded purchase."""

    amount: float
    category: str | None = None
    store: str | None = None
    id: str | None = None

    @classmethod
    def from_row(cls, raw: Any) -> Purchase:
        if not isinstance(raw, dict):
            return cls(amount=parse_amount(raw))
        return cls(
            amount=safe_sum_purchases([raw]),
            category=raw.get("category"),
            store=raw.get("store"),
            id=raw.get("id"),
        )


@dataclass(frozen=True)
class WeekSummary:
    """Budget status of one week."""

    week: str
    budget: float
    spent: float
    remaining: float
    purchases: list[dict[str, Any]] = field(default_factory=list)

    @property
    def label(self) -> str:
        return week_label(self.week)


def empty_menu() -> dict[str, str]:
    return {day: "" for day in DAY_KEYS}
