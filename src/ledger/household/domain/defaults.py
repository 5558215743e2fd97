"""Built-in defaults seeded into a new household."""

from __future__ import annotations

from typing import Any

DEFAULT_WEEKLY_BUDGET = 3000

DEFAULT_CATEGORIES: tuple[dict[str, Any], ...] = (
    {"name": "🥕 Mat & dagligvarer", "enabled": True, "sort_order": 0},
    {"name": "🧽 Husholdning & rengjøring", "enabled": True, "sort_order": 1},
    {"name": "🍞 Frokost & brød", "enabled": True, "sort_order": 2},
    {"name": "🍿 Snacks & kos", "enabled": True, "sort_order": 3},
    {"name": "🥬 Frukt & grønt", "enabled": True, "sort_order": 4},
    {"name": "📦 Annet", "enabled": False, "sort_order": 5},
)

DEFAULT_STORES: tuple[dict[str, Any], ...] = (
    {"name": "Kiwi", "enabled": True},
    {"name": "Rema 1000", "enabled": True},
    {"name": "Coop Extra", "enabled": True},
    {"name": "Meny", "enabled": True},
    {"name": "Spar", "enabled": True},
    {"name": "Joker", "enabled": False},
    {"name": "Bunnpris", "enabled": False},
)


def default_categories() -> list[dict[str, Any]]:
    return [dict(row) for row in DEFAULT_CATEGORIES]


def default_stores() -> list[dict[str, Any]]:
    return [{**row, "sort_order": index} for index, row in enumerate(DEFAULT_STORES)]
