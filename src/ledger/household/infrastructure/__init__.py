"""Infrastructure layer for household data: table mappings."""

from household.infrastructure.collections import (
    ALL_COLLECTIONS,
    CATEGORIES,
    HOUSEHOLD_SETTINGS,
    PURCHASES,
    SHOPPING_ITEMS,
    STORES,
    WEEKLY_BUDGET,
    WEEKLY_MENU,
)

__all__ = [
    "ALL_COLLECTIONS",
    "CATEGORIES",
    "HOUSEHOLD_SETTINGS",
    "PURCHASES",
    "SHOPPING_ITEMS",
    "STORES",
    "WEEKLY_BUDGET",
    "WEEKLY_MENU",
]
