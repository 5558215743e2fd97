"""Domain layer for household data: value objects, amounts and defaults."""

from household.domain.amounts import (
    AMOUNT_KEYS,
    parse_amount,
    positive_amount,
    safe_sum_purchases,
)
from household.domain.defaults import (
    DEFAULT_CATEGORIES,
    DEFAULT_STORES,
    DEFAULT_WEEKLY_BUDGET,
    default_categories,
    default_stores,
)
from household.domain.value_objects import (
    Category,
    Purchase,
    ShoppingItem,
    Store,
    WeekSummary,
    clamp_quantity,
    empty_menu,
)

__all__ = [
    "AMOUNT_KEYS",
    "DEFAULT_CATEGORIES",
    "DEFAULT_STORES",
    "DEFAULT_WEEKLY_BUDGET",
    "Category",
    "Purchase",
    "ShoppingItem",
    "Store",
    "WeekSummary",
    "clamp_quantity",
    "default_categories",
    "default_stores",
    "empty_menu",
    "parse_amount",
    "positive_amount",
    "safe_sum_purchases",
]
