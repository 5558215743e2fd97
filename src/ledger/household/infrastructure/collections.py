"""Collection specifications for the household tables.

Each spec maps one table of the remote data service to the value the
layered cache holds for it, and names the pre-tenant record that is
migrated into the household on first access.
"""

from __future__ import annotations

from typing import Any

from caching.domain.collection import CollectionSpec, value_as_rows
from household.domain.amounts import positive_amount
from household.domain.defaults import default_categories, default_stores
from household.domain.value_objects import Category, ShoppingItem, Store, empty_menu
from scoping.domain.week import DAY_KEYS
from shared_kernel.datasource.types import Row, WriteOperation
from shared_kernel.exceptions import ValidationError

CATEGORY_LEGACY_KEY = "purchase_categories_v1"
STORE_LEGACY_KEY = "purchase_stores_v1"


def _without_ids(rows: list[Row]) -> list[Row]:
    return [{k: v for k, v in row.items() if k != "id"} for row in rows]


def _require_names(operation: WriteOperation, payload: Any) -> None:
    if not operation.carries_payload:
        return
    for row in value_as_rows(payload):
        if operation is WriteOperation.INSERT or "name" in row:
            name = row.get("name")
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("Name cannot be empty", field="name")


# Budgets


def budget_from_rows(rows: list[Row]) -> float | None:
    for row in rows:
        amount = positive_amount(row.get("amount"))
        if amount is not None:
            return amount
    return None


def _validate_budget(operation: WriteOperation, payload: Any) -> None:
    if not operation.carries_payload:
        return
    for row in value_as_rows(payload):
        if positive_amount(row.get("amount")) is None:
            raise ValidationError("Budget must be a positive amount", field="amount")


WEEKLY_BUDGET = CollectionSpec(
    name="weekly_budget",
    table="household_budgets",
    columns="amount",
    bucketed=True,
    default=lambda: None,
    migrates_legacy=True,
    legacy_keys=lambda week: (f"weeklyBudget_{week}",),
    legacy_parser=positive_amount,
    from_rows=budget_from_rows,
    to_rows=lambda amount: [{"amount": amount}] if amount is not None else [],
    on_conflict="household_id,week_start",
    validator=_validate_budget,
)

HOUSEHOLD_SETTINGS = CollectionSpec(
    name="household_settings",
    table="households",
    columns="id,default_weekly_budget",
    tenant_column="id",
    default=lambda: None,
    from_rows=lambda rows: rows[0] if rows else None,
)


# Purchases


def parse_legacy_purchases(raw: Any) -> list[Row]:
    if not isinstance(raw, list):
        return []
    purchases = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        amount = positive_amount(item.get("amount"))
        if amount is None:
            continue
        purchases.append(
            {"amount": amount, "category": item.get("category"), "store": item.get("store")}
        )
    return purchases


def _validate_purchase(operation: WriteOperation, payload: Any) -> None:
    if operation is not WriteOperation.INSERT:
        return
    for row in value_as_rows(payload):
        if positive_amount(row.get("amount")) is None:
            raise ValidationError("Purchase amount must be positive", field="amount")


PURCHASES = CollectionSpec(
    name="purchases",
    table="purchases",
    order=("created_at",),
    bucketed=True,
    migrates_legacy=True,
    legacy_keys=lambda week: (f"purchases_{week}",),
    legacy_parser=parse_legacy_purchases,
    to_rows=_without_ids,
    validator=_validate_purchase,
)


# Categories


def sanitize_categories(raw: Any) -> list[Row]:
    if not isinstance(raw, list):
        return []
    categories = [Category.from_row(item, index) for index, item in enumerate(raw)]
    return [category.to_row() for category in categories if category is not None]


CATEGORIES = CollectionSpec(
    name="categories",
    table="household_categories",
    columns="id,name,enabled,sort_order",
    order=("sort_order", "name"),
    default=default_categories,
    seeds_defaults=True,
    migrates_legacy=True,
    legacy_keys=lambda _: (CATEGORY_LEGACY_KEY,),
    legacy_parser=sanitize_categories,
    from_rows=sanitize_categories,
    to_rows=_without_ids,
    validator=_require_names,
)


# Stores


def sanitize_stores(raw: Any) -> list[Row]:
    if not isinstance(raw, list):
        return []
    rows = []
    for item in raw:
        store = Store.from_row(item)
        if store is None:
            continue
        row = store.to_row()
        sort_order = item.get("sort_order")
        row["sort_order"] = sort_order if isinstance(sort_order, int) else len(rows)
        rows.append(row)
    return rows


STORES = CollectionSpec(
    name="stores",
    table="household_stores",
    columns="id,name,enabled,sort_order",
    order=("sort_order", "name"),
    default=default_stores,
    seeds_defaults=True,
    migrates_legacy=True,
    legacy_keys=lambda _: (STORE_LEGACY_KEY,),
    legacy_parser=sanitize_stores,
    from_rows=sanitize_stores,
    to_rows=_without_ids,
    on_conflict="household_id,name",
    validator=_require_names,
)


# Shopping list items


def flatten_legacy_list(raw: Any) -> list[Row]:
    """Flatten a legacy list, grouped (``[{name, items: [...]}]``) or flat."""
    if not isinstance(raw, list):
        return []
    items: list[ShoppingItem | None] = []
    for entry in raw:
        if isinstance(entry, dict) and isinstance(entry.get("items"), list):
            group = entry.get("name")
            items.extend(
                ShoppingItem.from_row(item, default_category=str(group or ""))
                for item in entry["items"]
            )
        else:
            items.append(ShoppingItem.from_row(entry))
    return [item.to_row() for item in items if item is not None]


def sanitize_items(rows: list[Row]) -> list[Row]:
    items = [ShoppingItem.from_row(row) for row in rows]
    return [item.to_row() for item in items if item is not None]


SHOPPING_ITEMS = CollectionSpec(
    name="shopping_items",
    table="shopping_list_items",
    columns="id,name,category,quantity,checked",
    order=("name",),
    bucketed=True,
    migrates_legacy=True,
    legacy_keys=lambda week: (f"shoppingList_{week}",),
    legacy_parser=flatten_legacy_list,
    from_rows=sanitize_items,
    to_rows=_without_ids,
    validator=_require_names,
)


# Weekly menu


def menu_from_rows(rows: list[Row]) -> dict[str, str]:
    menu = empty_menu()
    for row in rows:
        day = row.get("day_key")
        if day in menu:
            menu[day] = row.get("dish_name") or ""
    return menu


def menu_to_rows(menu: Any) -> list[Row]:
    if not isinstance(menu, dict):
        return []
    return [
        {"day_key": day, "dish_name": dish}
        for day, dish in menu.items()
        if day in DAY_KEYS and dish
    ]


def parse_legacy_menu(raw: Any) -> dict[str, str] | None:
    if not isinstance(raw, dict):
        return None
    menu = empty_menu()
    for day, dish in raw.items():
        if day in menu and isinstance(dish, str):
            menu[day] = dish.strip()
    return menu


def menu_is_empty(menu: Any) -> bool:
    return not isinstance(menu, dict) or not any(menu.values())


def _validate_menu(operation: WriteOperation, payload: Any) -> None:
    if not operation.carries_payload:
        return
    for row in value_as_rows(payload):
        if row.get("day_key") not in DAY_KEYS:
            raise ValidationError(
                f"Unknown day key: {row.get('day_key')!r}", field="day_key"
            )


WEEKLY_MENU = CollectionSpec(
    name="weekly_menu",
    table="weekly_menu",
    columns="day_key,dish_name",
    bucketed=True,
    default=empty_menu,
    migrates_legacy=True,
    legacy_keys=lambda week: (f"weeklyMenu_{week}",),
    legacy_parser=parse_legacy_menu,
    from_rows=menu_from_rows,
    to_rows=menu_to_rows,
    is_empty=menu_is_empty,
    on_conflict="household_id,week_start,day_key",
    validator=_validate_menu,
)

ALL_COLLECTIONS = (
    WEEKLY_BUDGET,
    HOUSEHOLD_SETTINGS,
    PURCHASES,
    CATEGORIES,
    STORES,
    SHOPPING_ITEMS,
    WEEKLY_MENU,
)
