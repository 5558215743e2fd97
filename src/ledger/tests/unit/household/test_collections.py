"""Unit tests for the household collection specifications."""

import pytest

from household.infrastructure.collections import (
    ALL_COLLECTIONS,
    CATEGORIES,
    PURCHASES,
    SHOPPING_ITEMS,
    STORES,
    WEEKLY_BUDGET,
    WEEKLY_MENU,
    budget_from_rows,
    flatten_legacy_list,
    menu_from_rows,
    menu_is_empty,
    menu_to_rows,
    parse_legacy_menu,
    parse_legacy_purchases,
    sanitize_categories,
    sanitize_stores,
)
from shared_kernel.datasource.types import WriteOperation
from shared_kernel.exceptions import ValidationError


class TestCollectionRegistry:
    def test_names_are_unique(self):
        names = [spec.name for spec in ALL_COLLECTIONS]
        assert len(names) == len(set(names))

    def test_weekly_collections_are_bucketed(self):
        bucketed = {spec.name for spec in ALL_COLLECTIONS if spec.bucketed}
        assert bucketed == {"weekly_budget", "purchases", "shopping_items", "weekly_menu"}


class TestLegacyParsers:
    """Tests for parsing pre-tenant records."""

    def test_flatten_grouped_shopping_list(self):
        raw = [
            {"name": "Meieri", "items": [{"name": "Melk", "quantity": 2}, {"name": ""}]},
            {"name": "Brød", "items": [{"name": "Grovbrød", "checked": True}]},
        ]

        assert flatten_legacy_list(raw) == [
            {"name": "Melk", "category": "Meieri", "quantity": 2, "checked": False},
            {"name": "Grovbrød", "category": "Brød", "quantity": 1, "checked": True},
        ]

    def test_flatten_flat_shopping_list(self):
        raw = [{"name": "Egg", "category": "Meieri"}, "not an item"]

        assert flatten_legacy_list(raw) == [
            {"name": "Egg", "category": "Meieri", "quantity": 1, "checked": False}
        ]

    @pytest.mark.parametrize("raw", [None, {}, "list"])
    def test_flatten_rejects_non_lists(self, raw):
        assert flatten_legacy_list(raw) == []

    def test_legacy_menu_keeps_known_days(self):
        menu = parse_legacy_menu({"mon": " Taco ", "xyz": "Pizza", "tue": 3})

        assert menu["mon"] == "Taco"
        assert menu["tue"] == ""
        assert "xyz" not in menu

    def test_legacy_menu_rejects_non_objects(self):
        assert parse_legacy_menu(["Taco"]) is None

    def test_legacy_purchases_drop_invalid_amounts(self):
        raw = [{"amount": "kr 120", "store": "Kiwi"}, {"amount": 0}, "junk"]

        assert parse_legacy_purchases(raw) == [
            {"amount": 120.0, "category": None, "store": "Kiwi"}
        ]

    def test_sanitize_categories_assigns_fallback_order(self):
        rows = sanitize_categories([{"name": "Mat"}, {"name": ""}, {"name": "Annet", "sort_order": 9}])

        assert rows == [
            {"name": "Mat", "enabled": True, "sort_order": 0},
            {"name": "Annet", "enabled": True, "sort_order": 9},
        ]

    def test_sanitize_stores_numbers_rows(self):
        rows = sanitize_stores([{"name": "Kiwi"}, {"name": " "}, {"name": "Meny", "enabled": False}])

        assert rows == [
            {"name": "Kiwi", "enabled": True, "sort_order": 0},
            {"name": "Meny", "enabled": False, "sort_order": 1},
        ]


class TestRowMapping:
    def test_budget_takes_first_positive_amount(self):
        assert budget_from_rows([{"amount": None}, {"amount": "2500"}]) == 2500.0
        assert budget_from_rows([]) is None

    def test_menu_round_trip_skips_empty_days(self):
        menu = menu_from_rows([{"day_key": "wed", "dish_name": "Taco"}, {"day_key": "fri", "dish_name": None}])

        assert menu["wed"] == "Taco"
        assert menu["fri"] == ""
        assert menu_to_rows(menu) == [{"day_key": "wed", "dish_name": "Taco"}]

    def test_menu_is_empty(self):
        assert menu_is_empty(menu_from_rows([]))
        assert not menu_is_empty({"mon": "Taco"})

    def test_seed_rows_drop_ids(self):
        rows = CATEGORIES.to_rows([{"id": "c1", "name": "Mat"}])
        assert rows == [{"name": "Mat"}]


class TestValidators:
    """Tests for payload validation before writes."""

    def test_budget_must_be_positive(self):
        with pytest.raises(ValidationError):
            WEEKLY_BUDGET.validate(WriteOperation.UPSERT, {"amount": 0})

    def test_purchase_insert_needs_positive_amount(self):
        with pytest.raises(ValidationError):
            PURCHASES.validate(WriteOperation.INSERT, {"amount": "nothing"})

    def test_category_insert_needs_name(self):
        with pytest.raises(ValidationError) as exc_info:
            CATEGORIES.validate(WriteOperation.INSERT, [{"name": "Mat"}, {"name": " "}])
        assert exc_info.value.field == "name"

    def test_category_update_without_name_is_allowed(self):
        CATEGORIES.validate(WriteOperation.UPDATE, {"enabled": False})

    def test_store_rename_to_blank_is_rejected(self):
        with pytest.raises(ValidationError):
            STORES.validate(WriteOperation.UPDATE, {"name": ""})

    def test_shopping_item_delete_needs_no_payload(self):
        SHOPPING_ITEMS.validate(WriteOperation.DELETE, None)

    def test_menu_rejects_unknown_day(self):
        with pytest.raises(ValidationError) as exc_info:
            WEEKLY_MENU.validate(WriteOperation.UPSERT, {"day_key": "someday", "dish_name": "Taco"})
        assert exc_info.value.field == "day_key"
