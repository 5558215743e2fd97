"""Unit tests for household domain helpers and value objects."""

import math

import pytest

from household.domain.amounts import parse_amount, positive_amount, safe_sum_purchases
from household.domain.defaults import DEFAULT_STORES, default_categories, default_stores
from household.domain.value_objects import (
    Category,
    Purchase,
    ShoppingItem,
    Store,
    WeekSummary,
    clamp_quantity,
    empty_menu,
)


class TestParseAmount:
    """Tests for parsing user-entered amounts."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("kr 1 249,50", 1249.5),
            ("450", 450.0),
            ("12.5 NOK", 12.5),
            (99, 99.0),
            (19.9, 19.9),
            ("-40", -40.0),
        ],
    )
    def test_parses_numbers(self, raw, expected):
        assert parse_amount(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "abc", True, math.nan, math.inf, [], {}])
    def test_invalid_input_parses_as_zero(self, raw):
        assert parse_amount(raw) == 0.0

    def test_positive_amount_rejects_zero_and_negative(self):
        assert positive_amount("0") is None
        assert positive_amount(-3) is None
        assert positive_amount("3000") == 3000.0


class TestSafeSumPurchases:
    def test_sums_known_amount_keys_and_skips_garbage(self):
        purchases = [
            {"amount": "100"},
            {"sum": 50},
            {"kostnad": "25,5"},
            10,
            None,
            {"note": "no amount"},
        ]
        assert safe_sum_purchases(purchases) == pytest.approx(185.5)

    @pytest.mark.parametrize("purchases", [None, "100", {"amount": 100}])
    def test_non_list_input_sums_to_zero(self, purchases):
        assert safe_sum_purchases(purchases) == 0.0


class TestValueObjects:
    """Tests for row sanitizing."""

    def test_category_from_row_trims_and_defaults(self):
        category = Category.from_row({"name": "  Mat  ", "enabled": None}, fallback_order=3)
        assert category == Category(name="Mat", enabled=True, sort_order=3)

    @pytest.mark.parametrize("raw", [None, "Mat", {"name": "   "}, {"enabled": True}])
    def test_category_without_name_is_dropped(self, raw):
        assert Category.from_row(raw) is None

    def test_category_to_row_omits_missing_id(self):
        assert "id" not in Category(name="Mat").to_row()
        assert Category(name="Mat", id="c1").to_row()["id"] == "c1"

    def test_store_disabled_only_when_explicitly_false(self):
        assert Store.from_row({"name": "Kiwi", "enabled": 0}).enabled is True
        assert Store.from_row({"name": "Kiwi", "enabled": False}).enabled is False

    def test_shopping_item_uses_group_as_default_category(self):
        item = ShoppingItem.from_row({"name": "Melk", "quantity": "2"}, default_category="Meieri")
        assert item == ShoppingItem(name="Melk", category="Meieri", quantity=2)

    @pytest.mark.parametrize("raw,expected", [(0, 1), (-2, 1), ("3", 3), ("x", 1), (None, 1), (2.7, 2)])
    def test_clamp_quantity(self, raw, expected):
        assert clamp_quantity(raw) == expected

    def test_purchase_from_row(self):
        purchase = Purchase.from_row({"id": "p1", "amount": "kr 450", "store": "Kiwi"})
        assert purchase == Purchase(amount=450.0, store="Kiwi", id="p1")

    def test_week_summary_label(self):
        summary = WeekSummary(week="2026-10-19", budget=3000, spent=450, remaining=2550)
        assert summary.label == "Uke 43"

    def test_empty_menu_has_every_weekday(self):
        assert list(empty_menu()) == ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
        assert not any(empty_menu().values())


class TestDefaults:
    def test_default_categories_are_fresh_copies(self):
        first = default_categories()
        first[0]["name"] = "changed"
        assert default_categories()[0]["name"] != "changed"

    def test_last_default_category_is_disabled(self):
        categories = default_categories()
        assert len(categories) == 6
        assert [c["enabled"] for c in categories].count(False) == 1
        assert categories[-1]["enabled"] is False

    def test_default_stores_get_sort_order(self):
        stores = default_stores()
        assert [s["sort_order"] for s in stores] == list(range(len(DEFAULT_STORES)))
        assert [s["name"] for s in stores if not s["enabled"]] == ["Joker", "Bunnpris"]
