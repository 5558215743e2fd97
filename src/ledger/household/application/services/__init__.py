"""Household accessors: thin typed facades over the coordinator."""

from household.application.services.budget_service import BudgetService
from household.application.services.category_service import CategoryService
from household.application.services.menu_service import MenuService
from household.application.services.shopping_list_service import ShoppingListService
from household.application.services.store_service import StoreService

__all__ = [
    "BudgetService",
    "CategoryService",
    "MenuService",
    "ShoppingListService",
    "StoreService",
]
