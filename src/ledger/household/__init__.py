"""Household bounded context.

Budgets, purchases, categories, stores, shopping lists and weekly menus,
all served through the household coordinator.
"""
