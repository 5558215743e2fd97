"""Amount parsing helpers for purchases and budgets."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

# Keys that may hold the amount of a purchase, in priority order
AMOUNT_KEYS = ("amount", "sum", "price", "value", "kostnad")

_NON_NUMERIC = re.compile(r"[^\d.,-]")


def parse_amount(value: Any) -> float:
    """Parse a user-entered amount such as ``"kr 1 249,50"``.

    Anything that is not a finite number parses as 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, str):
        normalized = _NON_NUMERIC.sub("", value).replace(",", ".", 1)
        match = re.match(r"-?\d*\.?\d+", normalized)
        if match is None:
            return 0.0
        parsed = float(match.group(0))
        return parsed if math.isfinite(parsed) else 0.0
    return 0.0


def positive_amount(value: Any) -> float | None:
    """Parse an amount, returning None unless it is positive."""
    amount = parse_amount(value)
    return amount if amount > 0 else None


def purchase_amount(item: Any) -> float:
    if item is None:
        return 0.0
    if isinstance(item, (int, float, str)):
        return parse_amount(item)
    if isinstance(item, dict):
        for key in AMOUNT_KEYS:
            if key in item:
                return parse_amount(item[key])
    return 0.0


def safe_sum_purchases(purchases: Iterable[Any] | None) -> float:
    """Sum purchase amounts, tolerating malformed entries."""
    if purchases is None or isinstance(purchases, (str, dict)):
        return 0.0
    return sum((purchase_amount(item) for item in purchases), 0.0)
