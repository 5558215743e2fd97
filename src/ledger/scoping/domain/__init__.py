"""Domain layer for scope keys: week arithmetic."""

from scoping.domain.week import (
    DAY_KEYS,
    iso_week_number,
    monday_at_noon,
    monday_iso,
    parse_iso_date,
    week_label,
    week_range,
)

__all__ = [
    "DAY_KEYS",
    "iso_week_number",
    "monday_at_noon",
    "monday_iso",
    "parse_iso_date",
    "week_label",
    "week_range",
]
