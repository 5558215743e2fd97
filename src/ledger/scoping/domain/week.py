"""Week arithmetic for time buckets.

Buckets are identified by the ISO date of their Monday. Dates are anchored
at local midday so that converting between naive local time and calendar
dates can never slip a day across a DST or UTC-offset boundary.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

NOON = time(hour=12)

DAY_KEYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_iso_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` (surrounding whitespace allowed).

    Raises:
        ValueError: If the value is not a calendar date
    """
    text = value.strip()
    if len(text) != 10:
        raise ValueError(f"Expected YYYY-MM-DD, got: '{value}'")
    return date.fromisoformat(text)


def monday_at_noon(value: date | datetime) -> datetime:
    """Return local noon on the Monday of the week containing ``value``."""
    day = _as_date(value)
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, NOON)


def monday_iso(value: date | datetime) -> str:
    """Return the ISO date of the Monday of the week containing ``value``."""
    return monday_at_noon(value).date().isoformat()


def iso_week_number(value: date | datetime) -> int:
    return _as_date(value).isocalendar().week


def week_label(iso_monday: str) -> str:
    """Return the display label ``"Uke N"`` for a bucket, or "" if malformed."""
    try:
        return f"Uke {iso_week_number(parse_iso_date(iso_monday))}"
    except ValueError:
        return ""


def week_range(iso_monday: str) -> tuple[date, date]:
    """Return the (Monday, Sunday) dates covered by a bucket."""
    start = parse_iso_date(monday_iso(parse_iso_date(iso_monday)))
    return start, start + timedelta(days=6)
