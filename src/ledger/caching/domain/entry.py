"""Cache entry value object."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any


class CacheTier(StrEnum):
    """Tier a value was served from."""

    MEMORY = "memory"
    PERSISTENT = "persistent"
    REMOTE = "remote"


@dataclass(frozen=True)
class CacheEntry:
    """A cached collection value and where it came from.

    Attributes:
        value: JSON-compatible collection value
        tier: Tier the entry was read from
        fetched_at: When the value was last fetched from the remote tier
    """

    value: Any
    tier: CacheTier
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.fetched_at

    def is_stale(self, now: datetime, threshold: timedelta) -> bool:
        return self.age(now) > threshold

    def in_tier(self, tier: CacheTier) -> CacheEntry:
        return replace(self, tier=tier)
