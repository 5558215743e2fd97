"""Domain layer for the layered cache."""

from caching.domain.collection import (
    CollectionSpec,
    Validator,
    is_empty_value,
    rows_as_value,
    value_as_rows,
)
from caching.domain.entry import CacheEntry, CacheTier
from caching.domain.keys import KEY_PREFIX, seeded_marker_key, tenant_prefix, tier_key

__all__ = [
    "KEY_PREFIX",
    "CacheEntry",
    "CacheTier",
    "CollectionSpec",
    "Validator",
    "is_empty_value",
    "rows_as_value",
    "seeded_marker_key",
    "tenant_prefix",
    "tier_key",
    "value_as_rows",
]
