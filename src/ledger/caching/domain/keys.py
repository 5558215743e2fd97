"""Key layout for the memory and persistent tiers.

Every key embeds the tenant id, so an entry written for one household can
never satisfy a read for another.
"""

from __future__ import annotations

from shared_kernel.scope import ScopeKey

KEY_PREFIX = "ledger:v1"


def tier_key(scope: ScopeKey, collection: str) -> str:
    """Key of a collection instance: ``ledger:v1:{tenant}:{bucket}:{collection}``."""
    return f"{KEY_PREFIX}:{scope.tenant_id}:{scope.bucket}:{collection}"


def seeded_marker_key(scope: ScopeKey, collection: str) -> str:
    """Key recording that a collection instance has been seeded.

    Bucketed collections get one marker per bucket.
    """
    key = f"{KEY_PREFIX}:seeded:{scope.tenant_id}:{collection}"
    if scope.is_global:
        return key
    return f"{key}:{scope.bucket}"


def tenant_prefix(tenant_id: str) -> str:
    return f"{KEY_PREFIX}:{tenant_id}:"
