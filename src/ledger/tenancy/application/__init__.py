"""Application layer for tenancy."""

from tenancy.application.tenant_resolver import (
    MEMBERSHIP_COLLECTION,
    TENANT_LOOKUP_RPC,
    TenantResolver,
)

__all__ = [
    "MEMBERSHIP_COLLECTION",
    "TENANT_LOOKUP_RPC",
    "TenantResolver",
]
