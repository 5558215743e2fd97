"""Tenant context value object.

This module contains the pure value object describing where tenant
resolution stands. It is owned exclusively by the tenant resolver and only
read by everything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TenantState(StrEnum):
    """Lifecycle of a tenant resolution cycle."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class TenantContext:
    """Resolved (or pending) tenant identity for the current session.

    Attributes:
        state: Where the resolution cycle stands.
        tenant_id: The household id, only set when state is RESOLVED.
        identity_id: Identity the context was resolved for, if known.
    """

    state: TenantState
    tenant_id: str | None = None
    identity_id: str | None = None

    def __post_init__(self) -> None:
        if self.state is TenantState.RESOLVED and not self.tenant_id:
            raise ValueError("A resolved tenant context requires a tenant_id")
        if self.state is not TenantState.RESOLVED and self.tenant_id is not None:
            raise ValueError(
                f"tenant_id must be empty while state is '{self.state}'"
            )

    @classmethod
    def unresolved(cls) -> TenantContext:
        return cls(state=TenantState.UNRESOLVED)

    @classmethod
    def resolving(cls, identity_id: str | None = None) -> TenantContext:
        return cls(state=TenantState.RESOLVING, identity_id=identity_id)

    @classmethod
    def resolved(cls, tenant_id: str, identity_id: str | None = None) -> TenantContext:
        return cls(
            state=TenantState.RESOLVED,
            tenant_id=tenant_id,
            identity_id=identity_id,
        )

    @classmethod
    def failed(cls, identity_id: str | None = None) -> TenantContext:
        return cls(state=TenantState.FAILED, identity_id=identity_id)

    @property
    def is_resolved(self) -> bool:
        return self.state is TenantState.RESOLVED
