"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures operation-scoped and domain-relevant metadata that should be
    included with all instrumentation events.

    Attributes:
        request_id: Identifier for the current operation (if applicable).
        user_id: Identity id of the signed-in user (if applicable).
        tenant_id: Household identifier (if applicable).
        collection: Name of the collection being operated on (if applicable).
        bucket: Scope bucket, usually a week-start date (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(tenant_id="hh-1", collection="categories")
        probe = DefaultLayeredCacheProbe().with_context(context)
    """

    request_id: str | None = None
    user_id: str | None = None
    tenant_id: str | None = None
    collection: str | None = None
    bucket: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.collection is not None:
            result["collection"] = self.collection
        if self.bucket is not None:
            result["bucket"] = self.bucket
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str) -> ObservationContext:
        """Create a new context with the tenant id set."""
        return replace(self, tenant_id=tenant_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
