"""Scope key value object.

A scope key addresses one instance of a collection: the tenant that owns it
and the partition bucket (usually the ISO week-start date) it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared_kernel.exceptions import ValidationError

# Bucket used by collections that are not partitioned by time.
GLOBAL_BUCKET = "*"


@dataclass(frozen=True)
class ScopeKey:
    """Tenant and bucket pair addressing a collection instance.

    Two reads or writes with equal scope keys and collection names observe
    the same underlying data. Tenants never share storage, even when their
    bucket values match.

    Attributes:
        tenant_id: The household identifier.
        bucket: Partition label, e.g. "2026-10-19" or GLOBAL_BUCKET.
    """

    tenant_id: str
    bucket: str = GLOBAL_BUCKET

    def __post_init__(self) -> None:
        if not self.tenant_id or not self.tenant_id.strip():
            raise ValidationError("ScopeKey requires a non-empty tenant_id", field="tenant_id")
        if not self.bucket or not self.bucket.strip():
            raise ValidationError("ScopeKey requires a non-empty bucket", field="bucket")
        for field, part in (("tenant_id", self.tenant_id), ("bucket", self.bucket)):
            if ":" in part:
                raise ValidationError(f"ScopeKey {field} must not contain ':'", field=field)

    def unbucketed(self) -> ScopeKey:
        """Return the same tenant scope with the global bucket."""
        if self.bucket == GLOBAL_BUCKET:
            return self
        return ScopeKey(tenant_id=self.tenant_id, bucket=GLOBAL_BUCKET)

    @property
    def is_global(self) -> bool:
        return self.bucket == GLOBAL_BUCKET
