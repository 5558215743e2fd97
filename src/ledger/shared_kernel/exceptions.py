"""Error taxonomy shared by every bounded context.

All errors raised by the coordinator derive from LedgerError so the
surrounding application can treat them as typed, recoverable outcomes.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for coordinator errors."""

    pass


class NotAuthenticatedError(LedgerError):
    """Raised when no session or identity is available.

    Surfaced on any operation that requires a resolved tenant.
    """

    pass


class TenantNotFoundError(LedgerError):
    """Raised when the current identity has no associated tenant."""

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message)
        self.user_id = user_id


class RemoteUnavailableError(LedgerError):
    """Raised when the remote data service cannot be reached or rejects a call.

    On the read path this error is recovered by the layered cache and only
    logged. On the write path it propagates to the caller and the cache tiers
    are left untouched.
    """

    def __init__(
        self,
        message: str,
        collection: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.collection = collection
        self.operation = operation
        self.status_code = status_code


class ValidationError(LedgerError):
    """Raised when a caller-supplied payload fails a required-field check.

    Always raised before any remote call is attempted.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class StorageUnavailableError(LedgerError):
    """Raised when the durable key-value store cannot be read or written.

    The layered cache treats it as a persistent-tier miss and logs it.
    """

    pass


class TenantMismatchError(NotAuthenticatedError):
    """Raised when a scope key names a tenant other than the resolved one.

    Typically a scope captured before sign-out or an identity switch.
    """

    def __init__(self, message: str, scope_tenant_id: str, tenant_id: str):
        super().__init__(message)
        self.scope_tenant_id = scope_tenant_id
        self.tenant_id = tenant_id
