"""Domain probe for session identity operations.

Following Domain-Oriented Observability patterns, this probe captures
sign-in, sign-out and token validation events.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SessionIdentityProbe(Protocol):
    """Domain probe for session identity operations."""

    def token_validated(self, user_id: str) -> None:
        """Record that a session token was validated."""
        ...

    def token_rejected(self, reason: str) -> None:
        """Record that a session token was rejected."""
        ...

    def signing_keys_fetched(self, key_count: int) -> None:
        """Record that signing keys were fetched from the issuer."""
        ...

    def signing_keys_cache_hit(self) -> None:
        """Record that cached signing keys were reused."""
        ...

    def signing_keys_fetch_failed(self, error: str) -> None:
        """Record that fetching signing keys failed."""
        ...

    def signed_in(self, user_id: str) -> None:
        """Record that an identity signed in."""
        ...

    def signed_out(self, user_id: str | None) -> None:
        """Record that the identity signed out."""
        ...

    def listener_failed(self, error: Exception) -> None:
        """Record that an identity-change listener raised."""
        ...

    def with_context(self, context: ObservationContext) -> SessionIdentityProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionIdentityProbe:
    """Default implementation of SessionIdentityProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultSessionIdentityProbe:
        """Create a new probe with observation context bound."""
        return DefaultSessionIdentityProbe(logger=self._logger, context=context)

    def token_validated(self, user_id: str) -> None:
        self._logger.debug(
            "session_token_validated",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def token_rejected(self, reason: str) -> None:
        self._logger.warning(
            "session_token_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def signing_keys_fetched(self, key_count: int) -> None:
        self._logger.info(
            "signing_keys_fetched",
            key_count=key_count,
            **self._get_context_kwargs(),
        )

    def signing_keys_cache_hit(self) -> None:
        self._logger.debug("signing_keys_cache_hit", **self._get_context_kwargs())

    def signing_keys_fetch_failed(self, error: str) -> None:
        self._logger.error(
            "signing_keys_fetch_failed",
            error=error,
            **self._get_context_kwargs(),
        )

    def signed_in(self, user_id: str) -> None:
        self._logger.info(
            "session_signed_in",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def signed_out(self, user_id: str | None) -> None:
        self._logger.info(
            "session_signed_out",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def listener_failed(self, error: Exception) -> None:
        self._logger.error(
            "session_listener_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
