"""Session-backed implementation of the IdentityProvider port.

Holds the identity of whoever signed in with a validated access token and
notifies subscribers whenever that identity changes.
"""

from __future__ import annotations

from collections.abc import Callable

from infrastructure.identity.observability import (
    DefaultSessionIdentityProbe,
    SessionIdentityProbe,
)
from infrastructure.identity.token_validator import TokenValidator
from shared_kernel.identity.protocols import (
    Identity,
    IdentityListener,
    IdentityProvider,
)


class ListenerRegistry:
    """Ordered set of identity-change listeners.

    A failing listener is reported to the probe and does not prevent the
    remaining listeners from being notified.
    """

    def __init__(self, probe: SessionIdentityProbe) -> None:
        self._listeners: list[IdentityListener] = []
        self._probe = probe

    def add(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception as e:
                self._probe.listener_failed(error=e)


class SessionIdentityProvider(IdentityProvider):
    """Identity provider fed by sign-in / sign-out calls."""

    def __init__(
        self,
        validator: TokenValidator,
        probe: SessionIdentityProbe | None = None,
    ) -> None:
        self._validator = validator
        self._probe = probe or DefaultSessionIdentityProbe()
        self._identity: Identity | None = None
        self._listeners = ListenerRegistry(self._probe)

    async def current_identity(self) -> Identity | None:
        return self._identity

    def on_change(self, listener: IdentityListener) -> Callable[[], None]:
        return self._listeners.add(listener)

    async def sign_in(self, access_token: str) -> Identity:
        """Validate a token and make its subject the current identity.

        Raises:
            InvalidTokenError: If the token does not validate
        """
        claims = await self._validator.validate(access_token)
        identity = Identity(id=claims.sub, username=claims.email, access_token=access_token)

        previous = self._identity
        self._identity = identity
        self._probe.signed_in(user_id=identity.id)
        # A refreshed token for the same user is not an identity change
        if previous is None or previous.id != identity.id:
            self._listeners.notify(identity)
        return identity

    async def sign_out(self) -> None:
        previous = self._identity
        self._identity = None
        self._probe.signed_out(user_id=previous.id if previous else None)
        if previous is not None:
            self._listeners.notify(None)
