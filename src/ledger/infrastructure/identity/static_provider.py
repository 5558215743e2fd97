"""In-memory implementation of the IdentityProvider port for tests."""

from __future__ import annotations

from collections.abc import Callable

from infrastructure.identity.observability import DefaultSessionIdentityProbe
from infrastructure.identity.session_provider import ListenerRegistry
from shared_kernel.identity.protocols import (
    Identity,
    IdentityListener,
    IdentityProvider,
)


class StaticIdentityProvider(IdentityProvider):
    """Identity provider whose identity is set directly."""

    def __init__(self, identity: Identity | None = None) -> None:
        self._identity = identity
        self._listeners = ListenerRegistry(DefaultSessionIdentityProbe())
        self.lookups = 0

    async def current_identity(self) -> Identity | None:
        self.lookups += 1
        return self._identity

    def on_change(self, listener: IdentityListener) -> Callable[[], None]:
        return self._listeners.add(listener)

    def sign_in(self, identity: Identity) -> None:
        changed = self._identity is None or self._identity.id != identity.id
        self._identity = identity
        if changed:
            self._listeners.notify(identity)

    def sign_out(self) -> None:
        had_identity = self._identity is not None
        self._identity = None
        if had_identity:
            self._listeners.notify(None)
