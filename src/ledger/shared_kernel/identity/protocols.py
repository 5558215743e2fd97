"""Identity provider protocol.

Abstracts the session layer: who is signed in right now, and a hook that
fires when that changes (sign-in, sign-out, token refresh for another user).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Identity:
    """The signed-in user.

    Attributes:
        id: Stable identity id (the token subject).
        username: Display/login name, if the provider knows it.
        access_token: Bearer token for the remote data service, if any.
    """

    id: str
    username: str | None = None
    access_token: str | None = field(default=None, repr=False)


IdentityListener = Callable[[Identity | None], None]


@runtime_checkable
class IdentityProvider(Protocol):
    """Protocol for identity providers."""

    async def current_identity(self) -> Identity | None:
        """Return the signed-in identity, or None when signed out."""
        ...

    def on_change(self, listener: IdentityListener) -> Callable[[], None]:
        """Subscribe to identity changes.

        The listener receives the new identity, or None on sign-out.

        Returns:
            A callable that removes the subscription
        """
        ...
