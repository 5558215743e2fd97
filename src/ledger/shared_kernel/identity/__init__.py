"""Identity provider port shared by all bounded contexts."""

from shared_kernel.identity.protocols import (
    Identity,
    IdentityListener,
    IdentityProvider,
)

__all__ = [
    "Identity",
    "IdentityListener",
    "IdentityProvider",
]
