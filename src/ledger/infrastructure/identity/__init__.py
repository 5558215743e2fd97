"""Identity provider adapters."""

from infrastructure.identity.session_provider import SessionIdentityProvider
from infrastructure.identity.static_provider import StaticIdentityProvider
from infrastructure.identity.token_validator import (
    InvalidTokenError,
    TokenClaims,
    TokenValidator,
)

__all__ = [
    "InvalidTokenError",
    "SessionIdentityProvider",
    "StaticIdentityProvider",
    "TokenClaims",
    "TokenValidator",
]
