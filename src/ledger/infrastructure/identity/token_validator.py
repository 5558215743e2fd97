"""Session token validation.

Access tokens issued by the auth service are verified with python-jose
against the issuer's published signing keys (JWKS). Keys are fetched with
httpx and reused until their time-to-live expires.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from infrastructure.identity.observability import (
    DefaultSessionIdentityProbe,
    SessionIdentityProbe,
)
from shared_kernel.exceptions import NotAuthenticatedError


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    """Claims the coordinator needs from a validated token."""

    sub: str
    email: str | None


class InvalidTokenError(NotAuthenticatedError):
    """Raised when a session token fails validation."""

    pass


class SigningKeyCache:
    """JWKS document fetched from ``{issuer}/.well-known/jwks.json``.

    Concurrent callers that find the cache expired share a single fetch.
    """

    def __init__(
        self,
        issuer_url: str,
        probe: SessionIdentityProbe,
        ttl: timedelta,
        client_factory: Callable[[], httpx.AsyncClient],
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._url = f"{issuer_url}/.well-known/jwks.json"
        self._probe = probe
        self._ttl = ttl
        self._client_factory = client_factory
        self._clock = clock
        self._keys: dict[str, Any] | None = None
        self._expires_at: datetime | None = None
        self._lock = asyncio.Lock()

    def _fresh(self) -> dict[str, Any] | None:
        if self._keys is None or self._expires_at is None:
            return None
        return self._keys if self._clock() < self._expires_at else None

    async def get(self) -> dict[str, Any]:
        keys = self._fresh()
        if keys is None:
            async with self._lock:
                keys = self._fresh()
                if keys is None:
                    return await self._fetch()
        self._probe.signing_keys_cache_hit()
        return keys

    async def _fetch(self) -> dict[str, Any]:
        try:
            async with self._client_factory() as client:
                response = await client.get(self._url)
                response.raise_for_status()
                document = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._probe.signing_keys_fetch_failed(error=str(e))
            raise InvalidTokenError(f"Failed to fetch signing keys: {e}") from e

        if not isinstance(document, dict) or not document.get("keys"):
            self._probe.signing_keys_fetch_failed(error="No keys in JWKS response")
            raise InvalidTokenError("Issuer published no signing keys")

        self._keys = document
        self._expires_at = self._clock() + self._ttl
        self._probe.signing_keys_fetched(key_count=len(document["keys"]))
        return document


class TokenValidator:
    """Validates session tokens: signature, expiry, audience and issuer."""

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        algorithms: list[str],
        probe: SessionIdentityProbe | None = None,
        jwks_cache_ttl: timedelta = timedelta(hours=24),
        client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._issuer = issuer_url.rstrip("/")
        self._audience = audience
        self._algorithms = list(algorithms)
        self._probe = probe or DefaultSessionIdentityProbe()
        self._keys = SigningKeyCache(
            self._issuer, self._probe, jwks_cache_ttl, client_factory, clock
        )

    def _reject(self, reason: str, message: str) -> InvalidTokenError:
        self._probe.token_rejected(reason=reason)
        return InvalidTokenError(message)

    async def validate(self, token: str) -> TokenClaims:
        """Validate a token and return its claims.

        The header is parsed before any key fetch so garbage never costs a
        network round trip.

        Raises:
            InvalidTokenError: If the token is malformed, expired, or fails
                signature, audience or issuer checks
        """
        try:
            jwt.get_unverified_header(token)
        except JWTError as e:
            raise self._reject(f"Malformed token: {e}", f"Invalid token format: {e}") from e

        keys = await self._keys.get()
        try:
            claims = jwt.decode(
                token,
                keys,
                algorithms=self._algorithms,
                audience=self._audience,
                issuer=self._issuer,
            )
        except ExpiredSignatureError as e:
            raise self._reject("Token expired", "Token has expired") from e
        except JWTClaimsError as e:
            raise self._reject(f"Claims error: {e}", f"Invalid token claims: {e}") from e
        except JWTError as e:
            raise self._reject(f"JWT error: {e}", f"Invalid token: {e}") from e

        subject = claims.get("sub")
        if not subject:
            raise self._reject("Missing sub claim", "Missing required claim: sub")

        self._probe.token_validated(user_id=str(subject))
        email = claims.get("email")
        return TokenClaims(sub=str(subject), email=str(email) if email else None)
