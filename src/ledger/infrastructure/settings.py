"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set the remote URL and
key explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteSettings(BaseSettings):
    """Remote data service (PostgREST/Supabase REST) settings.

    Environment variables:
        LEDGER_REMOTE_URL: REST endpoint root (default: http://localhost:54321/rest/v1)
        LEDGER_REMOTE_API_KEY: Public (anon) API key sent with every request
        LEDGER_REMOTE_TIMEOUT_SECONDS: Per-request timeout (default: 10)
        LEDGER_REMOTE_RPC_TIMEOUT_SECONDS: Timeout for the tenant lookup RPC (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_REMOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default="http://localhost:54321/rest/v1",
        description="REST endpoint root",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Public API key sent as the apikey header",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout",
        gt=0,
        le=120,
    )
    rpc_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for privileged RPC lookups",
        gt=0,
        le=120,
    )


class StoreSettings(BaseSettings):
    """Durable key-value store settings.

    Environment variables:
        LEDGER_STORE_DATABASE_URL: SQLAlchemy async URL
            (default: sqlite+aiosqlite:///ledger-cache.db)
        LEDGER_STORE_ECHO: Log SQL statements (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///ledger-cache.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Log SQL statements")


class CacheSettings(BaseSettings):
    """Layered cache settings.

    Environment variables:
        LEDGER_CACHE_STALENESS_SECONDS: Age after which a memory entry is
            refreshed in the background (default: 300)
        LEDGER_CACHE_DEFAULT_WEEKLY_BUDGET: Budget used when neither remote
            nor legacy data has one (default: 3000)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    staleness_seconds: float = Field(
        default=300.0,
        description="Memory entry staleness threshold",
        gt=0,
    )
    default_weekly_budget: int = Field(
        default=3000,
        description="Fallback weekly budget",
        gt=0,
    )

    @property
    def staleness(self) -> timedelta:
        return timedelta(seconds=self.staleness_seconds)


class IdentitySettings(BaseSettings):
    """OIDC settings for validating session tokens.

    Environment variables:
        LEDGER_OIDC_ISSUER_URL: Token issuer URL
        LEDGER_OIDC_AUDIENCE: Expected audience (default: authenticated)
        LEDGER_OIDC_ALGORITHMS: Accepted signing algorithms (default: RS256, ES256)
        LEDGER_OIDC_JWKS_CACHE_TTL_HOURS: JWKS cache lifetime (default: 24)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_OIDC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer_url: str = Field(
        default="http://localhost:54321/auth/v1",
        description="Token issuer URL",
    )
    audience: str = Field(default="authenticated", description="Expected audience")
    algorithms: list[str] = Field(
        default_factory=lambda: ["RS256", "ES256"],
        description="Accepted signing algorithms",
    )
    jwks_cache_ttl_hours: int = Field(
        default=24,
        description="How long fetched signing keys are reused",
        ge=1,
        le=168,
    )

    @model_validator(mode="after")
    def validate_algorithms(self) -> "IdentitySettings":
        """Reject symmetric algorithms; keys come from a public JWKS."""
        symmetric = [alg for alg in self.algorithms if alg.upper().startswith("HS")]
        if symmetric:
            raise ValueError(
                f"Symmetric algorithms are not supported with JWKS: {symmetric}"
            )
        if not self.algorithms:
            raise ValueError("At least one signing algorithm is required")
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Household Ledger", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def remote(self) -> RemoteSettings:
        """Get remote data service settings."""
        return get_remote_settings()

    @property
    def store(self) -> StoreSettings:
        """Get durable store settings."""
        return get_store_settings()

    @property
    def cache(self) -> CacheSettings:
        """Get layered cache settings."""
        return get_cache_settings()

    @property
    def identity(self) -> IdentitySettings:
        """Get identity provider settings."""
        return get_identity_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_remote_settings() -> RemoteSettings:
    return RemoteSettings()


@lru_cache
def get_store_settings() -> StoreSettings:
    return StoreSettings()


@lru_cache
def get_cache_settings() -> CacheSettings:
    return CacheSettings()


@lru_cache
def get_identity_settings() -> IdentitySettings:
    return IdentitySettings()
