"""Application configuration using Pydantic Settings with YAML support.

This module provides centralized configuration management with:
- YAML-based configuration files organized by domain
- Environment-specific overrides (local, test, development, staging, production)
- Environment variable loading for secrets
- A single resolved cookie policy shared by every cookie-setting call site
- Caching for performance
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


class SameSite(StrEnum):
    """Allowed values for the cookie SameSite attribute."""

    LAX = "lax"
    STRICT = "strict"
    NONE = "none"


class StateStoreBackend(StrEnum):
    """Where in-flight OAuth state tokens are kept.

    - MEMORY: process-local table, suitable for a single instance
    - REDIS: shared table for multi-instance deployments
    """

    MEMORY = "memory"
    REDIS = "redis"


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


class CookiePolicy(BaseModel):
    """Resolved attributes applied to every cookie the service sets."""

    secure: bool
    same_site: SameSite
    domain: str | None = None
    max_age: int

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _none_requires_secure(self) -> CookiePolicy:
        # Browsers drop SameSite=None cookies that are not Secure
        if self.same_site == SameSite.NONE and not self.secure:
            msg = "SameSite=None cookies must also be Secure"
            raise ValueError(msg)
        return self


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Repo Analyzer"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 5000


class ApiSettings(BaseModel):
    """API configuration settings."""

    cors_origins: Annotated[list[str], BeforeValidator(parse_list)] = []


class RepositoryMetricsSettings(BaseModel):
    """Repository analytics read settings."""

    cache_ttl: int = 300
    contributors_limit: int = 10
    commits_limit: int = 30
    recent_commits: int = 10


class GitHubSettings(BaseModel):
    """GitHub OAuth application and REST API settings."""

    client_id: str = ""
    callback_url: str = "http://localhost:5000/auth/github/callback"
    authorize_url: str = "https://github.com/login/oauth/authorize"
    token_url: str = "https://github.com/login/oauth/access_token"  # noqa: S105
    api_url: str = "https://api.github.com"
    scope: str = "read:user user:email"
    timeout: float = 10.0
    user_agent: str = "Repo-Analyzer-App"
    repositories: RepositoryMetricsSettings = RepositoryMetricsSettings()


class AuthSettings(BaseModel):
    """Login flow and session settings."""

    state_ttl_seconds: int = 600
    state_store: str = "memory"
    session_ttl_hours: int = 23
    session_algorithm: str = "HS256"
    admin_username: str = "admin"


class CookieSettings(BaseModel):
    """Cookie names and optional policy overrides.

    ``secure`` and ``same_site`` default from the environment when unset.
    """

    session_name: str = "session"
    identity_name: str = "session_user"
    admin_name: str = "admin_session"
    domain: str | None = None
    secure: bool | None = None
    same_site: SameSite | None = None


class FrontendSettings(BaseModel):
    """Where the browser is sent once the callback has been handled."""

    url: str = "http://localhost:5173"
    success_path: str = "/dashboard"
    error_path: str = "/login"


class RedisSettings(BaseModel):
    """Redis configuration settings."""

    enabled: bool = True
    host: str = "localhost"
    port: int = 6379
    user: str | None = None  # Redis ACL username (Redis 6.0+)
    cache_db: int = 0
    rate_limit_db: int = 2


class RateLimitingSettings(BaseModel):
    """Rate limiting configuration."""

    default: str = "100/minute"
    auth: str = "5/minute"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class MetricsSettings(BaseModel):
    """Metrics configuration settings."""

    enabled: bool = True


class ObservabilitySettings(BaseModel):
    """Observability configuration settings."""

    metrics: MetricsSettings = MetricsSettings()


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Configuration is loaded from multiple sources with the following priority
    (highest to lowest):
    1. Environment variables
    2. .env file (secrets only)
    3. Environment-specific YAML files (config/environments/{APP_ENV}/)
    4. Base YAML files (config/base/)
    5. Default values in code

    Environment variables can override any setting using the nested delimiter '__'.
    For example: GITHUB__CLIENT_ID=abc overrides github.client_id.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    # =========================================================================
    # Environment Selection (from .env)
    # =========================================================================
    APP_ENV: str = "development"

    # =========================================================================
    # Nested Configuration Sections (from YAML)
    # =========================================================================
    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    github: GitHubSettings = GitHubSettings()
    auth: AuthSettings = AuthSettings()
    cookies: CookieSettings = CookieSettings()
    frontend: FrontendSettings = FrontendSettings()
    redis: RedisSettings = RedisSettings()
    rate_limiting: RateLimitingSettings = RateLimitingSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()

    # =========================================================================
    # Secrets (from .env only - never in YAML)
    # =========================================================================
    GITHUB_CLIENT_SECRET: str = ""
    SESSION_SECRET_KEY: str = ""
    REDIS_PASSWORD: str = ""
    ADMIN_PASSWORD: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings loading order.

        Priority (highest to lowest):
        1. init_settings - Values passed to Settings()
        2. env_settings - Environment variables
        3. dotenv_settings - .env file (secrets)
        4. yaml_settings - YAML files (base + environment)
        5. file_secret_settings - Docker secrets
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    # =========================================================================
    # Computed Fields
    # =========================================================================

    @property
    def state_store_enum(self) -> StateStoreBackend:
        """Get the state store backend as enum with validation."""
        try:
            return StateStoreBackend(self.auth.state_store.lower())
        except ValueError:
            msg = (
                f"Invalid state store: {self.auth.state_store}. "
                f"Must be one of: {', '.join(b.value for b in StateStoreBackend)}"
            )
            raise ValueError(msg) from None

    @property
    def cookie_policy(self) -> CookiePolicy:
        """Resolve the cookie policy for this deployment.

        Production serves the API and the dashboard from different sites, so
        cookies must be ``Secure`` with ``SameSite=None``. Everywhere else the
        browser talks to localhost over plain HTTP and ``Lax`` is used.
        """
        secure = self.cookies.secure
        if secure is None:
            secure = self.is_production

        same_site = self.cookies.same_site
        if same_site is None:
            same_site = SameSite.NONE if self.is_production else SameSite.LAX

        return CookiePolicy(
            secure=secure,
            same_site=same_site,
            domain=self.cookies.domain,
            max_age=self.auth.session_ttl_hours * 3600,
        )

    @property
    def frontend_success_url(self) -> str:
        """Absolute URL the browser lands on after a successful login."""
        return f"{self.frontend.url.rstrip('/')}{self.frontend.success_path}"

    @property
    def frontend_error_url(self) -> str:
        """Absolute URL the browser lands on after a failed login."""
        return f"{self.frontend.url.rstrip('/')}{self.frontend.error_path}"

    def _build_redis_url(self, db: int) -> str:
        """Build Redis connection URL with optional authentication.

        Supports Redis 6.0+ ACL authentication with username.
        URL format: redis://[user:password@]host:port/db

        Args:
            db: Redis database number

        Returns:
            Redis connection URL string
        """
        auth_part = ""
        if self.redis.user and self.REDIS_PASSWORD:
            auth_part = f"{self.redis.user}:{self.REDIS_PASSWORD}@"
        elif self.REDIS_PASSWORD:
            auth_part = f":{self.REDIS_PASSWORD}@"
        elif self.redis.user:
            auth_part = f"{self.redis.user}@"

        return f"redis://{auth_part}{self.redis.host}:{self.redis.port}/{db}"

    @property
    def redis_cache_url(self) -> str:
        """Build Redis cache connection URL."""
        return self._build_redis_url(self.redis.cache_db)

    @property
    def redis_rate_limit_url(self) -> str:
        """Build Redis rate limit connection URL."""
        return self._build_redis_url(self.redis.rate_limit_db)

    # =========================================================================
    # Environment Helpers
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_non_production(self) -> bool:
        """Check if running in a non-production environment.

        Returns True for local, test, and development environments where
        API documentation and detailed error messages are enabled.
        """
        return self.APP_ENV in ("local", "test", "development")

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    improving performance and consistency.
    """
    return Settings()
