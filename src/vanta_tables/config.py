"""
Configuration management for vanta-tables.

Settings are loaded with pydantic-settings from environment variables (or a
``.env`` file) and validated up front, so that a misconfigured connection
fails before any request is sent.

Environment Variables:
    VANTA_CLIENT_ID: OAuth client ID from the Vanta developer console
    VANTA_CLIENT_SECRET: OAuth client secret
    VANTA_ACCESS_TOKEN: Pre-issued bearer token (used when no OAuth credentials)
    VANTA_API_TOKEN: Legacy name for VANTA_ACCESS_TOKEN
    VANTA_BASE_URL: Vanta API base URL (default: https://api.vanta.com)
    VANTA_SCOPES: Comma-separated OAuth scopes (default: vanta-api.all:read)
    VANTA_PAGE_SIZE: Items requested per page, 1-100 (default: 100)
    VANTA_REQUEST_TIMEOUT_SECONDS: Per-request timeout (default: 30)
    VANTA_REQUESTS_PER_MINUTE: Client-side throttle, 0 disables (default: 50)
    LOG_LEVEL: Logging level (default: INFO)

Credential Precedence:
    1. VANTA_CLIENT_ID + VANTA_CLIENT_SECRET (OAuth, refreshed automatically)
    2. VANTA_ACCESS_TOKEN / VANTA_API_TOKEN (static bearer token)

Usage:
    from vanta_tables.config import get_settings

    settings = get_settings()
    print(settings.base_url)
"""

import hashlib
from functools import lru_cache
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from vanta_tables.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.vanta.com"
SCOPE_ALL_READ = "vanta-api.all:read"


class Settings(BaseSettings):
    """
    vanta-tables connection settings.

    Attributes:
        client_id: OAuth client ID
        client_secret: OAuth client secret
        access_token: Static bearer token
        base_url: Vanta API base URL
        scopes: OAuth scopes requested during the token exchange
        page_size: Maximum items requested per page
        request_timeout_seconds: Timeout applied to every HTTP request
        requests_per_minute: Client-side request budget (0 disables throttling)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VANTA_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    client_id: str | None = Field(
        default=None,
        description="OAuth client ID",
    )
    client_secret: str | None = Field(
        default=None,
        description="OAuth client secret",
    )
    access_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("vanta_access_token", "vanta_api_token"),
        description="Static bearer token",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Vanta API base URL",
    )
    scopes: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [SCOPE_ALL_READ],
        description="OAuth scopes",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Maximum items requested per page",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )
    requests_per_minute: int = Field(
        default=50,
        ge=0,
        description="Client-side request budget, 0 disables throttling",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("log_level", "vanta_log_level"),
        description="Logging level",
    )

    @field_validator("client_id", "client_secret", "access_token", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """
        Treat blank credential values as unset.

        Args:
            v: Raw value from environment or keyword argument

        Returns:
            Stripped value, or None when blank
        """
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """
        Validate and normalize the API base URL.

        Args:
            v: Base URL from environment

        Returns:
            Base URL without a trailing slash

        Raises:
            ConfigurationError: If the URL is not http(s)
        """
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ConfigurationError(
                f"VANTA_BASE_URL '{v}' must start with http:// or https://",
                config_key="VANTA_BASE_URL",
                reason="Unsupported URL scheme",
            )
        return v.rstrip("/")

    @field_validator("scopes", mode="before")
    @classmethod
    def parse_scopes(cls, v: Any) -> list[str]:
        """
        Parse scopes from a comma or space separated string.

        Args:
            v: Raw value (string or list)

        Returns:
            List of non-empty scope strings
        """
        if isinstance(v, str):
            scopes = [s for s in v.replace(",", " ").split() if s]
        else:
            scopes = [str(s).strip() for s in v if str(s).strip()]
        return scopes or [SCOPE_ALL_READ]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate log level is recognized.

        Args:
            v: Log level from environment

        Returns:
            Upper-cased log level

        Raises:
            ConfigurationError: If log level is invalid
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ConfigurationError(
                f"LOG_LEVEL '{v}' is not valid. Must be one of: {', '.join(sorted(valid_levels))}",
                config_key="LOG_LEVEL",
                reason=f"Invalid log level: {v}",
            )
        return v_upper

    @property
    def uses_oauth(self) -> bool:
        """True when both OAuth client credentials are configured."""
        return bool(self.client_id and self.client_secret)

    def validate_credentials(self) -> None:
        """
        Validate that a usable set of credentials is configured.

        Raises:
            ConfigurationError: If no credentials are set, or if only one
                half of the OAuth client credentials is set
        """
        if bool(self.client_id) != bool(self.client_secret):
            missing = "VANTA_CLIENT_SECRET" if self.client_id else "VANTA_CLIENT_ID"
            raise ConfigurationError(
                f"{missing} is required when using OAuth client credentials",
                config_key=missing,
                reason="Incomplete OAuth client credentials",
            )
        if not self.uses_oauth and not self.access_token:
            raise ConfigurationError(
                "authentication required: provide either VANTA_CLIENT_ID/VANTA_CLIENT_SECRET "
                + "or VANTA_ACCESS_TOKEN",
                config_key="VANTA_ACCESS_TOKEN",
                reason="No credentials configured",
            )

    def with_overrides(self, **overrides: object) -> "Settings":
        """
        Return a validated copy with some values replaced.

        Used by hosts that pass per-connection configuration on top of the
        process environment. None values are ignored, and the environment
        is not read again.

        Args:
            **overrides: Field names and replacement values

        Returns:
            New Settings instance

        Example:
            >>> conn = settings.with_overrides(access_token="token-for-other-org")
        """
        values: dict[str, object] = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return Settings.model_validate(values)

    def connection_key(self) -> str:
        """
        Identify the credentials these settings authenticate with.

        Secrets are hashed, so the key is safe to log. Rotating a secret or
        changing scopes yields a new key.

        Returns:
            Key used by the connection manager to cache clients
        """
        if self.uses_oauth:
            secret = f"{self.client_secret}|{' '.join(sorted(self.scopes))}"
            principal = f"oauth:{self.client_id}:{_digest(secret)}"
        else:
            principal = f"token:{_digest(self.access_token or '')}"
        return f"{self.base_url}|{principal}"


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:16]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If configuration is invalid or no credentials
            are configured
    """
    try:
        settings = Settings()  # pyright: ignore[reportCallIssue]
        settings.validate_credentials()
        return settings
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load configuration: {e}",
            reason=str(e),
        ) from e
