"""Configuration settings for the Meta Ad Library client.

This module defines the configuration settings for the client, including
the override token, application secrets used for token exchange, API
endpoint, timeouts and credential file locations. Settings are loaded from
environment variables and .env files.

Unlike a module-level singleton, a :class:`Settings` instance is created once
per command invocation and passed explicitly to the components that need it.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    :param meta_token: Override bearer token; always wins when set
    :type meta_token: Optional[str]
    :param meta_app_id: Meta application ID, required for token exchange
    :type meta_app_id: Optional[str]
    :param meta_app_secret: Meta application secret, required for token exchange
    :type meta_app_secret: Optional[str]
    :param api_base_url: Graph API host
    :type api_base_url: str
    :param api_version: Graph API version path segment
    :type api_version: str
    :param request_timeout: Per-request timeout in seconds
    :type request_timeout: float
    :param default_page_size: Page size injected when the caller sets none
    :type default_page_size: int
    :param expiry_warning_days: Days before expiry at which to start warning
    :type expiry_warning_days: int
    :param rate_limit_warning_threshold: Usage percentage above which to warn
    :type rate_limit_warning_threshold: int
    :param local_config_path: Override for this tool's credential file
    :type local_config_path: Optional[Path]
    :param shared_config_path: Override for the shared meta-auth credential file
    :type shared_config_path: Optional[Path]
    :param log_level: Logging level for the diagnostic stream
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
        populate_by_name=True,
    )

    # Credentials
    meta_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("META_TOKEN", "meta_token"),
        description="Bearer token override (skips stored credentials)",
    )
    meta_app_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("META_APP_ID", "meta_app_id"),
        description="Meta App ID (for token exchange)",
    )
    meta_app_secret: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("META_APP_SECRET", "meta_app_secret"),
        description="Meta App Secret (for token exchange)",
    )

    # API Configuration
    api_base_url: str = Field(
        "https://graph.facebook.com",
        validation_alias=AliasChoices("META_API_BASE_URL", "api_base_url"),
        description="Graph API base URL",
    )
    api_version: str = Field(
        "v23.0",
        validation_alias=AliasChoices("META_API_VERSION", "api_version"),
        description="Graph API version",
    )
    request_timeout: float = Field(
        60.0,
        validation_alias=AliasChoices("META_REQUEST_TIMEOUT", "request_timeout"),
        description="Per-request timeout in seconds",
    )
    default_page_size: int = Field(
        100, description="Records per page when no page size is given"
    )

    # Credential lifecycle
    expiry_warning_days: int = Field(
        7, description="Warn when a stored token expires within this many days"
    )
    rate_limit_warning_threshold: int = Field(
        75, description="Warn when X-App-Usage exceeds this percentage"
    )

    # Credential files
    local_config_path: Optional[Path] = Field(
        None,
        validation_alias=AliasChoices("META_ADLIB_CONFIG_PATH", "local_config_path"),
        description="Path of this tool's credential file",
    )
    shared_config_path: Optional[Path] = Field(
        None,
        validation_alias=AliasChoices("META_AUTH_CONFIG_PATH", "shared_config_path"),
        description="Path of the shared meta-auth credential file",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "WARNING", description="Logging level"
    )

    @field_validator("meta_token", "meta_app_id", "meta_app_secret")
    @classmethod
    def blank_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty or whitespace-only secrets as not configured.

        :param v: Raw value from the environment
        :type v: Optional[str]
        :return: Stripped value or None
        :rtype: Optional[str]
        """
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop a trailing slash so paths can be appended safely."""
        return v.rstrip("/")

    @property
    def graph_url(self) -> str:
        """Get the versioned Graph API root.

        :return: Base URL joined with the API version
        :rtype: str
        """
        return f"{self.api_base_url}/{self.api_version.strip('/')}"

    @property
    def has_app_credentials(self) -> bool:
        """Whether both application secrets needed for exchange are set.

        :return: True when app ID and app secret are both configured
        :rtype: bool
        """
        return bool(self.meta_app_id and self.meta_app_secret)


def load_settings(**overrides) -> Settings:
    """Load settings from the environment, .env file and keyword overrides.

    :param overrides: Explicit field values that win over the environment
    :return: A fresh Settings instance
    :rtype: Settings
    """
    return Settings(**overrides)
