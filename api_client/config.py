"""Configuration management for api_client using Pydantic Settings.

Supports multiple sources (environment variables, .env files, explicit config)
with type validation and defaults.

Environment variables:
    API_CLIENT_BASE_URL: Base URL prepended to relative request URLs
    API_CLIENT_TIMEOUT: Request timeout in seconds
    API_CLIENT_VERIFY_SSL: Enable TLS verification
    API_CLIENT_API_TOKEN: Bearer token
    API_CLIENT_USERNAME / API_CLIENT_PASSWORD: Basic auth credentials
    API_CLIENT_LOG_LEVEL: Logging level
"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiClientConfig(BaseSettings):
    """Transport and credential settings for an ApiClient.

    Example:
        From environment:
        >>> import os
        >>> os.environ['API_CLIENT_API_TOKEN'] = 'secret'
        >>> config = ApiClientConfig()

        From kwargs:
        >>> config = ApiClientConfig(timeout=5.0, verify_ssl=False)
    """

    model_config = SettingsConfigDict(
        env_prefix='API_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Connection settings
    base_url: str = Field(
        default="",
        description="Base URL for relative request URLs"
    )

    timeout: float = Field(
        default=30.0,
        ge=0.1,
        description="Request timeout in seconds"
    )

    connect_timeout: float = Field(
        default=5.0,
        ge=0.1,
        description="Connection timeout in seconds"
    )

    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates"
    )

    follow_redirects: bool = Field(
        default=False,
        description="Follow HTTP redirects"
    )

    user_agent: str = Field(
        default="api-client-python/0.1.0",
        description="User-Agent header sent with every request"
    )

    # Credentials
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token"
    )

    username: Optional[str] = Field(
        default=None,
        description="Basic auth username"
    )

    password: Optional[str] = Field(
        default=None,
        description="Basic auth password"
    )

    auth_header_name: Optional[str] = Field(
        default=None,
        description="Custom auth header name"
    )

    auth_header_value: Optional[str] = Field(
        default=None,
        description="Custom auth header value"
    )

    # Logging
    log_level: Optional[str] = Field(
        default=None,
        description="Logging level for the api_client logger (unchanged when unset)"
    )

    def apply_log_level(self) -> None:
        """Set the package logger level from ``log_level``, if configured."""
        if self.log_level is None:
            return
        logging.getLogger("api_client").setLevel(self.log_level.upper())


# Singleton instance
_settings: Optional[ApiClientConfig] = None


def get_settings() -> ApiClientConfig:
    """Get global settings singleton."""
    global _settings
    if _settings is None:
        _settings = ApiClientConfig()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
