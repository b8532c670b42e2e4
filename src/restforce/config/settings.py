"""Configuration settings for Restforce.

This module defines the configuration used to build rest clients:
OAuth application credentials, the login endpoint, the API version, and
the authorization retry budget. Settings are loaded from environment
variables and .env files.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOGIN_URL = "https://login.salesforce.com"
DEFAULT_API_VERSION = "v45.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    :param client_id: Connected app consumer key
    :type client_id: Optional[str]
    :param client_secret: Connected app consumer secret
    :type client_secret: Optional[str]
    :param login_url: OAuth login host (production or sandbox)
    :type login_url: str
    :param api_version: REST API version segment, e.g. "v45.0"
    :type api_version: str
    :param max_retry_requests: Maximum request attempts per call
    :type max_retry_requests: int
    :param request_timeout: Transport timeout in seconds
    :type request_timeout: float
    :param token_store_path: Optional file to persist refreshed credentials
    :type token_store_path: Optional[str]
    :param token_encrypt_at_rest: Encrypt the stored credential
    :type token_encrypt_at_rest: bool
    :param token_encryption_key: Fernet key for the credential store
    :type token_encryption_key: Optional[str]
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
        populate_by_name=True,
    )

    client_id: Optional[str] = Field(
        None,
        alias="SALESFORCE_CLIENT_ID",
        description="Connected app consumer key",
    )
    client_secret: Optional[str] = Field(
        None,
        alias="SALESFORCE_CLIENT_SECRET",
        description="Connected app consumer secret",
    )
    login_url: str = Field(
        DEFAULT_LOGIN_URL,
        alias="SALESFORCE_LOGIN_URL",
        description="OAuth login URL (use https://test.salesforce.com for sandboxes)",
    )
    api_version: str = Field(
        DEFAULT_API_VERSION,
        alias="SALESFORCE_API_VERSION",
        description="REST API version segment",
    )
    max_retry_requests: int = Field(
        2,
        ge=1,
        alias="SALESFORCE_MAX_RETRY_REQUESTS",
        description="Maximum request attempts when responses are unauthorized",
    )
    request_timeout: float = Field(
        30.0,
        gt=0,
        alias="SALESFORCE_REQUEST_TIMEOUT",
        description="HTTP timeout in seconds",
    )
    token_store_path: Optional[str] = Field(
        None,
        alias="SALESFORCE_TOKEN_STORE_PATH",
        description="Path of the JSON file refreshed credentials are saved to",
    )
    token_encrypt_at_rest: bool = Field(
        True,
        alias="SALESFORCE_TOKEN_ENCRYPT",
        description="Encrypt the stored credential with Fernet",
    )
    token_encryption_key: Optional[str] = Field(
        None,
        alias="SALESFORCE_TOKEN_ENCRYPTION_KEY",
        description="Base64 Fernet key for the credential store",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", alias="LOG_LEVEL", description="Logging level"
    )

    @field_validator("api_version")
    @classmethod
    def normalize_api_version(cls, v: str) -> str:
        """Ensure the version segment carries its leading "v".

        :param v: Raw version value, e.g. "45.0" or "v45.0"
        :type v: str
        :return: Normalized version segment
        :rtype: str
        """
        v = v.strip().strip("/")
        if not v:
            raise ValueError("api_version must not be empty")
        if not v.startswith("v"):
            v = f"v{v}"
        return v

    @field_validator("login_url")
    @classmethod
    def strip_login_url(cls, v: str) -> str:
        """Drop any trailing slash from the login URL."""
        return v.rstrip("/")

    @property
    def token_url(self) -> str:
        """Get the OAuth token endpoint.

        :return: Token endpoint URL derived from the login URL
        :rtype: str
        """
        return f"{self.login_url}/services/oauth2/token"
