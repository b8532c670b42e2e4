"""Structured exception classes for Restforce."""

import json
from typing import Any, Dict, Optional


class RestforceError(Exception):
    """Base exception for all Restforce errors.

    This exception serves as the parent class for all Restforce specific
    exceptions, providing a consistent interface for error handling
    across the package.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class AuthenticationError(RestforceError):
    """Raised when authentication fails.

    :param message: Description of the authentication failure
    :param details: Optional additional context about the failure
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize authentication error with message and optional details."""
        super().__init__(message=message, code="AUTHENTICATION_ERROR", details=details)


class OAuthError(AuthenticationError):
    """Raised for OAuth-specific errors.

    :param message: Description of the OAuth error
    :param error_code: Optional OAuth error code from the provider
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        """Initialize OAuth error with message and optional error code."""
        details = {}
        if error_code:
            details["oauth_error"] = error_code
        super().__init__(message=message, details=details)
        self.code = "OAUTH_ERROR"
        self.error_code = error_code


class TokenExchangeError(OAuthError):
    """Raised when the token endpoint rejects a grant.

    This exception is raised by the bundled credential exchanger when a
    token request returns a non-success status or a body without an
    access token. It is never raised or wrapped by the rest client
    itself, which lets it propagate unchanged.

    :param message: Description of the exchange failure
    :param error_code: Optional OAuth error code (e.g. ``invalid_grant``)
    :param grant_type: Optional grant type that was requested
    :param status_code: Optional HTTP status code of the token response
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        grant_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        """Initialize token exchange error with optional response context."""
        super().__init__(message, error_code=error_code)
        self.code = "TOKEN_EXCHANGE_ERROR"
        self.grant_type = grant_type
        self.status_code = status_code
        if grant_type:
            self.details["grant_type"] = grant_type
        if status_code:
            self.details["status_code"] = status_code


class RetryLimitExceeded(AuthenticationError):
    """Raised when a request is still unauthorized after the retry budget.

    Every allowed attempt was made and the last response was still a
    401. Recovering requires re-authenticating out of band.

    :param max_attempts: The configured maximum number of attempts
    """

    def __init__(self, max_attempts: int):
        """Initialize retry limit error with the configured attempt budget."""
        super().__init__(
            message=(
                f"Max retry limit of {max_attempts} has been reached. "
                "OAuth token refresh failed."
            ),
            details={"max_attempts": max_attempts},
        )
        self.code = "RETRY_LIMIT_EXCEEDED"
        self.max_attempts = max_attempts


class ConfigurationError(RestforceError):
    """Raised for configuration-related errors.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
        self.setting = setting
