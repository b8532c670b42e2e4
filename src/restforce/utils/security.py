"""Security utilities for log sanitization and secure logging.

Access and refresh tokens must never reach the logs in clear text. This
module provides:
- Pattern-based redaction of bearer tokens and JWTs in strings
- Header and URL sanitization for request logging
- A logging formatter and setup helper applying the redaction globally
"""

import copy
import logging
import re
import sys
from typing import Any, Dict

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9_.!=-]+", re.IGNORECASE),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
    "x-sfdc-session",
}

# Query parameters that carry secrets
SENSITIVE_PARAMS = [
    "access_token",
    "refresh_token",
    "client_secret",
    "password",
    "token",
]


def sanitize_string(value: str) -> str:
    """Redact tokens embedded in a string.

    :param value: String to sanitize
    :type value: str
    :return: String with every sensitive match redacted
    :rtype: str
    """
    if not value:
        return value
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        value = pattern.sub(f"<{pattern_name}:REDACTED>", value)
    return value


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Dictionary of HTTP headers
    :type headers: Dict[str, Any]
    :return: Sanitized copy of the headers
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = copy.deepcopy(headers)
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and len(value) > 0:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
    return sanitized


def sanitize_url(url: str) -> str:
    """Redact secret query parameters from a URL.

    :param url: URL to sanitize
    :type url: str
    :return: URL with sensitive parameter values redacted
    :rtype: str
    """
    if not url:
        return url
    for param in SENSITIVE_PARAMS:
        url = re.sub(
            rf"([?&]{param}=)[^&\s]+", r"\1<REDACTED>", url, flags=re.IGNORECASE
        )
    return url


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts tokens from every formatted message."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, then redact sensitive data from the output.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log line
        :rtype: str
        """
        return sanitize_string(super().format(record))


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Set up logging with automatic sanitization.

    Installs a single stdout handler on the root logger. Repeated calls
    only adjust the level.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    :return: None
    :rtype: None
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger().setLevel(getattr(logging, level.upper()))
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    formatter = SanitizingFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,  # Override any existing configuration
    )

    # httpx logs full request lines at INFO; keep them at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
