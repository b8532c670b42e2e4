"""Restforce package.

This package provides an authorized rest client for the Salesforce REST
API that transparently refreshes expired access tokens, along with the
OAuth provider, request executors, and settings needed to build one.

:var __version__: Current package version
:type __version__: str
"""

from .api import Restforce
from .client import AsyncSalesforceRestClient, SalesforceRestClient
from .exceptions import (
    ConfigurationError,
    RestforceError,
    RetryLimitExceeded,
    TokenExchangeError,
)
from .factory import create_async_rest_client, create_rest_client
from .models import Credential

__version__ = "0.1.0"

__all__ = [
    "Restforce",
    "SalesforceRestClient",
    "AsyncSalesforceRestClient",
    "Credential",
    "RestforceError",
    "RetryLimitExceeded",
    "TokenExchangeError",
    "ConfigurationError",
    "create_rest_client",
    "create_async_rest_client",
]
