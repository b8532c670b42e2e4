"""Authentication module for Restforce.

This module provides the collaborators the rest client relies on for
token lifecycle management: credential exchangers, refresh notifiers,
and a file-backed credential store.

:var __all__: List of public exports from this module
:type __all__: List[str]
"""

from .base import (
    REFRESH_TOKEN_GRANT,
    AsyncCredentialExchanger,
    CallbackRefreshNotifier,
    CredentialExchanger,
    RefreshNotifier,
    resolve_notifier,
)
from .credential_store import FileCredentialStore
from .providers import AsyncSalesforceProvider, SalesforceProvider

__all__ = [
    "REFRESH_TOKEN_GRANT",
    "CredentialExchanger",
    "AsyncCredentialExchanger",
    "RefreshNotifier",
    "CallbackRefreshNotifier",
    "resolve_notifier",
    "FileCredentialStore",
    "SalesforceProvider",
    "AsyncSalesforceProvider",
]
