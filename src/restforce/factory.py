"""Build rest clients from application settings.

The factories fill in whatever collaborators the caller leaves out: an
httpx request executor, a Salesforce OAuth provider, and, when
``token_store_path`` is configured, a file credential store as the
refresh notifier.
"""

import logging
from typing import Optional

from .auth.base import AsyncCredentialExchanger, CredentialExchanger, NotifierLike
from .auth.credential_store import FileCredentialStore
from .auth.providers.salesforce import AsyncSalesforceProvider, SalesforceProvider
from .client import AsyncSalesforceRestClient, SalesforceRestClient
from .config.settings import Settings
from .models import Credential
from .utils.http.executor import (
    AsyncHttpxRequestExecutor,
    AsyncRequestExecutor,
    HttpxRequestExecutor,
    RequestExecutor,
)

logger = logging.getLogger(__name__)


def _default_notifier(
    settings: Settings, notifier: Optional[NotifierLike]
) -> Optional[NotifierLike]:
    if notifier is None and settings.token_store_path:
        logger.info(f"Persisting refreshed credentials to {settings.token_store_path}")
        return FileCredentialStore(
            settings.token_store_path,
            encrypt_at_rest=settings.token_encrypt_at_rest,
            encryption_key=settings.token_encryption_key,
        )
    return notifier


def _resource_owner_url(
    credential: Credential, exchanger, resource_owner_url: Optional[str]
) -> str:
    if resource_owner_url:
        return resource_owner_url
    if hasattr(exchanger, "get_resource_owner_details_url"):
        return exchanger.get_resource_owner_details_url(credential)
    return credential.id_url or ""


def create_rest_client(
    credential: Credential,
    settings: Optional[Settings] = None,
    *,
    exchanger: Optional[CredentialExchanger] = None,
    executor: Optional[RequestExecutor] = None,
    notifier: Optional[NotifierLike] = None,
    resource_owner_url: Optional[str] = None,
) -> SalesforceRestClient:
    """Create a synchronous rest client.

    :param credential: Initial credential
    :type credential: Credential
    :param settings: Settings; loaded from the environment when omitted
    :type settings: Optional[Settings]
    :param exchanger: Credential exchanger; a SalesforceProvider by default
    :type exchanger: Optional[CredentialExchanger]
    :param executor: Request executor; an HttpxRequestExecutor by default
    :type executor: Optional[RequestExecutor]
    :param notifier: Refresh notifier or callable
    :type notifier: Optional[NotifierLike]
    :param resource_owner_url: Overrides the derived resource owner URL
    :type resource_owner_url: Optional[str]
    :return: Configured rest client
    :rtype: SalesforceRestClient
    :raises ConfigurationError: If a default provider lacks client credentials
    """
    settings = settings or Settings()
    exchanger = exchanger or SalesforceProvider.from_settings(settings)
    executor = executor or HttpxRequestExecutor(timeout=settings.request_timeout)

    return SalesforceRestClient(
        executor=executor,
        exchanger=exchanger,
        credential=credential,
        resource_owner_url=_resource_owner_url(
            credential, exchanger, resource_owner_url
        ),
        api_version=settings.api_version,
        max_retry_requests=settings.max_retry_requests,
        notifier=_default_notifier(settings, notifier),
    )


def create_async_rest_client(
    credential: Credential,
    settings: Optional[Settings] = None,
    *,
    exchanger: Optional[AsyncCredentialExchanger] = None,
    executor: Optional[AsyncRequestExecutor] = None,
    notifier: Optional[NotifierLike] = None,
    resource_owner_url: Optional[str] = None,
) -> AsyncSalesforceRestClient:
    """Create an async rest client. See :func:`create_rest_client`."""
    settings = settings or Settings()
    exchanger = exchanger or AsyncSalesforceProvider.from_settings(settings)
    executor = executor or AsyncHttpxRequestExecutor(timeout=settings.request_timeout)

    return AsyncSalesforceRestClient(
        executor=executor,
        exchanger=exchanger,
        credential=credential,
        resource_owner_url=_resource_owner_url(
            credential, exchanger, resource_owner_url
        ),
        api_version=settings.api_version,
        max_retry_requests=settings.max_retry_requests,
        notifier=_default_notifier(settings, notifier),
    )
