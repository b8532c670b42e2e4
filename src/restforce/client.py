"""Authorized rest client with transparent access token refresh.

This module provides the clients every Restforce call goes through. A
client holds the current credential, builds request URLs, injects the
bearer Authorization header, and recovers from expired access tokens:

- Each attempt is sent with an Authorization header built from the
  credential current at that moment
- A 401 response triggers a refresh_token grant and another attempt,
  until the configured number of attempts is used up
- Any other status ends the loop and the response is returned as is
- Transport and token exchange errors propagate unchanged

Only a 401 counts as unauthorized. A 403 or any other status is handed
back to the caller.

Examples:
    >>> client = SalesforceRestClient(
    ...     executor=HttpxRequestExecutor(),
    ...     exchanger=provider,
    ...     credential=credential,
    ...     resource_owner_url=credential.id_url,
    ...     api_version="v45.0",
    ...     max_retry_requests=2,
    ... )
    >>> response = client.request("GET", "sobjects/Account/describe")

Instances keep mutable credential state without any locking. Share one
between threads or tasks only behind your own serialization.
"""

import inspect
import logging
from typing import Any, Mapping, Optional

from .auth.base import (
    REFRESH_TOKEN_GRANT,
    AsyncCredentialExchanger,
    CredentialExchanger,
    NotifierLike,
    resolve_notifier,
)
from .exceptions import ConfigurationError, RetryLimitExceeded
from .models import Credential
from .utils.http.executor import AsyncRequestExecutor, RequestExecutor
from .utils.http.options import construct_url, merge_options
from .utils.security import sanitize_url

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS = 401


class _AuthorizedClientBase:
    """State and helpers shared by the sync and async clients."""

    def __init__(
        self,
        credential: Credential,
        resource_owner_url: str,
        api_version: str,
        max_retry_requests: int,
        notifier: Optional[NotifierLike] = None,
    ):
        if max_retry_requests < 1:
            raise ConfigurationError(
                f"max_retry_requests must be at least 1, got {max_retry_requests}",
                setting="max_retry_requests",
            )
        if not api_version:
            raise ConfigurationError(
                "api_version must not be empty", setting="api_version"
            )

        self._credential = credential
        self._resource_owner_url = resource_owner_url
        self._api_version = api_version
        self._max_retry_requests = max_retry_requests
        self._notifier = resolve_notifier(notifier)

    @property
    def credential(self) -> Credential:
        """Get the credential currently used to authorize requests."""
        return self._credential

    @property
    def api_version(self) -> str:
        return self._api_version

    @property
    def max_retry_requests(self) -> int:
        return self._max_retry_requests

    def get_resource_owner_url(self) -> str:
        """Return the resource owner (identity) URL.

        :return: Resource owner URL given at construction
        :rtype: str
        """
        return self._resource_owner_url

    def _construct_url(self, endpoint: str) -> str:
        return construct_url(
            endpoint, self._credential.instance_url, self._api_version
        )

    def _merge_options(self, options: Optional[Mapping[str, Any]]) -> dict:
        return merge_options(options, self._credential.access_token)

    @staticmethod
    def _is_authorized(response: Any) -> bool:
        return response.status_code != UNAUTHORIZED_STATUS

    def _refresh_params(self) -> dict:
        return {"refresh_token": self._credential.refresh_token}

    def _adopt(self, credential: Credential) -> None:
        self._credential = credential
        logger.info(f"Adopted refreshed credential for {credential.instance_url}")

    def _fail(self, url: str) -> RetryLimitExceeded:
        logger.error(
            f"Request to {sanitize_url(url)} still unauthorized after "
            f"{self._max_retry_requests} attempt(s)"
        )
        return RetryLimitExceeded(self._max_retry_requests)


class SalesforceRestClient(_AuthorizedClientBase):
    """Synchronous rest client that refreshes expired access tokens.

    :param executor: Performs the HTTP calls
    :type executor: RequestExecutor
    :param exchanger: Trades the refresh token for a new credential
    :type exchanger: CredentialExchanger
    :param credential: Initial credential
    :type credential: Credential
    :param resource_owner_url: Identity URL of the authenticated user
    :type resource_owner_url: str
    :param api_version: REST API version segment, e.g. "v45.0"
    :type api_version: str
    :param max_retry_requests: Maximum attempts per request, at least 1
    :type max_retry_requests: int
    :param notifier: Optional notifier (or callable) told about refreshes
    :type notifier: Optional[NotifierLike]
    :raises ConfigurationError: If max_retry_requests is below 1
    """

    def __init__(
        self,
        executor: RequestExecutor,
        exchanger: CredentialExchanger,
        credential: Credential,
        resource_owner_url: str,
        api_version: str,
        max_retry_requests: int,
        notifier: Optional[NotifierLike] = None,
    ):
        super().__init__(
            credential, resource_owner_url, api_version, max_retry_requests, notifier
        )
        self._executor = executor
        self._exchanger = exchanger

    def request(
        self,
        method: str,
        endpoint: str = "",
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send a request, refreshing the access token on 401 responses.

        :param method: HTTP method
        :type method: str
        :param endpoint: Absolute URL or path relative to the data API
        :type endpoint: str
        :param options: Request options; caller headers are kept
        :type options: Optional[Mapping[str, Any]]
        :return: The last response, never a 401
        :raises RetryLimitExceeded: If every allowed attempt returned 401
        """
        attempts = 0
        while True:
            url = self._construct_url(endpoint)
            logger.debug(
                f"{method} {sanitize_url(url)} "
                f"(attempt {attempts + 1}/{self._max_retry_requests})"
            )
            response = self._executor.request(
                method, url, self._merge_options(options)
            )
            attempts += 1

            if self._is_authorized(response):
                return response

            logger.warning(f"{method} {sanitize_url(url)} returned 401")
            if attempts >= self._max_retry_requests:
                raise self._fail(url)
            self.refresh_access_token()

    def refresh_access_token(self) -> Credential:
        """Exchange the refresh token and adopt the new credential.

        The notifier, when configured, sees the new credential before it
        is adopted. Exchanger and notifier errors propagate and leave the
        current credential in place.

        :return: The newly adopted credential
        :rtype: Credential
        """
        logger.info("Refreshing access token")
        credential = self._exchanger.exchange(
            REFRESH_TOKEN_GRANT, self._refresh_params()
        )
        if self._notifier is not None:
            self._notifier.on_credential_refreshed(credential)
        self._adopt(credential)
        return credential

    def get(self, endpoint: str = "", **options) -> Any:
        return self.request("GET", endpoint, options)

    def post(self, endpoint: str = "", **options) -> Any:
        return self.request("POST", endpoint, options)

    def put(self, endpoint: str = "", **options) -> Any:
        return self.request("PUT", endpoint, options)

    def patch(self, endpoint: str = "", **options) -> Any:
        return self.request("PATCH", endpoint, options)

    def delete(self, endpoint: str = "", **options) -> Any:
        return self.request("DELETE", endpoint, options)

    def close(self) -> None:
        """Close the executor and exchanger, where they support it.

        Each releases only the HTTP client it created itself.
        """
        for resource in (self._executor, self._exchanger):
            closer = getattr(resource, "close", None)
            if callable(closer):
                closer()
        logger.debug("Closed rest client")

    def __enter__(self) -> "SalesforceRestClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class AsyncSalesforceRestClient(_AuthorizedClientBase):
    """Async rest client that refreshes expired access tokens.

    Same contract as :class:`SalesforceRestClient`. The notifier may be
    synchronous or return an awaitable.
    """

    def __init__(
        self,
        executor: AsyncRequestExecutor,
        exchanger: AsyncCredentialExchanger,
        credential: Credential,
        resource_owner_url: str,
        api_version: str,
        max_retry_requests: int,
        notifier: Optional[NotifierLike] = None,
    ):
        super().__init__(
            credential, resource_owner_url, api_version, max_retry_requests, notifier
        )
        self._executor = executor
        self._exchanger = exchanger

    async def request(
        self,
        method: str,
        endpoint: str = "",
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send a request, refreshing the access token on 401 responses.

        :raises RetryLimitExceeded: If every allowed attempt returned 401
        """
        attempts = 0
        while True:
            url = self._construct_url(endpoint)
            logger.debug(
                f"{method} {sanitize_url(url)} "
                f"(attempt {attempts + 1}/{self._max_retry_requests})"
            )
            response = await self._executor.request(
                method, url, self._merge_options(options)
            )
            attempts += 1

            if self._is_authorized(response):
                return response

            logger.warning(f"{method} {sanitize_url(url)} returned 401")
            if attempts >= self._max_retry_requests:
                raise self._fail(url)
            await self.refresh_access_token()

    async def refresh_access_token(self) -> Credential:
        """Exchange the refresh token and adopt the new credential."""
        logger.info("Refreshing access token")
        credential = await self._exchanger.exchange(
            REFRESH_TOKEN_GRANT, self._refresh_params()
        )
        if self._notifier is not None:
            result = self._notifier.on_credential_refreshed(credential)
            if inspect.isawaitable(result):
                await result
        self._adopt(credential)
        return credential

    async def get(self, endpoint: str = "", **options) -> Any:
        return await self.request("GET", endpoint, options)

    async def post(self, endpoint: str = "", **options) -> Any:
        return await self.request("POST", endpoint, options)

    async def put(self, endpoint: str = "", **options) -> Any:
        return await self.request("PUT", endpoint, options)

    async def patch(self, endpoint: str = "", **options) -> Any:
        return await self.request("PATCH", endpoint, options)

    async def delete(self, endpoint: str = "", **options) -> Any:
        return await self.request("DELETE", endpoint, options)

    async def aclose(self) -> None:
        """Close the executor and exchanger, where they support it."""
        for resource in (self._executor, self._exchanger):
            closer = getattr(resource, "aclose", None) or getattr(
                resource, "close", None
            )
            if callable(closer):
                result = closer()
                if inspect.isawaitable(result):
                    await result
        logger.debug("Closed async rest client")

    async def __aenter__(self) -> "AsyncSalesforceRestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
