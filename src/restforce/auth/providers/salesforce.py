"""Salesforce OAuth2 credential exchanger.

This module implements the token endpoint side of the refresh protocol:
a grant (refresh_token, password, authorization_code) is POSTed as form
data together with the connected app's client id and secret, and the
JSON response becomes a new :class:`Credential`.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...config.settings import DEFAULT_LOGIN_URL, Settings
from ...exceptions import ConfigurationError, TokenExchangeError
from ...models import Credential
from ..base import REFRESH_TOKEN_GRANT, AsyncCredentialExchanger, CredentialExchanger

logger = logging.getLogger(__name__)

PASSWORD_GRANT = "password"


class _SalesforceOAuthMixin:
    """Request building and response parsing shared by both providers."""

    def _configure(self, client_id: str, client_secret: str, login_url: str) -> None:
        if not client_id or not client_secret:
            raise ConfigurationError(
                "Salesforce provider requires 'client_id' and 'client_secret'",
                setting="client_id" if not client_id else "client_secret",
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self.login_url = login_url.rstrip("/")

    @property
    def token_url(self) -> str:
        """Get the OAuth token endpoint.

        :return: Token endpoint URL
        :rtype: str
        """
        return f"{self.login_url}/services/oauth2/token"

    def get_resource_owner_details_url(self, credential: Credential) -> str:
        """Return the URL describing the credential's resource owner.

        Uses the identity URL issued with the credential, falling back to
        the userinfo endpoint of the login host.

        :param credential: Credential to describe
        :type credential: Credential
        :return: Resource owner URL
        :rtype: str
        """
        return credential.id_url or f"{self.login_url}/services/oauth2/userinfo"

    def _form_data(self, grant_type: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "grant_type": grant_type,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            **params,
        }

    def _parse_response(
        self, response: httpx.Response, grant_type: str, params: Dict[str, Any]
    ) -> Credential:
        if response.status_code != 200:
            error_code, description = _oauth_error(response)
            logger.error(
                f"Token request ({grant_type}) failed: {response.status_code} - "
                f"{error_code}: {description}"
            )
            raise TokenExchangeError(
                f"Token request failed: {description or response.status_code}",
                error_code=error_code,
                grant_type=grant_type,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TokenExchangeError(
                f"Token response is not valid JSON: {e}", grant_type=grant_type
            ) from e

        if not data.get("access_token"):
            raise TokenExchangeError(
                "No access token in token response", grant_type=grant_type
            )

        fallback = params.get("refresh_token") if grant_type == REFRESH_TOKEN_GRANT else None
        try:
            credential = Credential.from_token_response(data, refresh_token=fallback)
        except ValueError as e:
            raise TokenExchangeError(
                f"Token response is missing required fields: {e}",
                grant_type=grant_type,
            ) from e

        logger.debug(f"Obtained credential via {grant_type} grant")
        return credential


def _oauth_error(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return None, response.text or None
    if not isinstance(body, dict):
        return None, None
    return body.get("error"), body.get("error_description")


class SalesforceProvider(_SalesforceOAuthMixin, CredentialExchanger):
    """Synchronous Salesforce credential exchanger.

    :param client_id: Connected app consumer key
    :type client_id: str
    :param client_secret: Connected app consumer secret
    :type client_secret: str
    :param login_url: OAuth login host
    :type login_url: str
    :param http_client: Optional httpx client, owned by the caller
    :type http_client: Optional[httpx.Client]
    :param timeout: Timeout in seconds for an internally created client
    :type timeout: float
    :raises ConfigurationError: If client id or secret is missing
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        login_url: str = DEFAULT_LOGIN_URL,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self._configure(client_id, client_secret, login_url)
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: Optional[httpx.Client] = None
    ) -> "SalesforceProvider":
        """Create a provider from application settings."""
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            login_url=settings.login_url,
            http_client=http_client,
            timeout=settings.request_timeout,
        )

    def exchange(self, grant_type: str, params: Dict[str, Any]) -> Credential:
        """Exchange a grant for a new credential.

        :param grant_type: OAuth grant type
        :type grant_type: str
        :param params: Grant parameters
        :type params: Dict[str, Any]
        :return: Newly issued credential
        :rtype: Credential
        :raises TokenExchangeError: If the token endpoint rejects the grant
        :raises httpx.HTTPError: If the token request fails in transport
        """
        logger.debug(f"Requesting token via {grant_type} grant")
        try:
            response = self._client.post(
                self.token_url,
                data=self._form_data(grant_type, params),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Token request ({grant_type}) failed: {e}")
            raise
        return self._parse_response(response, grant_type, params)

    def authenticate_with_password(self, username: str, password: str) -> Credential:
        """Obtain an initial credential with the username-password flow.

        :param username: Salesforce username
        :type username: str
        :param password: Password, with the security token appended if required
        :type password: str
        :return: Newly issued credential
        :rtype: Credential
        """
        return self.exchange(
            PASSWORD_GRANT, {"username": username, "password": password}
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class AsyncSalesforceProvider(_SalesforceOAuthMixin, AsyncCredentialExchanger):
    """Async Salesforce credential exchanger backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        login_url: str = DEFAULT_LOGIN_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._configure(client_id, client_secret, login_url)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None
    ) -> "AsyncSalesforceProvider":
        """Create a provider from application settings."""
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            login_url=settings.login_url,
            http_client=http_client,
            timeout=settings.request_timeout,
        )

    async def exchange(self, grant_type: str, params: Dict[str, Any]) -> Credential:
        """Exchange a grant for a new credential.

        :raises TokenExchangeError: If the token endpoint rejects the grant
        :raises httpx.HTTPError: If the token request fails in transport
        """
        logger.debug(f"Requesting token via {grant_type} grant")
        try:
            response = await self._client.post(
                self.token_url,
                data=self._form_data(grant_type, params),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Token request ({grant_type}) failed: {e}")
            raise
        return self._parse_response(response, grant_type, params)

    async def authenticate_with_password(
        self, username: str, password: str
    ) -> Credential:
        """Obtain an initial credential with the username-password flow."""
        return await self.exchange(
            PASSWORD_GRANT, {"username": username, "password": password}
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
