"""Request executors that perform the actual HTTP calls.

The rest client hands each attempt to a request executor as a method,
an absolute URL, and an options mapping. The bundled executors translate
those options to httpx keyword arguments. Transport failures are
``httpx.HTTPError`` subclasses and are never caught here.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

import httpx

from ..security import sanitize_headers, sanitize_url

logger = logging.getLogger(__name__)

# Option keys passed straight through to httpx
_HTTPX_OPTIONS = {
    "headers",
    "params",
    "json",
    "data",
    "content",
    "files",
    "cookies",
    "timeout",
}

# Guzzle-style option names accepted for compatibility
_OPTION_ALIASES = {
    "query": "params",
    "form_params": "data",
    "body": "content",
}


class RequestExecutor(ABC):
    """Perform one HTTP request."""

    @abstractmethod
    def request(self, method: str, url: str, options: Mapping[str, Any]) -> Any:
        """Execute the request and return a response exposing ``status_code``.

        :param method: HTTP method
        :param url: Absolute URL
        :param options: Request options (headers, params, json, ...)
        :return: Response object
        """
        pass


class AsyncRequestExecutor(ABC):
    """Async twin of :class:`RequestExecutor`."""

    @abstractmethod
    async def request(self, method: str, url: str, options: Mapping[str, Any]) -> Any:
        """Execute the request and return a response exposing ``status_code``.

        :param method: HTTP method
        :param url: Absolute URL
        :param options: Request options (headers, params, json, ...)
        :return: Response object
        """
        pass


def to_httpx_kwargs(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Translate request options to httpx request keyword arguments.

    :param options: Request options
    :type options: Optional[Mapping[str, Any]]
    :return: Keyword arguments for ``httpx.Client.request``
    :rtype: Dict[str, Any]
    :raises ValueError: For unsupported or conflicting option keys
    """
    kwargs: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        name = _OPTION_ALIASES.get(key, key)
        if name not in _HTTPX_OPTIONS:
            raise ValueError(f"Unsupported request option: {key}")
        if name in kwargs:
            raise ValueError(f"Request option '{key}' conflicts with '{name}'")
        kwargs[name] = value
    return kwargs


def _log_request(method: str, url: str, kwargs: Mapping[str, Any]) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"{method} {sanitize_url(url)}")
        logger.debug(f"Headers: {sanitize_headers(dict(kwargs.get('headers') or {}))}")


class HttpxRequestExecutor(RequestExecutor):
    """Request executor backed by ``httpx.Client``.

    A client passed in stays owned by the caller; otherwise one is
    created and closed by :meth:`close`.

    :param client: Optional preconfigured httpx client
    :type client: Optional[httpx.Client]
    :param timeout: Timeout in seconds for an internally created client
    :type timeout: float
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def client(self) -> httpx.Client:
        return self._client

    def request(
        self, method: str, url: str, options: Mapping[str, Any]
    ) -> httpx.Response:
        kwargs = to_httpx_kwargs(options)
        _log_request(method, url, kwargs)
        response = self._client.request(method, url, **kwargs)
        logger.debug(f"{method} {sanitize_url(url)} -> {response.status_code}")
        return response

    def close(self) -> None:
        """Close the underlying client if this executor created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxRequestExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class AsyncHttpxRequestExecutor(AsyncRequestExecutor):
    """Request executor backed by ``httpx.AsyncClient``.

    :param client: Optional preconfigured async httpx client
    :type client: Optional[httpx.AsyncClient]
    :param timeout: Timeout in seconds for an internally created client
    :type timeout: float
    """

    def __init__(
        self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def request(
        self, method: str, url: str, options: Mapping[str, Any]
    ) -> httpx.Response:
        kwargs = to_httpx_kwargs(options)
        _log_request(method, url, kwargs)
        response = await self._client.request(method, url, **kwargs)
        logger.debug(f"{method} {sanitize_url(url)} -> {response.status_code}")
        return response

    async def aclose(self) -> None:
        """Close the underlying client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpxRequestExecutor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
