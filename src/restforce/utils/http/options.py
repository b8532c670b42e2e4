"""URL construction and request option merging.

Endpoints are either absolute URLs, used verbatim, or paths relative to
the instance's versioned data API. Options are merged recursively with
a default set carrying the bearer Authorization header, which is always
rebuilt from the access token passed in.
"""

import copy
from typing import Any, Dict, Mapping, Optional

import httpx

AUTHORIZATION_HEADER = "Authorization"
DATA_API_PATH = "/services/data/"


def is_absolute_url(endpoint: str) -> bool:
    """Return whether the endpoint already carries an http(s) scheme.

    :param endpoint: Endpoint as given by the caller
    :type endpoint: str
    :return: True for "http://" or "https://" prefixed endpoints
    :rtype: bool
    """
    return endpoint.startswith("http://") or endpoint.startswith("https://")


def construct_url(endpoint: str, instance_url: str, api_version: str) -> str:
    """Build the request URL for an endpoint.

    :param endpoint: Absolute URL or path relative to the data API
    :type endpoint: str
    :param instance_url: Instance base URL of the current credential
    :type instance_url: str
    :param api_version: Version segment, e.g. "v45.0"
    :type api_version: str
    :return: Absolute request URL
    :rtype: str
    """
    if is_absolute_url(endpoint):
        return endpoint
    return f"{instance_url}{DATA_API_PATH}{api_version}/{endpoint}"


def bearer_header(access_token: str) -> Dict[str, str]:
    """Return the Authorization header for an access token."""
    return {AUTHORIZATION_HEADER: f"Bearer {access_token}"}


def deep_merge(
    defaults: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Recursively merge two option mappings.

    Nested mappings combine key by key. For any other value present on
    both sides the override wins. Neither input is modified.

    :param defaults: Base options
    :type defaults: Mapping[str, Any]
    :param overrides: Options layered on top of the defaults
    :type overrides: Optional[Mapping[str, Any]]
    :return: New merged mapping
    :rtype: Dict[str, Any]
    """
    merged = copy.deepcopy(dict(defaults))
    for key, value in (overrides or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _normalize_headers(headers: Any) -> Dict[str, Any]:
    """Return caller headers as a plain dict.

    Accepts None, any mapping, or whatever else ``httpx.Headers`` takes,
    such as a list of name/value pairs.
    """
    if headers is None:
        return {}
    if isinstance(headers, Mapping):
        return dict(headers)
    return dict(httpx.Headers(headers))


def merge_options(
    options: Optional[Mapping[str, Any]], access_token: str
) -> Dict[str, Any]:
    """Merge caller options with the default bearer header.

    Caller headers are kept alongside the default ones. Any caller
    supplied Authorization header, whatever its casing, is discarded in
    favor of one built from ``access_token``.

    :param options: Caller request options, may be None
    :type options: Optional[Mapping[str, Any]]
    :param access_token: Access token of the current credential
    :type access_token: str
    :return: Options ready to hand to a request executor
    :rtype: Dict[str, Any]
    """
    merged = deep_merge({"headers": bearer_header(access_token)}, options)
    headers = {
        name: value
        for name, value in _normalize_headers(merged.get("headers")).items()
        if name.lower() != AUTHORIZATION_HEADER.lower()
    }
    headers.update(bearer_header(access_token))
    merged["headers"] = headers
    return merged
