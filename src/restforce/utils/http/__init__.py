"""HTTP utilities public API (barrel module).

This package provides:
- Request executors backed by httpx
- URL construction for the versioned data API
- Option merging with the bearer Authorization header

Recommended import pattern for consumers:
    from restforce.utils.http import HttpxRequestExecutor, merge_options
"""

from .executor import (
    AsyncHttpxRequestExecutor,
    AsyncRequestExecutor,
    HttpxRequestExecutor,
    RequestExecutor,
    to_httpx_kwargs,
)
from .options import (
    bearer_header,
    construct_url,
    deep_merge,
    is_absolute_url,
    merge_options,
)

__all__ = [
    "RequestExecutor",
    "AsyncRequestExecutor",
    "HttpxRequestExecutor",
    "AsyncHttpxRequestExecutor",
    "to_httpx_kwargs",
    "bearer_header",
    "construct_url",
    "deep_merge",
    "is_absolute_url",
    "merge_options",
]
