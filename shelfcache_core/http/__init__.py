"""HTTP module - Request/response value types and network fetchers."""

from shelfcache_core.http.message import (
    Request,
    RequestMode,
    Response,
    ResponseType,
    make_cache_key,
)
from shelfcache_core.http.fetcher import (
    Fetcher,
    HttpxFetcher,
    outgoing_headers,
)

__all__ = [
    "Request",
    "RequestMode",
    "Response",
    "ResponseType",
    "make_cache_key",
    "Fetcher",
    "HttpxFetcher",
    "outgoing_headers",
]
