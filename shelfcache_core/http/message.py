"""ShelfCache HTTP Messages - Request and Response Value Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional
from urllib.parse import SplitResult, urldefrag, urlsplit

import httpx


class RequestMode(str, Enum):
    """Request modes, as reported by the intercepting host."""

    NAVIGATE = "navigate"
    CORS = "cors"
    NO_CORS = "no-cors"
    SAME_ORIGIN = "same-origin"


class ResponseType(str, Enum):
    """Response types."""

    BASIC = "basic"
    CORS = "cors"
    OPAQUE = "opaque"
    ERROR = "error"


@dataclass
class Request:
    """An intercepted outbound request.

    Attributes:
        url: Absolute request URL
        method: HTTP method
        headers: Request headers (case-insensitive)
        mode: Request mode; ``navigate`` marks a page navigation
        destination: Optional destination hint (document, script, image...)
    """

    url: str
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    mode: RequestMode = RequestMode.CORS
    destination: str = ""

    def __post_init__(self):
        self.method = self.method.upper()
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers or {})
        if not isinstance(self.mode, RequestMode):
            self.mode = RequestMode(self.mode)

    @property
    def is_navigation(self) -> bool:
        """Check if this request is a page navigation."""
        return self.mode == RequestMode.NAVIGATE

    @property
    def parts(self) -> SplitResult:
        return urlsplit(self.url)

    @property
    def origin(self) -> str:
        parts = self.parts
        return f"{parts.scheme.lower()}://{parts.netloc.lower()}"

    @property
    def host(self) -> str:
        return (self.parts.hostname or "").lower()

    @property
    def path(self) -> str:
        return self.parts.path or "/"

    @property
    def cache_key(self) -> str:
        """Normalized identity used as the cache key (method + URL, no fragment)."""
        return make_cache_key(self.url, self.method)

    def __repr__(self) -> str:
        return f"Request({self.method} {self.url!r}, mode={self.mode.value})"


def make_cache_key(url: str, method: str = "GET") -> str:
    """Build the normalized cache key for a URL.

    Args:
        url: Absolute URL
        method: HTTP method

    Returns:
        Cache key string
    """
    return f"{method.upper()} {urldefrag(url)[0]}"


@dataclass
class Response:
    """A response served to the caller or held in the cache.

    Attributes:
        status: HTTP status code (0 for a network error)
        status_text: Reason phrase
        headers: Response headers (case-insensitive)
        body: Payload bytes
        type: Response type
        url: URL the response was produced for
    """

    status: int = 200
    status_text: Optional[str] = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""
    type: ResponseType = ResponseType.BASIC
    url: str = ""

    def __post_init__(self):
        if not isinstance(self.headers, httpx.Headers):
            self.headers = httpx.Headers(self.headers or {})
        if self.status_text is None:
            self.status_text = httpx.codes.get_reason_phrase(self.status) if self.status else ""

    @property
    def ok(self) -> bool:
        """Check for a 2xx status."""
        return 200 <= self.status < 300

    @property
    def is_error(self) -> bool:
        return self.type == ResponseType.ERROR

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def clone(self) -> "Response":
        """Copy the response; headers are copied, body bytes are shared."""
        return replace(self, headers=httpx.Headers(self.headers))

    def with_header(self, name: str, value: str) -> "Response":
        """Return a copy with one header set.

        Args:
            name: Header name
            value: Header value

        Returns:
            New response
        """
        copy = self.clone()
        copy.headers[name] = value
        return copy

    @classmethod
    def error(cls, url: str = "") -> "Response":
        """Build a network-error response."""
        return cls(status=0, status_text="", type=ResponseType.ERROR, url=url)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "Response":
        """Convert an httpx response (body already read).

        Args:
            response: httpx response

        Returns:
            Response instance
        """
        return cls(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=httpx.Headers(response.headers),
            body=response.content,
            url=str(response.url),
        )

    def __repr__(self) -> str:
        return f"Response(status={self.status}, type={self.type.value}, bytes={len(self.body)})"


__all__ = [
    "Request",
    "RequestMode",
    "Response",
    "ResponseType",
    "make_cache_key",
]
