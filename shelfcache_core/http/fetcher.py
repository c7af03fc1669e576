"""ShelfCache Fetcher - Network Access for Strategy Executors.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from shelfcache_core.cache.expiry import INTERNAL_HEADERS
from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.message import Request, Response

logger = logging.getLogger(__name__)


def outgoing_headers(request: Request) -> httpx.Headers:
    """Copy request headers without the cache's own bookkeeping headers.

    Args:
        request: Intercepted request

    Returns:
        Headers safe to forward to the network
    """
    headers = httpx.Headers(request.headers)
    for name in INTERNAL_HEADERS:
        if name in headers:
            del headers[name]
    return headers


class Fetcher(ABC):
    """Abstract network fetcher.

    Implementations return a Response for anything the server answered
    (including 4xx/5xx) and raise NetworkUnavailable when no answer was
    obtained at all.
    """

    @abstractmethod
    async def fetch(self, request: Request) -> Response:
        """Fetch a request from the network.

        Args:
            request: Request to send

        Returns:
            Network response

        Raises:
            NetworkUnavailable: If the request could not be completed
        """
        pass

    async def close(self) -> None:
        """Release network resources."""


class HttpxFetcher(Fetcher):
    """Fetcher backed by an httpx.AsyncClient.

    Example:
        fetcher = HttpxFetcher(timeout=15.0)
        response = await fetcher.fetch(Request("https://example.org/"))
        await fetcher.close()
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        follow_redirects: bool = True,
    ):
        """Initialize fetcher.

        Args:
            client: Existing client to use (not closed by this fetcher)
            timeout: Total request timeout in seconds
            follow_redirects: Follow redirects like a browser would
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._follow_redirects = follow_redirects

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=self._follow_redirects,
            )
        return self._client

    async def fetch(self, request: Request) -> Response:
        client = self._get_client()
        try:
            response = await client.request(
                request.method,
                request.url,
                headers=outgoing_headers(request),
            )
        except httpx.TimeoutException as e:
            logger.debug(f"Fetch timed out for {request.url}: {e}")
            raise NetworkUnavailable(request.url, "timeout", timed_out=True) from e
        except httpx.HTTPError as e:
            logger.debug(f"Fetch failed for {request.url}: {e}")
            raise NetworkUnavailable(request.url, str(e) or type(e).__name__) from e

        return Response.from_httpx(response)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def __repr__(self) -> str:
        return f"HttpxFetcher(timeout={self._timeout})"


__all__ = ["Fetcher", "HttpxFetcher", "outgoing_headers"]
