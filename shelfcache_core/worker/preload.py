"""ShelfCache Navigation Preload - Host-Side Early Navigation Fetch.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import httpx

from shelfcache_core.errors import PreloadUnsupported
from shelfcache_core.http.message import Request

logger = logging.getLogger(__name__)

PRELOAD_HEADER = "Service-Worker-Navigation-Preload"


class NavigationPreload:
    """Navigation preload switch of the intercepting host.

    When enabled, the host starts the network fetch of a navigation
    before the worker handles it, so worker startup and the fetch
    overlap. Hosts that cannot do this are created with
    ``supported=False``; enabling then fails.
    """

    def __init__(self, supported: bool = True, header_value: str = "true"):
        """Initialize preload switch.

        Args:
            supported: Whether the host can preload navigations
            header_value: Value sent in the preload request header
        """
        self.supported = supported
        self.header_value = header_value
        self.enabled = False

    async def enable(self) -> None:
        """Turn preloading on.

        Raises:
            PreloadUnsupported: If the host does not support it
        """
        if not self.supported:
            raise PreloadUnsupported("navigation preload is not supported by this host")
        self.enabled = True
        logger.debug("Navigation preload enabled")

    def prepare(self, request: Request) -> Request:
        """Copy a navigation request, marked as a preload."""
        headers = httpx.Headers(request.headers)
        headers[PRELOAD_HEADER] = self.header_value
        return replace(request, headers=headers)

    def __repr__(self) -> str:
        return f"NavigationPreload(supported={self.supported}, enabled={self.enabled})"


__all__ = ["NavigationPreload", "PRELOAD_HEADER"]
