"""ShelfCache Stale-While-Revalidate - Cached Now, Refreshed for Next Time.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional

from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import Outcome
from shelfcache_core.strategies.base import Strategy

logger = logging.getLogger(__name__)


class StaleWhileRevalidateStrategy(Strategy):
    """Serve the cached copy immediately and refresh it in the background.

    The refresh is started on every request, hit or miss. On a hit the
    caller gets the cached copy without waiting; on a miss the caller
    waits for the refresh itself. Refresh failures are logged and
    dropped: stale data beats an error.
    """

    name = "static-asset"

    async def resolve(
        self,
        request: Request,
        namespace: Optional[str],
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Response:
        key = request.cache_key
        cached = await self.ctx.storage.open(namespace).get(key)

        refresh = self.ctx.tasks.spawn(
            self._revalidate(request, namespace, key),
            name=f"revalidate {key}",
        )

        if cached is not None:
            self._record(Outcome.CACHE_HIT)
            return cached.to_response()

        # Shielded: a caller giving up must not cancel the refresh
        response = await asyncio.shield(refresh)
        if response is None:
            self._record(Outcome.FAILED)
            raise NetworkUnavailable(request.url, "no cached copy and refresh failed")

        self._record(Outcome.NETWORK)
        return response

    async def _revalidate(self, request: Request, namespace: str, key: str) -> Optional[Response]:
        """Fetch a fresh copy and overwrite the cache entry with it."""
        try:
            response = await self._fetch(request)
        except NetworkUnavailable as e:
            logger.debug(f"Revalidation of {request.url} failed: {e}")
            return None

        if response.ok:
            await self._store(namespace, key, response)
        return response


__all__ = ["StaleWhileRevalidateStrategy"]
