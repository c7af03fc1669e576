"""ShelfCache Network First TTL - Network with Bounded-Age Cache Fallback.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Optional

from shelfcache_core.cache.expiry import ExpiryCodec
from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import Outcome
from shelfcache_core.strategies.base import Strategy, StrategyContext

logger = logging.getLogger(__name__)


class NetworkFirstTTLStrategy(Strategy):
    """Network first for third-party APIs, with a TTL on the fallback.

    Successful responses are stamped with their fetch time and stored.
    When the network fails, a cached copy is served only while it is
    younger than the TTL; an older copy counts as no copy and the
    failure propagates. Unlike the image strategy, stale data is never
    served.
    """

    name = "external-api"

    def __init__(self, context: StrategyContext, codec: ExpiryCodec, max_entries: int):
        """Initialize strategy.

        Args:
            context: Shared dependencies
            codec: Stamp codec carrying the TTL (stamp required)
            max_entries: Entry bound of the namespace
        """
        super().__init__(context)
        self.codec = codec
        self.max_entries = max_entries

    async def resolve(
        self,
        request: Request,
        namespace: Optional[str],
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Response:
        key = request.cache_key

        try:
            response = await self._fetch(request)
        except NetworkUnavailable:
            cached = await self.ctx.storage.open(namespace).get(key)
            if cached is not None:
                fallback = cached.to_response()
                if self.codec.is_fresh(fallback):
                    self._record(Outcome.CACHE_FALLBACK)
                    return fallback
                logger.info(f"Cached {key} is past its TTL; not serving it")
                self._record(Outcome.EXPIRED)
            self._record(Outcome.FAILED)
            raise

        self._record(Outcome.NETWORK)
        if not response.ok:
            return response

        stamped = self.codec.stamp(response)
        await self._store(namespace, key, stamped, max_entries=self.max_entries)
        return stamped


__all__ = ["NetworkFirstTTLStrategy"]
