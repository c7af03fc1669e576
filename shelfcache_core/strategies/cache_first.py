"""ShelfCache Cache First - TTL-Bounded Cache with Network Fill.

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


class CacheFirstStrategy(Strategy):
    """Cache first with expiry, used for images.

    - Fresh cached copy: returned unchanged.
    - Expired copy: deleted and treated as a miss.
    - Miss: fetched, stamped, stored and the namespace trimmed.
    - Network failure on a miss: the last known copy is served even if
      expired; with no copy at all the failure propagates.
    """

    name = "image"

    def __init__(self, context: StrategyContext, codec: ExpiryCodec, max_entries: int):
        """Initialize strategy.

        Args:
            context: Shared dependencies
            codec: Stamp codec carrying the TTL
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
        handle = self.ctx.storage.open(namespace)

        last_known: Optional[Response] = None
        cached = await handle.get(key)
        if cached is not None:
            response = cached.to_response()
            if self.codec.is_fresh(response):
                self._record(Outcome.CACHE_HIT)
                return response

            await handle.delete(key)
            self._record(Outcome.EXPIRED)
            logger.debug(f"Expired {key} (age {self.codec.age_ms(response)}ms)")
            last_known = response

        try:
            response = await self._fetch(request)
        except NetworkUnavailable:
            if last_known is None:
                # A concurrent request may have filled the slot meanwhile
                refilled = await handle.get(key)
                last_known = refilled.to_response() if refilled is not None else None
            if last_known is not None:
                self._record(Outcome.CACHE_FALLBACK)
                return last_known
            self._record(Outcome.FAILED)
            raise

        self._record(Outcome.NETWORK)
        if not response.ok:
            return response

        stamped = self.codec.stamp(response)
        await self._store(namespace, key, stamped, max_entries=self.max_entries)
        return stamped


__all__ = ["CacheFirstStrategy"]
