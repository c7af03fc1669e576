"""ShelfCache Passthrough - Network-Only and Cache-Then-Network.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Optional

from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import Outcome
from shelfcache_core.strategies.base import Strategy
from shelfcache_core.strategies.fallbacks import service_unavailable_response

logger = logging.getLogger(__name__)


class NetworkOnlyStrategy(Strategy):
    """Always the network, never any cache tier.

    For endpoints whose responses must not be persisted. A network
    failure becomes a well-formed 503 response.
    """

    name = "sensitive-bypass"

    async def resolve(
        self,
        request: Request,
        namespace: Optional[str],
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Response:
        try:
            response = await self._fetch(request)
        except NetworkUnavailable as e:
            logger.warning(f"Bypass request failed: {e}")
            self._record(Outcome.FAILED)
            return service_unavailable_response()

        self._record(Outcome.NETWORK)
        return response


class CacheThenNetworkStrategy(Strategy):
    """Any cached copy, else the network; nothing is written.

    The most permissive class. When both miss, NetworkUnavailable
    propagates and the caller receives an explicit network-error
    response.
    """

    name = "fallback"

    async def resolve(
        self,
        request: Request,
        namespace: Optional[str],
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Response:
        cached = await self._match(request.cache_key, first=namespace)
        if cached is not None:
            self._record(Outcome.CACHE_HIT)
            return cached

        try:
            response = await self._fetch(request)
        except NetworkUnavailable:
            self._record(Outcome.FAILED)
            raise

        self._record(Outcome.NETWORK)
        return response


__all__ = ["NetworkOnlyStrategy", "CacheThenNetworkStrategy"]
