"""ShelfCache Network First - Timed Network Race with Cache Fallback.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, Union

from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import Outcome
from shelfcache_core.strategies.base import Strategy, StrategyContext
from shelfcache_core.strategies.fallbacks import offline_response
from shelfcache_core.strategies.race import first_of

logger = logging.getLogger(__name__)


class NetworkFirstStrategy(Strategy):
    """Network first, racing a deadline, falling back to the cache.

    Used for header/footer partials: fresh markup is preferred and a
    cached copy is an acceptable stand-in, but nothing is synthesized
    when both are missing.

    A fetch that loses the race is not cancelled. If it later succeeds,
    its response still refreshes the cache for the next request.
    """

    name = "partial"

    def __init__(self, context: StrategyContext, timeout: float):
        """Initialize strategy.

        Args:
            context: Shared dependencies
            timeout: Network deadline in seconds
        """
        super().__init__(context)
        self.timeout = timeout

    async def resolve(
        self,
        request: Request,
        namespace: Optional[str],
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Response:
        key = request.cache_key
        outcome = await self._try_network(request, namespace, key, preload)
        if isinstance(outcome, Response):
            return outcome

        cached = await self._match(key, first=namespace)
        if cached is not None:
            logger.info(f"Serving cached {request.url} ({outcome.reason or 'network failed'})")
            self._record(Outcome.CACHE_FALLBACK)
            return cached

        return self._on_total_failure(request, outcome)

    async def _try_network(
        self,
        request: Request,
        namespace: Optional[str],
        key: str,
        preload: Optional[Awaitable[Optional[Response]]],
    ) -> Union[Response, NetworkUnavailable]:
        """Get a network response, or the NetworkUnavailable explaining why not."""
        if preload is not None:
            try:
                preloaded = await preload
            except NetworkUnavailable as e:
                return e
            if preloaded is not None:
                if preloaded.ok and namespace is not None:
                    await self._store(namespace, key, preloaded, source="preload")
                self._record(Outcome.NETWORK)
                return preloaded

        result = await first_of(self._fetch(request), self.timeout)

        if result.completed:
            response = result.value
            if response.ok and namespace is not None:
                await self._store(namespace, key, response)
            self._record(Outcome.NETWORK)
            return response

        if result.timed_out:
            logger.warning(f"Network timed out after {self.timeout}s for {request.url}")
            if namespace is not None:
                self.ctx.tasks.spawn(
                    self._store_late(result.task, namespace, key),
                    name=f"late-store {key}",
                )
            return NetworkUnavailable(request.url, "timeout", timed_out=True)

        if isinstance(result.error, NetworkUnavailable):
            return result.error
        raise result.error

    async def _store_late(self, task: "asyncio.Future[Response]", namespace: str, key: str) -> None:
        """Cache the response of a fetch that finished after its deadline."""
        try:
            response = await task
        except NetworkUnavailable:
            return
        if response.ok:
            await self._store(namespace, key, response)
            logger.debug(f"Late response cached for {key}")

    def _on_total_failure(self, request: Request, reason: NetworkUnavailable) -> Response:
        self._record(Outcome.FAILED)
        raise reason


class NavigationStrategy(NetworkFirstStrategy):
    """Network first for page navigations, with an offline document.

    Prefers an in-flight navigation preload over starting a new fetch.
    When neither network nor cache can answer, a synthesized offline page
    is served instead of an error.
    """

    name = "navigation"

    def __init__(self, context: StrategyContext, timeout: float, offline_title: str):
        super().__init__(context, timeout)
        self.offline_title = offline_title

    def _on_total_failure(self, request: Request, reason: NetworkUnavailable) -> Response:
        logger.info(f"Serving offline page for {request.url}")
        self._record(Outcome.OFFLINE_PAGE)
        return offline_response(self.offline_title)


__all__ = ["NetworkFirstStrategy", "NavigationStrategy"]
