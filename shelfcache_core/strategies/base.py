"""ShelfCache Strategy - Abstract Strategy Executor.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, List, Optional

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.cache.namespace import NamespaceTable
from shelfcache_core.cache.storage import CacheStorage
from shelfcache_core.clock import Clock
from shelfcache_core.errors import StoreWriteError
from shelfcache_core.eviction.policy import Trimmer
from shelfcache_core.http.fetcher import Fetcher
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import MetricsCollector, Outcome
from shelfcache_core.tasks import BackgroundTasks

logger = logging.getLogger(__name__)


@dataclass
class StrategyContext:
    """Dependencies shared by every strategy of one worker.

    Attributes:
        storage: Namespaced cache storage
        fetcher: Network fetcher
        clock: Time source for expiry stamps
        namespaces: Name table of the worker's version
        trimmer: Eviction trimmer
        metrics: Outcome collector
        tasks: Tracker for work that outlives a request
    """

    storage: CacheStorage
    fetcher: Fetcher
    clock: Clock
    namespaces: NamespaceTable
    trimmer: Trimmer
    metrics: MetricsCollector
    tasks: BackgroundTasks


class Strategy(ABC):
    """Abstract strategy executor.

    Every strategy resolves a request to a response using its own mix of
    network and cache. A strategy raises NetworkUnavailable only when it
    has no fallback left; the caller turns that into a network-error
    response.
    """

    name: str = "strategy"

    def __init__(self, context: StrategyContext):
        """Initialize strategy.

        Args:
            context: Shared dependencies
        """
        self.ctx = context

    @abstractmethod
    async def resolve(
        self,
        request: Request,
        namespace: Optional[str],
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Response:
        """Resolve a request.

        Args:
            request: Intercepted GET request
            namespace: Namespace this strategy reads and writes
            preload: Navigation preload started by the host, if any

        Returns:
            Response for the caller

        Raises:
            NetworkUnavailable: If neither network nor cache can answer
        """
        pass

    async def _fetch(self, request: Request) -> Response:
        return await self.ctx.fetcher.fetch(request)

    def _record(self, outcome: Outcome) -> None:
        self.ctx.metrics.record(self.name, outcome)

    async def _store(
        self,
        namespace: str,
        key: str,
        response: Response,
        source: str = "network",
        max_entries: Optional[int] = None,
    ) -> bool:
        """Write a response to a namespace, then optionally trim it.

        The write is shielded so that a caller abandoning the request does
        not leave a half-written entry. A failed write is logged and
        swallowed; the response is still served.

        Args:
            namespace: Namespace name
            key: Cache key
            response: Response to persist
            source: Payload source tag
            max_entries: Trim the namespace to this bound after writing

        Returns:
            True if the entry was stored
        """
        handle = self.ctx.storage.open(namespace)
        entry = CacheEntry.from_response(key, response, source=source)

        try:
            await asyncio.shield(handle.put(key, entry))
        except StoreWriteError as e:
            logger.warning(f"Cache write skipped: {e}")
            self._record(Outcome.STORE_ERROR)
            return False

        if max_entries is not None:
            try:
                evicted = await self.ctx.trimmer.trim(handle, max_entries, protect=key)
            except Exception as e:
                logger.warning(f"Trim of {namespace} failed: {e}")
            else:
                if evicted:
                    self.ctx.metrics.record(self.name, Outcome.EVICTED, len(evicted))
        return True

    async def _match(self, key: str, first: Optional[str] = None) -> Optional[Response]:
        """Look a key up in the current namespaces.

        Args:
            key: Cache key
            first: Namespace to search before the others

        Returns:
            Cached response or None
        """
        order: List[str] = self.ctx.namespaces.lookup_order()
        if first is not None:
            order = [first] + [name for name in order if name != first]
        entry = await self.ctx.storage.match(key, order)
        return entry.to_response() if entry is not None else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = ["Strategy", "StrategyContext"]
