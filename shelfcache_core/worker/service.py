"""ShelfCache Worker - Offline Cache Manager Service Object.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Dict, List, Optional, Tuple

from shelfcache_core.cache.expiry import FETCHED_AT_HEADER, STORED_AT_HEADER, ExpiryCodec
from shelfcache_core.cache.namespace import NamespaceRole, NamespaceTable
from shelfcache_core.cache.storage import CacheStorage
from shelfcache_core.clock import Clock, SystemClock
from shelfcache_core.errors import NetworkUnavailable, PreloadUnsupported
from shelfcache_core.eviction.fifo import FIFOTrimmer
from shelfcache_core.eviction.policy import Trimmer
from shelfcache_core.http.fetcher import Fetcher, HttpxFetcher
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import MetricsCollector
from shelfcache_core.routing.classifier import RequestClassifier, StrategyClass
from shelfcache_core.store.backend import StorageBackend
from shelfcache_core.store.memory import MemoryStore
from shelfcache_core.strategies.base import Strategy, StrategyContext
from shelfcache_core.strategies.cache_first import CacheFirstStrategy
from shelfcache_core.strategies.network_first import NavigationStrategy, NetworkFirstStrategy
from shelfcache_core.strategies.network_first_ttl import NetworkFirstTTLStrategy
from shelfcache_core.strategies.passthrough import CacheThenNetworkStrategy, NetworkOnlyStrategy
from shelfcache_core.strategies.stale_while_revalidate import StaleWhileRevalidateStrategy
from shelfcache_core.tasks import BackgroundTasks
from shelfcache_core.worker.config import WorkerConfig
from shelfcache_core.worker.lifecycle import LifecycleController, LifecycleState
from shelfcache_core.worker.messages import (
    MessageType,
    clear_done,
    parse_message,
    pong,
    version_reply,
)
from shelfcache_core.worker.precache import Precacher, PrecacheStats
from shelfcache_core.worker.preload import NavigationPreload

logger = logging.getLogger(__name__)

Route = Tuple[Strategy, Optional[NamespaceRole]]


class OfflineCacheWorker:
    """One version of the offline cache manager.

    Wires the classifier, the strategy executors, the namespaced store
    and the lifecycle together. A worker is installed once, activated
    once, and from then on resolves intercepted requests until a newer
    version supersedes it.

    Features:
    - Per-class caching strategies (network-first, SWR, cache-first, TTL)
    - Versioned namespaces with a sweep of superseded ones on activation
    - All-or-nothing precache of the application shell
    - Control messages (PING, GET_VERSION, SKIP_WAITING, CLEAR_CACHES)
    - Per-strategy outcome metrics

    Example:
        worker = OfflineCacheWorker(WorkerConfig(version="v7"))
        await worker.install()
        await worker.activate()

        response = await worker.handle_fetch(Request("http://localhost:8000/"))
        reply = await worker.handle_message("GET_VERSION")
        await worker.drain()
    """

    def __init__(
        self,
        config: Optional[WorkerConfig] = None,
        store: Optional[StorageBackend] = None,
        fetcher: Optional[Fetcher] = None,
        clock: Optional[Clock] = None,
        metrics: Optional[MetricsCollector] = None,
        trimmer: Optional[Trimmer] = None,
    ):
        """Initialize worker.

        Args:
            config: Worker configuration
            store: Storage backend, shared across versions
            fetcher: Network fetcher
            clock: Time source for expiry stamps
            metrics: Outcome collector
            trimmer: Eviction trimmer
        """
        self.config = config or WorkerConfig()
        self.store = store or MemoryStore()
        self.fetcher = fetcher or HttpxFetcher()
        self.clock = clock or SystemClock()
        self.metrics = metrics or MetricsCollector()

        self.namespaces = NamespaceTable(self.config.cache_prefix, self.config.version)
        self.storage = CacheStorage(self.store)
        self.classifier = RequestClassifier(self.config.origin, self.config.rules)
        self.lifecycle = LifecycleController(self.config.version, self.clock)
        self.precacher = Precacher(self.storage, self.fetcher)
        self.tasks = BackgroundTasks()

        self.context = StrategyContext(
            storage=self.storage,
            fetcher=self.fetcher,
            clock=self.clock,
            namespaces=self.namespaces,
            trimmer=trimmer or FIFOTrimmer(),
            metrics=self.metrics,
            tasks=self.tasks,
        )
        self._routes = self._build_routes()

    def _build_routes(self) -> Dict[StrategyClass, Route]:
        config = self.config
        ctx = self.context
        image_codec = ExpiryCodec(STORED_AT_HEADER, config.image_ttl, self.clock)
        api_codec = ExpiryCodec(FETCHED_AT_HEADER, config.api_ttl, self.clock, require_stamp=True)

        return {
            StrategyClass.NAVIGATION: (
                NavigationStrategy(ctx, config.navigation_timeout, config.offline_title),
                NamespaceRole.PAGES,
            ),
            StrategyClass.PARTIAL: (
                NetworkFirstStrategy(ctx, config.partial_timeout),
                NamespaceRole.ASSETS,
            ),
            StrategyClass.STATIC_ASSET: (
                StaleWhileRevalidateStrategy(ctx),
                NamespaceRole.ASSETS,
            ),
            StrategyClass.IMAGE: (
                CacheFirstStrategy(ctx, image_codec, config.max_image_entries),
                NamespaceRole.IMAGES,
            ),
            StrategyClass.SENSITIVE_BYPASS: (NetworkOnlyStrategy(ctx), None),
            StrategyClass.EXTERNAL_API: (
                NetworkFirstTTLStrategy(ctx, api_codec, config.max_api_entries),
                NamespaceRole.API,
            ),
            StrategyClass.FALLBACK: (CacheThenNetworkStrategy(ctx), None),
        }

    @property
    def version(self) -> str:
        return self.config.version

    @property
    def state(self) -> LifecycleState:
        return self.lifecycle.state

    # Lifecycle

    async def install(self) -> PrecacheStats:
        """Precache the application shell.

        Returns:
            Precache statistics

        Raises:
            InstallError: If any manifest URL could not be cached
        """
        self.lifecycle.transition(LifecycleState.INSTALLING)
        shell = self.namespaces.name_for(NamespaceRole.SHELL)

        try:
            stats = await self.precacher.precache(
                self.config.precache_targets(), shell, self.version,
            )
        except Exception as e:
            logger.error(f"Install of {self.version} failed: {e}")
            self.lifecycle.transition(LifecycleState.FAILED)
            raise

        self.lifecycle.transition(LifecycleState.WAITING)
        if self.config.skip_waiting_on_install:
            self.lifecycle.request_skip_waiting()
        return stats

    async def activate(self, navigation_preload: Optional[NavigationPreload] = None) -> List[str]:
        """Take control: enable preload, sweep superseded namespaces.

        Args:
            navigation_preload: Host preload switch, if the host has one

        Returns:
            Names of the namespaces deleted
        """
        if navigation_preload is not None:
            try:
                await navigation_preload.enable()
            except PreloadUnsupported as e:
                logger.warning(f"Navigation preload unavailable: {e}")

        deleted = await self.sweep()
        self.lifecycle.transition(LifecycleState.ACTIVE)
        return deleted

    async def sweep(self) -> List[str]:
        """Delete namespaces this application owns that are not current.

        Returns:
            Names of the namespaces deleted
        """
        stale = self.namespaces.superseded(await self.storage.names())
        for name in stale:
            await self.storage.delete(name)
        if stale:
            logger.info(f"Swept {len(stale)} superseded namespaces: {', '.join(stale)}")
        return stale

    # Requests

    def route(self, request: Request) -> Optional[Tuple[StrategyClass, Strategy, Optional[str]]]:
        """Pick the strategy and namespace for a request.

        Args:
            request: Intercepted request

        Returns:
            (class, strategy, namespace name) or None if not intercepted
        """
        strategy_class = self.classifier.classify(request)
        if strategy_class is None:
            return None
        strategy, role = self._routes[strategy_class]
        namespace = self.namespaces.name_for(role) if role is not None else None
        return strategy_class, strategy, namespace

    async def handle_fetch(
        self,
        request: Request,
        preload: Optional[Awaitable[Optional[Response]]] = None,
    ) -> Optional[Response]:
        """Resolve an intercepted request.

        Args:
            request: Intercepted request
            preload: Navigation preload started by the host, if any

        Returns:
            Response, or None if the request is passed through untouched
        """
        routed = self.route(request)
        if routed is None:
            return None

        strategy_class, strategy, namespace = routed
        logger.debug(f"{request.method} {request.url} -> {strategy_class.value}")

        if strategy_class != StrategyClass.NAVIGATION:
            preload = None

        started = time.perf_counter()
        try:
            return await strategy.resolve(request, namespace, preload)
        except NetworkUnavailable as e:
            logger.warning(f"No response for {request.url}: {e}")
            return Response.error(request.url)
        finally:
            self.metrics.record_latency((time.perf_counter() - started) * 1000)

    # Messages

    async def handle_message(self, data: Any) -> Optional[Dict[str, str]]:
        """Handle a control message.

        Args:
            data: Raw message

        Returns:
            Reply dict, or None when the message has no reply
        """
        message = parse_message(data)
        if message is None:
            return None

        if message.type == MessageType.SKIP_WAITING:
            self.lifecycle.request_skip_waiting()
            return None
        if message.type == MessageType.PING:
            return pong(self.version)
        if message.type == MessageType.GET_VERSION:
            return version_reply(self.version)
        if message.type == MessageType.CLEAR_CACHES:
            await self.sweep()
            return clear_done()
        return None

    # Resources

    async def drain(self) -> None:
        """Wait for background work such as revalidations to finish."""
        await self.tasks.drain()

    async def close(self) -> None:
        """Drain background work and close the network fetcher."""
        await self.drain()
        await self.fetcher.close()

    def __repr__(self) -> str:
        return f"OfflineCacheWorker(version={self.version!r}, state={self.state.value})"


__all__ = ["OfflineCacheWorker"]
