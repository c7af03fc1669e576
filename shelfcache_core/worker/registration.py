"""ShelfCache Registration - Installing, Waiting and Active Workers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from shelfcache_core.http.message import Request, Response
from shelfcache_core.worker.dispatcher import (
    ActivateEvent,
    EventDispatcher,
    FetchEvent,
    InstallEvent,
    MessageEvent,
)
from shelfcache_core.worker.lifecycle import LifecycleState
from shelfcache_core.worker.preload import NavigationPreload
from shelfcache_core.worker.service import OfflineCacheWorker

logger = logging.getLogger(__name__)

WorkerListener = Callable[[OfflineCacheWorker], None]


class WorkerRegistration:
    """Host-side view of the worker versions sharing one store.

    At most one worker is installing, one waiting and one active. A
    newly installed worker waits until there is no active worker or it
    asked to skip waiting; promoting it supersedes the previous active
    worker. Requests go to the active worker only.

    Example:
        registration = WorkerRegistration(NavigationPreload())
        registration.on_update_found(lambda w: print("update", w.version))

        await registration.register(OfflineCacheWorker(config_v7, store=store))
        response = await registration.fetch(Request(url, mode="navigate"))

        await registration.register(OfflineCacheWorker(config_v8, store=store))
        await registration.close()
    """

    def __init__(self, navigation_preload: Optional[NavigationPreload] = None):
        """Initialize registration.

        Args:
            navigation_preload: Host preload switch; None if the host has none
        """
        self.navigation_preload = navigation_preload
        self.installing: Optional[OfflineCacheWorker] = None
        self.waiting: Optional[OfflineCacheWorker] = None
        self.active: Optional[OfflineCacheWorker] = None

        self._dispatchers: Dict[int, EventDispatcher] = {}
        self._update_found: List[WorkerListener] = []
        self._controller_change: List[WorkerListener] = []

    @property
    def controller(self) -> Optional[OfflineCacheWorker]:
        """Worker currently intercepting requests."""
        return self.active

    def on_update_found(self, listener: WorkerListener) -> None:
        """Subscribe to new versions finishing install while another controls."""
        self._update_found.append(listener)

    def on_controller_change(self, listener: WorkerListener) -> None:
        """Subscribe to a new worker taking control."""
        self._controller_change.append(listener)

    def _notify(self, listeners: List[WorkerListener], worker: OfflineCacheWorker) -> None:
        for listener in list(listeners):
            try:
                listener(worker)
            except Exception as e:
                logger.error(f"Registration listener failed: {e}")

    def _dispatcher(self, worker: OfflineCacheWorker) -> EventDispatcher:
        return self._dispatchers[id(worker)]

    async def register(self, worker: OfflineCacheWorker) -> OfflineCacheWorker:
        """Install a worker and promote it when allowed.

        Args:
            worker: New worker version

        Returns:
            The worker

        Raises:
            InstallError: If precaching failed; the previous workers stay in place
        """
        dispatcher = EventDispatcher(worker)
        self._dispatchers[id(worker)] = dispatcher
        dispatcher.start()

        self.installing = worker
        try:
            await dispatcher.dispatch(InstallEvent())
        except Exception:
            self.installing = None
            await self._retire(worker)
            raise
        self.installing = None

        previous = self.waiting
        if previous is not None:
            previous.lifecycle.transition(LifecycleState.SUPERSEDED)
            await self._retire(previous)
        self.waiting = worker

        if self.active is not None:
            self._notify(self._update_found, worker)

        if self.active is None or worker.lifecycle.skip_waiting_requested:
            await self._promote()
        else:
            logger.info(f"Worker {worker.version} waiting behind {self.active.version}")
        return worker

    async def skip_waiting(self) -> bool:
        """Promote the waiting worker now.

        Returns:
            True if a worker was promoted
        """
        if self.waiting is None:
            return False
        await self._promote()
        return True

    async def _promote(self) -> None:
        worker = self.waiting
        self.waiting = None
        await self._dispatcher(worker).dispatch(ActivateEvent(self.navigation_preload))

        previous = self.active
        self.active = worker
        if previous is not None:
            previous.lifecycle.transition(LifecycleState.SUPERSEDED)
            await self._retire(previous)

        logger.info(f"Worker {worker.version} now controls requests")
        self._notify(self._controller_change, worker)

    async def _retire(self, worker: OfflineCacheWorker) -> None:
        dispatcher = self._dispatchers.pop(id(worker), None)
        if dispatcher is not None:
            await dispatcher.stop()

    async def fetch(self, request: Request) -> Optional[Response]:
        """Route a request to the active worker.

        Args:
            request: Outbound request

        Returns:
            Response, or None if the request is not intercepted
        """
        worker = self.active
        if worker is None:
            return None

        preload = None
        if (
            request.is_navigation
            and request.method == "GET"
            and self.navigation_preload is not None
            and self.navigation_preload.enabled
        ):
            preload = asyncio.ensure_future(
                worker.fetcher.fetch(self.navigation_preload.prepare(request))
            )

        return await self._dispatcher(worker).dispatch(FetchEvent(request, preload))

    async def post_message(
        self,
        data: Any,
        worker: Optional[OfflineCacheWorker] = None,
    ) -> Optional[Dict[str, str]]:
        """Post a control message to a worker.

        A SKIP_WAITING message to the waiting worker promotes it.

        Args:
            data: Raw message
            worker: Target (default: active worker, else the waiting one)

        Returns:
            Reply dict or None
        """
        target = worker or self.active or self.waiting
        if target is None or id(target) not in self._dispatchers:
            return None

        reply = await self._dispatcher(target).dispatch(MessageEvent(data))
        if target is self.waiting and target.lifecycle.skip_waiting_requested:
            await self._promote()
        return reply

    async def drain(self) -> None:
        """Wait for background work of every live worker."""
        for dispatcher in list(self._dispatchers.values()):
            await dispatcher.worker.drain()

    async def close(self) -> None:
        """Stop every dispatcher and close the workers' fetchers."""
        for dispatcher in list(self._dispatchers.values()):
            await dispatcher.stop()
            await dispatcher.worker.close()
        self._dispatchers.clear()

    def __repr__(self) -> str:
        def version(worker: Optional[OfflineCacheWorker]) -> Optional[str]:
            return worker.version if worker is not None else None

        return (
            f"WorkerRegistration(installing={version(self.installing)!r}, "
            f"waiting={version(self.waiting)!r}, active={version(self.active)!r})"
        )


__all__ = ["WorkerRegistration"]
