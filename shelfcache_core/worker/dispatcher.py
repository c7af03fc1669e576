"""ShelfCache Dispatcher - Event Reactor for One Worker.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, ClassVar, Optional, Tuple, Union

from shelfcache_core.http.message import Request, Response
from shelfcache_core.worker.preload import NavigationPreload

if TYPE_CHECKING:
    from shelfcache_core.worker.service import OfflineCacheWorker

logger = logging.getLogger(__name__)


@dataclass
class InstallEvent:
    blocking: ClassVar[bool] = True


@dataclass
class ActivateEvent:
    navigation_preload: Optional[NavigationPreload] = None
    blocking: ClassVar[bool] = True


@dataclass
class FetchEvent:
    request: Request
    preload: Optional[Awaitable[Optional[Response]]] = None
    blocking: ClassVar[bool] = False


@dataclass
class MessageEvent:
    data: Any
    blocking: ClassVar[bool] = False


WorkerEvent = Union[InstallEvent, ActivateEvent, FetchEvent, MessageEvent]


@dataclass
class DispatcherStats:
    """Dispatcher statistics."""

    dispatched: int = 0
    completed: int = 0
    failed: int = 0


class EventDispatcher:
    """Single-consumer event loop in front of a worker.

    Events are taken off a queue one at a time. Install and activate
    events are handled inline, so nothing behind them runs until the
    state transition is done. Fetch and message events are spawned as
    tracked tasks on the worker, so a slow request never blocks the
    queue and its background work can outlive the handler.

    Example:
        dispatcher = EventDispatcher(worker)
        dispatcher.start()
        await dispatcher.dispatch(InstallEvent())
        response = await dispatcher.dispatch(FetchEvent(request))
        await dispatcher.stop()
    """

    def __init__(self, worker: "OfflineCacheWorker"):
        """Initialize dispatcher.

        Args:
            worker: Worker whose handlers receive the events
        """
        self.worker = worker
        self._queue: "asyncio.Queue[Optional[Tuple[WorkerEvent, asyncio.Future]]]" = asyncio.Queue()
        self._runner: Optional[asyncio.Task] = None
        self._stats = DispatcherStats()

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    def start(self) -> None:
        """Start the reactor task."""
        if self.running:
            return
        self._runner = asyncio.ensure_future(self._run())
        self._runner.set_name(f"dispatcher {self.worker.version}")

    async def dispatch(self, event: WorkerEvent) -> Any:
        """Queue an event and wait for its handler's result.

        Args:
            event: Event to deliver

        Returns:
            Handler result (PrecacheStats, swept names, Response or reply)

        Raises:
            RuntimeError: If the dispatcher is not running
            Exception: Whatever the handler raised
        """
        if not self.running:
            raise RuntimeError(f"Dispatcher for {self.worker.version} is not running")

        future = asyncio.get_running_loop().create_future()
        self._stats.dispatched += 1
        await self._queue.put((event, future))
        return await future

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if item is None:
                    return
                event, future = item
                if event.blocking:
                    await self._handle(event, future)
                else:
                    self.worker.tasks.spawn(
                        self._handle(event, future),
                        name=f"{type(event).__name__} {self.worker.version}",
                    )
            finally:
                self._queue.task_done()

    async def _handle(self, event: WorkerEvent, future: asyncio.Future) -> None:
        try:
            result = await self._invoke(event)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            self._stats.failed += 1
            if not future.done():
                future.set_exception(e)
        else:
            self._stats.completed += 1
            if not future.done():
                future.set_result(result)

    async def _invoke(self, event: WorkerEvent) -> Any:
        if isinstance(event, FetchEvent):
            return await self.worker.handle_fetch(event.request, event.preload)
        if isinstance(event, MessageEvent):
            return await self.worker.handle_message(event.data)
        if isinstance(event, InstallEvent):
            return await self.worker.install()
        if isinstance(event, ActivateEvent):
            return await self.worker.activate(event.navigation_preload)
        raise TypeError(f"Unknown event: {event!r}")

    async def stop(self, drain: bool = True) -> None:
        """Stop the reactor after the events already queued.

        Args:
            drain: Also wait for spawned handlers and background work
        """
        if self.running:
            await self._queue.put(None)
            await self._runner
        self._runner = None
        if drain:
            await self.worker.drain()

    def get_stats(self) -> DispatcherStats:
        return self._stats

    def __repr__(self) -> str:
        return f"EventDispatcher(version={self.worker.version!r}, running={self.running})"


__all__ = [
    "ActivateEvent",
    "DispatcherStats",
    "EventDispatcher",
    "FetchEvent",
    "InstallEvent",
    "MessageEvent",
    "WorkerEvent",
]
