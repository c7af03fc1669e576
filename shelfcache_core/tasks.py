"""ShelfCache Tasks - Background Task Tracking.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackgroundTasks:
    """Keeps references to fire-and-forget tasks until they finish.

    Work such as stale-while-revalidate refreshes outlives the handler
    that started it. Tracking the tasks keeps them from being garbage
    collected mid-flight, surfaces their errors in the log and lets
    callers wait for quiescence.

    Example:
        tasks = BackgroundTasks()
        tasks.spawn(refresh(request), name="refresh")
        await tasks.drain()
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable[T], name: Optional[str] = None) -> "asyncio.Task[T]":
        """Schedule a coroutine as a tracked task.

        Args:
            coro: Coroutine to run
            name: Task name for debugging

        Returns:
            The scheduled task
        """
        task = asyncio.ensure_future(coro)
        if name:
            task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background task {task.get_name()} failed: {error!r}")

    async def drain(self) -> None:
        """Wait until every tracked task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"BackgroundTasks(pending={len(self._tasks)})"


__all__ = ["BackgroundTasks"]
