"""ShelfCache Race - First-of(Operation, Deadline) Combinator.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Awaitable, Generic, Optional, TypeVar

T = TypeVar("T")


class RaceStatus(Enum):
    """How a raced operation ended relative to its deadline."""

    COMPLETED = auto()   # Finished with a value before the deadline
    FAILED = auto()      # Raised before the deadline
    TIMED_OUT = auto()   # Still running at the deadline


@dataclass
class RaceResult(Generic[T]):
    """Tagged result of first_of.

    Attributes:
        status: Race outcome
        value: Result when COMPLETED
        error: Exception when FAILED
        task: The underlying task; still running when TIMED_OUT
    """

    status: RaceStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None
    task: Optional["asyncio.Future[Any]"] = None

    @property
    def completed(self) -> bool:
        return self.status == RaceStatus.COMPLETED

    @property
    def failed(self) -> bool:
        return self.status == RaceStatus.FAILED

    @property
    def timed_out(self) -> bool:
        return self.status == RaceStatus.TIMED_OUT


async def first_of(operation: Awaitable[T], timeout: float) -> RaceResult[T]:
    """Race an operation against a deadline.

    The operation is not cancelled when the deadline wins; the caller
    receives its task and decides whether to abandon it or let it keep
    running for a side effect.

    Args:
        operation: Awaitable to run
        timeout: Deadline in seconds

    Returns:
        RaceResult tagged COMPLETED, FAILED or TIMED_OUT
    """
    task = asyncio.ensure_future(operation)
    done, _ = await asyncio.wait({task}, timeout=timeout)

    if not done:
        return RaceResult(RaceStatus.TIMED_OUT, task=task)
    if task.cancelled():
        return RaceResult(RaceStatus.FAILED, error=asyncio.CancelledError(), task=task)

    error = task.exception()
    if error is not None:
        return RaceResult(RaceStatus.FAILED, error=error, task=task)
    return RaceResult(RaceStatus.COMPLETED, value=task.result(), task=task)


__all__ = ["RaceResult", "RaceStatus", "first_of"]
