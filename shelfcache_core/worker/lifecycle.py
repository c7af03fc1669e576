"""ShelfCache Lifecycle - Version State Machine.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from shelfcache_core.clock import Clock, SystemClock
from shelfcache_core.errors import InvalidTransition

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """States of one cache manager version."""

    NEW = "new"
    INSTALLING = "installing"
    WAITING = "waiting"
    ACTIVE = "active"
    SUPERSEDED = "superseded"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Dict[LifecycleState, FrozenSet[LifecycleState]] = {
    LifecycleState.NEW: frozenset({LifecycleState.INSTALLING}),
    LifecycleState.INSTALLING: frozenset({LifecycleState.WAITING, LifecycleState.FAILED}),
    # A waiting version can be replaced by a newer one before it ever activates
    LifecycleState.WAITING: frozenset({LifecycleState.ACTIVE, LifecycleState.SUPERSEDED}),
    LifecycleState.ACTIVE: frozenset({LifecycleState.SUPERSEDED}),
    LifecycleState.SUPERSEDED: frozenset(),
    LifecycleState.FAILED: frozenset(),
}

StateListener = Callable[[LifecycleState, LifecycleState], None]


class LifecycleController:
    """Tracks the lifecycle state of one version.

    Transitions are validated against ALLOWED_TRANSITIONS; every change
    is timestamped and reported to listeners.

    Example:
        lifecycle = LifecycleController("v7")
        lifecycle.transition(LifecycleState.INSTALLING)
        lifecycle.transition(LifecycleState.WAITING)
        lifecycle.request_skip_waiting()
    """

    def __init__(self, version: str, clock: Optional[Clock] = None):
        """Initialize controller.

        Args:
            version: Version tag this controller tracks
            clock: Time source for the transition history
        """
        self.version = version
        self._clock = clock or SystemClock()
        self._state = LifecycleState.NEW
        self._skip_waiting = False
        self._history: List[Tuple[LifecycleState, float]] = [(self._state, self._clock.now())]
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def skip_waiting_requested(self) -> bool:
        return self._skip_waiting

    @property
    def is_active(self) -> bool:
        return self._state == LifecycleState.ACTIVE

    @property
    def is_waiting(self) -> bool:
        return self._state == LifecycleState.WAITING

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return not ALLOWED_TRANSITIONS[self._state]

    def can_transition(self, target: LifecycleState) -> bool:
        return target in ALLOWED_TRANSITIONS[self._state]

    def transition(self, target: LifecycleState) -> None:
        """Move to a new state.

        Args:
            target: State to enter

        Raises:
            InvalidTransition: If target is not reachable from the current state
        """
        if not self.can_transition(target):
            raise InvalidTransition(self.version, self._state.value, target.value)

        previous = self._state
        self._state = target
        self._history.append((target, self._clock.now()))
        logger.info(f"Worker {self.version}: {previous.value} -> {target.value}")

        for listener in list(self._listeners):
            try:
                listener(previous, target)
            except Exception as e:
                logger.error(f"Lifecycle listener failed: {e}")

    def request_skip_waiting(self) -> None:
        """Ask to be promoted as soon as installation has completed."""
        if not self._skip_waiting:
            logger.debug(f"Worker {self.version}: skip waiting requested")
        self._skip_waiting = True

    def add_listener(self, listener: StateListener) -> None:
        """Subscribe to state changes.

        Args:
            listener: Called with (previous, current)
        """
        self._listeners.append(listener)

    def history(self) -> List[Tuple[LifecycleState, float]]:
        """States entered so far with their timestamps, oldest first."""
        return list(self._history)

    def __repr__(self) -> str:
        return f"LifecycleController(version={self.version!r}, state={self._state.value})"


__all__ = [
    "ALLOWED_TRANSITIONS",
    "LifecycleController",
    "LifecycleState",
]
