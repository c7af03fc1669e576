"""ShelfCache Clock - Injectable Time Source.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Wall-clock time source used for cache stamps and TTL checks."""

    @abstractmethod
    def now(self) -> float:
        """Get current Unix time in seconds."""
        pass

    def now_ms(self) -> int:
        """Get current Unix time in milliseconds."""
        return int(self.now() * 1000)


class SystemClock(Clock):
    """Clock reading the system time."""

    def now(self) -> float:
        return time.time()

    def __repr__(self) -> str:
        return "SystemClock()"


__all__ = ["Clock", "SystemClock"]
