"""ShelfCache Eviction Policy - Per-Namespace Entry Bounds.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from shelfcache_core.cache.namespace import Namespace


@dataclass(frozen=True)
class EvictionPolicy:
    """Bound on a namespace's entry count.

    Attributes:
        max_entries: Maximum entries kept after a trim
        strategy: Eviction order; only insertion-order FIFO is supported
    """

    max_entries: int
    strategy: str = "fifo"

    def __post_init__(self):
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if self.strategy != "fifo":
            raise ValueError(f"Unsupported eviction strategy: {self.strategy}")


@dataclass
class EvictionStats:
    """Trimmer statistics.

    Attributes:
        trims: Trim passes run
        evictions: Entries deleted
        skipped: Passes that found the namespace within bounds
    """

    trims: int = 0
    evictions: int = 0
    skipped: int = 0


class Trimmer(ABC):
    """Abstract namespace trimmer.

    A trimmer enforces an EvictionPolicy on a namespace after a write.
    """

    def __init__(self):
        self._stats = EvictionStats()

    @abstractmethod
    async def trim(
        self,
        namespace: Namespace,
        max_entries: int,
        protect: Optional[str] = None,
    ) -> List[str]:
        """Delete entries until the namespace is within bounds.

        Args:
            namespace: Namespace handle
            max_entries: Entry bound
            protect: Key that must never be deleted (the entry just written)

        Returns:
            Keys deleted
        """
        pass

    async def enforce(
        self,
        namespace: Namespace,
        policy: EvictionPolicy,
        protect: Optional[str] = None,
    ) -> List[str]:
        """Trim a namespace to its policy bound."""
        return await self.trim(namespace, policy.max_entries, protect=protect)

    def get_stats(self) -> EvictionStats:
        return self._stats


__all__ = ["EvictionPolicy", "EvictionStats", "Trimmer"]
