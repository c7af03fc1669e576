"""ShelfCache FIFO Trimmer - Oldest-Inserted-First Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from shelfcache_core.cache.namespace import Namespace
from shelfcache_core.eviction.policy import Trimmer

logger = logging.getLogger(__name__)


class FIFOTrimmer(Trimmer):
    """Trims a namespace by deleting its oldest-inserted entries.

    The key snapshot is read once. Only keys present in that snapshot are
    candidates, so an entry written by a concurrent task after the
    snapshot can never be evicted by this pass. When a protected key is
    given, only entries inserted before it are candidates; concurrent
    writers each trim their own older entries. Insertion order, not
    access order, decides what goes.

    Example:
        trimmer = FIFOTrimmer()
        await trimmer.trim(images, max_entries=120, protect=key)
    """

    async def trim(
        self,
        namespace: Namespace,
        max_entries: int,
        protect: Optional[str] = None,
    ) -> List[str]:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self._stats.trims += 1
        snapshot = await namespace.keys()
        excess = len(snapshot) - max_entries
        if excess <= 0:
            self._stats.skipped += 1
            return []

        if protect is not None and protect in snapshot:
            snapshot = snapshot[:snapshot.index(protect)]
        victims = snapshot[:excess]
        deleted = []
        for key in victims:
            if await namespace.delete(key):
                deleted.append(key)

        self._stats.evictions += len(deleted)
        if deleted:
            logger.debug(f"Trimmed {len(deleted)} entries from {namespace.name}")
        return deleted

    def __repr__(self) -> str:
        return f"FIFOTrimmer(evictions={self._stats.evictions})"


__all__ = ["FIFOTrimmer"]
