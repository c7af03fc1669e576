"""ShelfCache Storage - Namespaced Cache Facade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.cache.namespace import Namespace
from shelfcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)


class CacheStorage:
    """Entry point to all cache namespaces over one storage backend.

    Features:
    - Lazily opened namespace handles
    - Cross-namespace matching in a caller-chosen order
    - Namespace enumeration and deletion

    Example:
        storage = CacheStorage(MemoryStore())
        pages = storage.open("bse-pages-v7")
        await pages.put(key, entry)
        hit = await storage.match(key, ["bse-pages-v7", "bse-shell-v7"])
    """

    def __init__(self, store: StorageBackend):
        """Initialize storage.

        Args:
            store: Storage backend
        """
        self.store = store
        self._handles: Dict[str, Namespace] = {}

    def open(self, name: str) -> Namespace:
        """Get a handle for a namespace (created on first write).

        Args:
            name: Namespace name

        Returns:
            Namespace handle
        """
        handle = self._handles.get(name)
        if handle is None:
            handle = Namespace(self.store, name)
            self._handles[name] = handle
        return handle

    async def match(
        self,
        key: str,
        names: Optional[Iterable[str]] = None,
    ) -> Optional[CacheEntry]:
        """Find the first entry for a key across namespaces.

        Args:
            key: Cache key
            names: Namespaces to search in order (default: all, creation order)

        Returns:
            First matching entry or None
        """
        found = await self.match_with_namespace(key, names)
        return found[1] if found else None

    async def match_with_namespace(
        self,
        key: str,
        names: Optional[Iterable[str]] = None,
    ) -> Optional[Tuple[str, CacheEntry]]:
        """Like match, but also report which namespace held the entry."""
        if names is None:
            names = await self.store.list_namespaces()

        for name in names:
            entry = await self.store.get(name, key)
            if entry is not None:
                return name, entry
        return None

    async def names(self) -> List[str]:
        """List existing namespace names."""
        return await self.store.list_namespaces()

    async def delete(self, name: str) -> bool:
        """Delete a namespace and every entry in it.

        Args:
            name: Namespace name

        Returns:
            True if it existed
        """
        self._handles.pop(name, None)
        deleted = await self.store.delete_namespace(name)
        if deleted:
            logger.info(f"Deleted cache namespace {name}")
        return deleted

    def __repr__(self) -> str:
        return f"CacheStorage(store={self.store!r})"


__all__ = ["CacheStorage"]
