"""ShelfCache Memory Store - In-Memory Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.errors import StoreWriteError
from shelfcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)


class MemoryStore(StorageBackend):
    """In-memory storage backend.

    Keeps one OrderedDict per namespace. Every method body runs without
    suspending, so each call is atomic with respect to other tasks on
    the event loop.

    Features:
    - O(1) get/put/delete operations
    - Insertion-ordered key enumeration
    - Optional entry and byte quotas

    Example:
        store = MemoryStore(StorageConfig(max_entries=10000))
        await store.put("bse-pages-v7", "GET /", entry)
        entry = await store.get("bse-pages-v7", "GET /")
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize memory store.

        Args:
            config: Storage configuration
        """
        super().__init__(config)
        self._data: Dict[str, "OrderedDict[str, CacheEntry]"] = {}

    async def get(self, namespace: str, key: str) -> Optional[CacheEntry]:
        self._stats.reads += 1
        bucket = self._data.get(namespace)
        if bucket is None:
            return None
        return bucket.get(key)

    async def put(self, namespace: str, key: str, entry: CacheEntry) -> None:
        bucket = self._data.get(namespace)
        replacing = bucket is not None and key in bucket

        # Check quotas
        if self.config.max_entries and not replacing:
            if self._total_entries() >= self.config.max_entries:
                self._stats.record_error("entry quota exceeded")
                raise StoreWriteError(namespace, key, "entry quota exceeded")

        if self.config.max_bytes:
            current = self.memory_usage()
            if replacing:
                current -= bucket[key].metadata.size_bytes
            if current + entry.metadata.size_bytes > self.config.max_bytes:
                self._stats.record_error("byte quota exceeded")
                raise StoreWriteError(namespace, key, "byte quota exceeded")

        if bucket is None:
            bucket = self._data.setdefault(namespace, OrderedDict())
        elif replacing:
            # Overwrite counts as a fresh insertion
            del bucket[key]

        entry.namespace = namespace
        bucket[key] = entry
        self._stats.writes += 1

    async def delete(self, namespace: str, key: str) -> bool:
        bucket = self._data.get(namespace)
        if bucket is None or key not in bucket:
            return False
        del bucket[key]
        self._stats.deletes += 1
        return True

    async def keys(self, namespace: str) -> List[str]:
        bucket = self._data.get(namespace)
        if bucket is None:
            return []
        return list(bucket.keys())

    async def delete_namespace(self, namespace: str) -> bool:
        if self._data.pop(namespace, None) is None:
            return False
        self._stats.namespaces_deleted += 1
        return True

    async def list_namespaces(self) -> List[str]:
        return list(self._data.keys())

    def _total_entries(self) -> int:
        return sum(len(bucket) for bucket in self._data.values())

    def memory_usage(self) -> int:
        """Get total payload bytes held.

        Returns:
            Size in bytes
        """
        return sum(
            entry.metadata.size_bytes
            for bucket in self._data.values()
            for entry in bucket.values()
        )

    def __repr__(self) -> str:
        return f"MemoryStore(namespaces={len(self._data)}, entries={self._total_entries()})"


__all__ = ["MemoryStore"]
