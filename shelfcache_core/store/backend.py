"""ShelfCache Storage Backend - Abstract Namespaced Store Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from shelfcache_core.cache.entry import CacheEntry

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Storage backend configuration.

    Attributes:
        name: Backend name (memory, file, redis)
        max_entries: Quota on entries across all namespaces
        max_bytes: Quota on payload bytes across all namespaces
        serializer: Serializer used by persistent backends
        compression: Compress serialized entries
    """

    name: str = "memory"
    max_entries: Optional[int] = None
    max_bytes: Optional[int] = None
    serializer: str = "msgpack"
    compression: bool = False


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        namespaces_deleted: Number of namespaces dropped
        errors: Number of errors
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    namespaces_deleted: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class StorageBackend(ABC):
    """Abstract key-value store partitioned into namespaces.

    Each namespace is an isolated mapping of cache key to CacheEntry whose
    key enumeration is in insertion order. Overwriting a key moves it to
    the newest position. Individual get/put/delete calls are atomic; no
    multi-key transactions are offered.

    Implementations:
    - MemoryStore: In-process ordered dictionaries
    - FileStore: Directory per namespace with an ordered index
    - RedisStore: Redis strings plus a sorted set per namespace
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    async def get(self, namespace: str, key: str) -> Optional[CacheEntry]:
        """Get entry by key.

        Args:
            namespace: Namespace name
            key: Cache key

        Returns:
            CacheEntry or None on a miss
        """
        pass

    @abstractmethod
    async def put(self, namespace: str, key: str, entry: CacheEntry) -> None:
        """Store entry, creating the namespace if needed.

        Args:
            namespace: Namespace name
            key: Cache key
            entry: Cache entry

        Raises:
            StoreWriteError: If the entry could not be persisted
        """
        pass

    @abstractmethod
    async def delete(self, namespace: str, key: str) -> bool:
        """Delete entry.

        Args:
            namespace: Namespace name
            key: Cache key

        Returns:
            True if deleted
        """
        pass

    @abstractmethod
    async def keys(self, namespace: str) -> List[str]:
        """Get keys in insertion order (oldest first).

        Args:
            namespace: Namespace name

        Returns:
            List of keys; empty for an unknown namespace
        """
        pass

    @abstractmethod
    async def delete_namespace(self, namespace: str) -> bool:
        """Drop a namespace and all its entries.

        Args:
            namespace: Namespace name

        Returns:
            True if it existed
        """
        pass

    @abstractmethod
    async def list_namespaces(self) -> List[str]:
        """List namespace names in creation order.

        Returns:
            Namespace names
        """
        pass

    async def has_namespace(self, namespace: str) -> bool:
        """Check if a namespace exists."""
        return namespace in await self.list_namespaces()

    async def count(self, namespace: str) -> int:
        """Get entry count of a namespace."""
        return len(await self.keys(namespace))

    async def close(self) -> None:
        """Release backend resources."""

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = StorageStats()


__all__ = ["StorageBackend", "StorageConfig", "StorageStats"]
