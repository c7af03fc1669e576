"""ShelfCache Namespace - Versioned Cache Partitions.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, TYPE_CHECKING

from shelfcache_core.cache.entry import CacheEntry

if TYPE_CHECKING:
    from shelfcache_core.store.backend import StorageBackend

logger = logging.getLogger(__name__)


class NamespaceRole(str, Enum):
    """Logical roles a cache namespace can play."""

    SHELL = "shell"
    PAGES = "pages"
    ASSETS = "assets"
    IMAGES = "images"
    API = "api-runtime"


# Roles whose namespaces survive version upgrades
PERSISTENT_ROLES = frozenset({NamespaceRole.IMAGES, NamespaceRole.API})


@dataclass(frozen=True)
class CacheNamespace:
    """Identity of one cache partition.

    Attributes:
        role: Logical role
        version: Version tag (None for persistent roles)
        name: Store-level name
    """

    role: NamespaceRole
    version: Optional[str]
    name: str

    @property
    def persistent(self) -> bool:
        return self.role in PERSISTENT_ROLES

    def __str__(self) -> str:
        return self.name


class NamespaceTable:
    """Name table for one cache version.

    Version-bound roles are named ``<prefix>-<role>-<version>``;
    persistent roles use fixed literal names. The table tells the
    activation sweep which existing names are ours and current, ours
    but superseded, or not ours at all.

    Example:
        table = NamespaceTable("bse", "v7")
        table.name_for(NamespaceRole.SHELL)   # "bse-shell-v7"
        table.name_for(NamespaceRole.IMAGES)  # "bse-img"
    """

    DEFAULT_PERSISTENT_NAMES = {
        NamespaceRole.IMAGES: "img",
        NamespaceRole.API: "api-runtime",
    }

    def __init__(
        self,
        prefix: str,
        version: str,
        persistent_names: Optional[Dict[NamespaceRole, str]] = None,
    ):
        """Initialize table.

        Args:
            prefix: Application prefix shared by every namespace we own
            version: Current version tag
            persistent_names: Override suffixes for persistent roles
        """
        self.prefix = prefix
        self.version = version
        suffixes = dict(self.DEFAULT_PERSISTENT_NAMES)
        suffixes.update(persistent_names or {})

        self._namespaces: Dict[NamespaceRole, CacheNamespace] = {}
        for role in NamespaceRole:
            if role in PERSISTENT_ROLES:
                name = f"{prefix}-{suffixes[role]}"
                self._namespaces[role] = CacheNamespace(role, None, name)
            else:
                name = f"{prefix}-{role.value}-{version}"
                self._namespaces[role] = CacheNamespace(role, version, name)

    def get(self, role: NamespaceRole) -> CacheNamespace:
        return self._namespaces[role]

    def name_for(self, role: NamespaceRole) -> str:
        """Get the store-level name for a role."""
        return self._namespaces[role].name

    def valid_names(self) -> Set[str]:
        """Names that are current for this version."""
        return {ns.name for ns in self._namespaces.values()}

    def lookup_order(self) -> List[str]:
        """Names in the order a cross-namespace match searches them."""
        order = [NamespaceRole.PAGES, NamespaceRole.SHELL, NamespaceRole.ASSETS,
                 NamespaceRole.IMAGES, NamespaceRole.API]
        return [self.name_for(role) for role in order]

    def is_owned(self, name: str) -> bool:
        """Check if a name belongs to this application."""
        return name.startswith(f"{self.prefix}-")

    def superseded(self, names: Iterable[str]) -> List[str]:
        """Select names that are ours but not valid for this version.

        Args:
            names: Existing namespace names

        Returns:
            Names to delete
        """
        valid = self.valid_names()
        return [name for name in names if self.is_owned(name) and name not in valid]

    def __iter__(self):
        return iter(self._namespaces.values())

    def __repr__(self) -> str:
        return f"NamespaceTable(prefix={self.prefix!r}, version={self.version!r})"


@dataclass
class NamespaceStats:
    """Statistics for a namespace handle."""

    name: str
    hits: int = 0
    misses: int = 0
    writes: int = 0
    deletes: int = 0
    created_at: Optional[datetime] = field(default_factory=datetime.now)

    @property
    def hit_rate(self) -> float:
        """Get hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class Namespace:
    """Handle bound to one namespace of a storage backend.

    The namespace itself is created lazily by the backend on first write.
    """

    def __init__(self, store: "StorageBackend", name: str):
        """Initialize namespace handle.

        Args:
            store: Storage backend
            name: Namespace name
        """
        self._store = store
        self.name = name
        self._stats = NamespaceStats(name=name)

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get entry, or None on a miss."""
        entry = await self._store.get(self.name, key)
        if entry is None:
            self._stats.misses += 1
        else:
            self._stats.hits += 1
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store entry.

        Raises:
            StoreWriteError: If the backend could not persist it
        """
        await self._store.put(self.name, key, entry)
        self._stats.writes += 1

    async def delete(self, key: str) -> bool:
        deleted = await self._store.delete(self.name, key)
        if deleted:
            self._stats.deletes += 1
        return deleted

    async def keys(self) -> List[str]:
        """Keys oldest-first."""
        return await self._store.keys(self.name)

    async def size(self) -> int:
        return await self._store.count(self.name)

    def get_stats(self) -> NamespaceStats:
        return self._stats

    def __repr__(self) -> str:
        return f"Namespace(name={self.name!r})"


__all__ = [
    "CacheNamespace",
    "Namespace",
    "NamespaceRole",
    "NamespaceStats",
    "NamespaceTable",
    "PERSISTENT_ROLES",
]
