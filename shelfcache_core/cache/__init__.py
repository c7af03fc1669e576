"""Cache module - Entries, expiry stamps and versioned namespaces."""

from shelfcache_core.cache.entry import (
    CacheEntry,
    EntryMetadata,
)
from shelfcache_core.cache.expiry import (
    ExpiryCodec,
    STORED_AT_HEADER,
    FETCHED_AT_HEADER,
    INTERNAL_HEADERS,
)
from shelfcache_core.cache.namespace import (
    CacheNamespace,
    Namespace,
    NamespaceRole,
    NamespaceTable,
    PERSISTENT_ROLES,
)
from shelfcache_core.cache.storage import CacheStorage

__all__ = [
    "CacheEntry",
    "EntryMetadata",
    "ExpiryCodec",
    "STORED_AT_HEADER",
    "FETCHED_AT_HEADER",
    "INTERNAL_HEADERS",
    "CacheNamespace",
    "Namespace",
    "NamespaceRole",
    "NamespaceTable",
    "PERSISTENT_ROLES",
    "CacheStorage",
]
