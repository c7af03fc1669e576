"""ShelfCache - Offline Resource Cache Manager.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

An offline-first cache manager that sits between an application and the
network:
- Request classification into strategy classes
- Per-class strategies (network-first with timeout, stale-while-revalidate,
  cache-first with TTL, network-first with TTL fallback, network-only)
- Versioned namespaces with persistent image and API tiers
- FIFO entry-count trimming after writes
- All-or-nothing precache of the application shell
- Install / activate / supersede lifecycle with control messages
- Multiple storage backends (memory, file, Redis)

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        ShelfCache System                        │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │Registration │  │ Dispatcher  │  │  Lifecycle  │   WORKER    │
    │  │ wait/active │  │ event queue │  │ install/act │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │         Classifier + Strategy Executors        │             │
    │  │  ┌─────┐  ┌─────┐  ┌─────┐  ┌─────┐  ┌─────┐  │  STRATEGY   │
    │  │  │ NF  │  │ SWR │  │ CF  │  │ TTL │  │ NO  │  │  LAYER      │
    │  │  └─────┘  └─────┘  └─────┘  └─────┘  └─────┘  │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │     Namespaces + Expiry Codec + FIFO Trimmer   │   CACHE     │
    │  └──────────────────────┬────────────────────────┘   LAYER     │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │              Storage Backends                  │             │
    │  │   ┌────────┐  ┌────────┐  ┌────────┐         │   STORAGE   │
    │  │   │ Memory │  │  File  │  │ Redis  │         │   LAYER     │
    │  │   └────────┘  └────────┘  └────────┘         │             │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from shelfcache_core import (
        NavigationPreload, OfflineCacheWorker, Request, WorkerConfig,
        WorkerRegistration,
    )

    registration = WorkerRegistration(NavigationPreload())
    await registration.register(OfflineCacheWorker(WorkerConfig(version="v7")))

    response = await registration.fetch(
        Request("http://localhost:8000/pages/reader.html", mode="navigate")
    )
    reply = await registration.post_message("GET_VERSION")

    # Persistent storage across restarts
    from shelfcache_core import FileConfig, create_store

    store = create_store(FileConfig(base_path="/var/cache/shelf"))
    worker = OfflineCacheWorker(WorkerConfig(version="v8"), store=store)
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from shelfcache_core.errors import (
    InstallError,
    InvalidTransition,
    PreloadUnsupported,
    NetworkUnavailable,
    ShelfCacheError,
    StoreWriteError,
)
from shelfcache_core.clock import Clock, SystemClock
from shelfcache_core.http.message import (
    Request,
    RequestMode,
    Response,
    ResponseType,
)
from shelfcache_core.http.fetcher import Fetcher, HttpxFetcher
from shelfcache_core.cache.entry import CacheEntry, EntryMetadata
from shelfcache_core.cache.expiry import (
    ExpiryCodec,
    FETCHED_AT_HEADER,
    STORED_AT_HEADER,
)
from shelfcache_core.cache.namespace import (
    CacheNamespace,
    Namespace,
    NamespaceRole,
    NamespaceTable,
)
from shelfcache_core.cache.storage import CacheStorage
from shelfcache_core.store.backend import (
    StorageBackend,
    StorageConfig,
    StorageStats,
)
from shelfcache_core.store.memory import MemoryStore
from shelfcache_core.store.file import FileConfig, FileStore
from shelfcache_core.store.redis import RedisConfig, RedisStore
from shelfcache_core.store import create_store
from shelfcache_core.eviction.policy import (
    EvictionPolicy,
    EvictionStats,
    Trimmer,
)
from shelfcache_core.eviction.fifo import FIFOTrimmer
from shelfcache_core.routing.classifier import (
    ClassifierRules,
    RequestClassifier,
    StrategyClass,
)
from shelfcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
)
from shelfcache_core.metrics.collector import (
    CacheMetrics,
    MetricsCollector,
    Outcome,
)
from shelfcache_core.worker.config import WorkerConfig
from shelfcache_core.worker.lifecycle import LifecycleController, LifecycleState
from shelfcache_core.worker.preload import NavigationPreload
from shelfcache_core.worker.service import OfflineCacheWorker
from shelfcache_core.worker.dispatcher import EventDispatcher
from shelfcache_core.worker.registration import WorkerRegistration

__all__ = [
    # Errors
    "ShelfCacheError",
    "NetworkUnavailable",
    "StoreWriteError",
    "InstallError",
    "InvalidTransition",
    "PreloadUnsupported",
    # HTTP
    "Clock",
    "SystemClock",
    "Request",
    "RequestMode",
    "Response",
    "ResponseType",
    "Fetcher",
    "HttpxFetcher",
    # Cache
    "CacheEntry",
    "EntryMetadata",
    "ExpiryCodec",
    "STORED_AT_HEADER",
    "FETCHED_AT_HEADER",
    "CacheNamespace",
    "Namespace",
    "NamespaceRole",
    "NamespaceTable",
    "CacheStorage",
    # Storage
    "StorageBackend",
    "StorageConfig",
    "StorageStats",
    "MemoryStore",
    "FileStore",
    "FileConfig",
    "RedisStore",
    "RedisConfig",
    "create_store",
    # Eviction
    "EvictionPolicy",
    "EvictionStats",
    "Trimmer",
    "FIFOTrimmer",
    # Routing
    "ClassifierRules",
    "RequestClassifier",
    "StrategyClass",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    # Metrics
    "CacheMetrics",
    "MetricsCollector",
    "Outcome",
    # Worker
    "WorkerConfig",
    "LifecycleController",
    "LifecycleState",
    "NavigationPreload",
    "OfflineCacheWorker",
    "EventDispatcher",
    "WorkerRegistration",
]
