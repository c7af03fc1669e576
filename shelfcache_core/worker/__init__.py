"""Worker module - Lifecycle, service object and registration."""

from shelfcache_core.worker.config import DAY, HOUR, PRECACHE_URLS, WorkerConfig
from shelfcache_core.worker.lifecycle import (
    ALLOWED_TRANSITIONS,
    LifecycleController,
    LifecycleState,
)
from shelfcache_core.worker.messages import (
    ControlMessage,
    MessageType,
    ReplyType,
    parse_message,
)
from shelfcache_core.worker.precache import Precacher, PrecacheStats
from shelfcache_core.worker.preload import NavigationPreload
from shelfcache_core.worker.service import OfflineCacheWorker
from shelfcache_core.worker.dispatcher import (
    ActivateEvent,
    EventDispatcher,
    FetchEvent,
    InstallEvent,
    MessageEvent,
)
from shelfcache_core.worker.registration import WorkerRegistration

__all__ = [
    "DAY",
    "HOUR",
    "PRECACHE_URLS",
    "WorkerConfig",
    "ALLOWED_TRANSITIONS",
    "LifecycleController",
    "LifecycleState",
    "ControlMessage",
    "MessageType",
    "ReplyType",
    "parse_message",
    "Precacher",
    "PrecacheStats",
    "NavigationPreload",
    "OfflineCacheWorker",
    "ActivateEvent",
    "EventDispatcher",
    "FetchEvent",
    "InstallEvent",
    "MessageEvent",
    "WorkerRegistration",
]
