"""Strategies module - Caching disciplines behind a uniform resolve contract."""

from shelfcache_core.strategies.base import Strategy, StrategyContext
from shelfcache_core.strategies.race import RaceResult, RaceStatus, first_of
from shelfcache_core.strategies.fallbacks import (
    offline_response,
    service_unavailable_response,
)
from shelfcache_core.strategies.network_first import (
    NavigationStrategy,
    NetworkFirstStrategy,
)
from shelfcache_core.strategies.stale_while_revalidate import StaleWhileRevalidateStrategy
from shelfcache_core.strategies.cache_first import CacheFirstStrategy
from shelfcache_core.strategies.network_first_ttl import NetworkFirstTTLStrategy
from shelfcache_core.strategies.passthrough import (
    CacheThenNetworkStrategy,
    NetworkOnlyStrategy,
)

__all__ = [
    "Strategy",
    "StrategyContext",
    "RaceResult",
    "RaceStatus",
    "first_of",
    "offline_response",
    "service_unavailable_response",
    "NavigationStrategy",
    "NetworkFirstStrategy",
    "StaleWhileRevalidateStrategy",
    "CacheFirstStrategy",
    "NetworkFirstTTLStrategy",
    "CacheThenNetworkStrategy",
    "NetworkOnlyStrategy",
]
