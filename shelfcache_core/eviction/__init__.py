"""Eviction module - Entry-count bounds for cache namespaces."""

from shelfcache_core.eviction.policy import (
    EvictionPolicy,
    EvictionStats,
    Trimmer,
)
from shelfcache_core.eviction.fifo import FIFOTrimmer

__all__ = [
    "EvictionPolicy",
    "EvictionStats",
    "Trimmer",
    "FIFOTrimmer",
]
