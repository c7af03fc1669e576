"""Metrics module - Strategy outcome metrics."""

from shelfcache_core.metrics.collector import (
    CacheMetrics,
    MetricsCollector,
    Outcome,
)

__all__ = [
    "CacheMetrics",
    "MetricsCollector",
    "Outcome",
]
