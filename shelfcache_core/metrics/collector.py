"""ShelfCache Metrics Collector - Strategy Outcome Counters.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """How a strategy produced (or failed to produce) a response."""

    CACHE_HIT = "cache_hit"
    NETWORK = "network"
    CACHE_FALLBACK = "cache_fallback"
    OFFLINE_PAGE = "offline_page"
    FAILED = "failed"
    EXPIRED = "expired"
    EVICTED = "evicted"
    STORE_ERROR = "store_error"


@dataclass
class CacheMetrics:
    """Snapshot of collected metrics.

    Attributes:
        outcomes: Counter per (strategy, outcome)
        latency_avg_ms: Average resolve latency
        latency_p99_ms: P99 resolve latency
        latency_samples: Number of latency samples held
    """

    outcomes: Dict[str, Dict[str, int]] = field(default_factory=dict)
    latency_avg_ms: float = 0.0
    latency_p99_ms: float = 0.0
    latency_samples: int = 0

    def count(self, strategy: str, outcome: Outcome) -> int:
        """Get the counter for one strategy and outcome."""
        return self.outcomes.get(strategy, {}).get(outcome.value, 0)

    def total(self, outcome: Outcome) -> int:
        """Sum an outcome over all strategies."""
        return sum(counts.get(outcome.value, 0) for counts in self.outcomes.values())

    @property
    def hit_rate(self) -> float:
        """Share of served responses that came from the cache."""
        hits = self.total(Outcome.CACHE_HIT) + self.total(Outcome.CACHE_FALLBACK)
        served = hits + self.total(Outcome.NETWORK)
        return hits / served if served > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Metrics dictionary
        """
        return {
            "outcomes": {name: dict(counts) for name, counts in self.outcomes.items()},
            "hit_rate": self.hit_rate,
            "latency_avg_ms": self.latency_avg_ms,
            "latency_p99_ms": self.latency_p99_ms,
            "latency_samples": self.latency_samples,
        }


class MetricsCollector:
    """Collects per-strategy outcome counters and resolve latencies.

    Example:
        collector = MetricsCollector()
        collector.record("image", Outcome.CACHE_HIT)
        collector.record_latency(5.2)

        metrics = collector.get_metrics()
        print(f"Hit rate: {metrics.hit_rate:.2%}")
    """

    def __init__(self, latency_window: int = 10000):
        """Initialize collector.

        Args:
            latency_window: Number of latency samples kept
        """
        self._outcomes: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._latencies: Deque[float] = deque(maxlen=latency_window)

    def record(self, strategy: str, outcome: Outcome, count: int = 1) -> None:
        """Record an outcome.

        Args:
            strategy: Strategy name
            outcome: Outcome kind
            count: Increment
        """
        self._outcomes[strategy][outcome.value] += count

    def record_latency(self, latency_ms: float) -> None:
        """Record a resolve latency in milliseconds."""
        self._latencies.append(latency_ms)

    def get_metrics(self) -> CacheMetrics:
        """Get a metrics snapshot.

        Returns:
            CacheMetrics instance
        """
        metrics = CacheMetrics(
            outcomes={name: dict(counts) for name, counts in self._outcomes.items()},
        )
        if self._latencies:
            samples = sorted(self._latencies)
            metrics.latency_samples = len(samples)
            metrics.latency_avg_ms = sum(samples) / len(samples)
            metrics.latency_p99_ms = samples[min(len(samples) - 1, int(len(samples) * 0.99))]
        return metrics

    def reset(self) -> None:
        """Reset all metrics."""
        self._outcomes.clear()
        self._latencies.clear()


__all__ = ["CacheMetrics", "MetricsCollector", "Outcome"]
