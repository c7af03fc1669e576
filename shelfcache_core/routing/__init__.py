"""Routing module - Request classification."""

from shelfcache_core.routing.classifier import (
    ClassifierRules,
    RequestClassifier,
    StrategyClass,
)

__all__ = [
    "ClassifierRules",
    "RequestClassifier",
    "StrategyClass",
]
