"""ShelfCache Classifier - Request to Strategy Routing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shelfcache_core.http.message import Request

logger = logging.getLogger(__name__)


class StrategyClass(str, Enum):
    """Caching discipline assigned to a request."""

    NAVIGATION = "navigation"
    PARTIAL = "partial"
    STATIC_ASSET = "static-asset"
    IMAGE = "image"
    SENSITIVE_BYPASS = "sensitive-bypass"
    EXTERNAL_API = "external-api"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ClassifierRules:
    """Patterns the classifier matches against.

    Attributes:
        partial_path: Same-origin fragment includes (header/footer)
        static_asset_path: Same-origin stylesheet and script paths
        image_path: Image paths on any origin (case-insensitive)
        sensitive_host: Hosts whose responses must never be cached
        api_host: Third-party API hosts cached with a TTL
    """

    partial_path: str = r"/assets/partials/(header|footer)\.html$"
    static_asset_path: str = r"\.(css|js)$"
    image_path: str = r"\.(png|jpg|jpeg|gif|webp|svg|ico)$"
    sensitive_host: str = r"generativelanguage\.googleapis\.com"
    api_host: str = r"googleapis\.com"


class RequestClassifier:
    """Assigns every intercepted request to exactly one strategy class.

    Classification is a pure function of method, mode, URL path and
    host. Rules are checked in order and the first match wins:

    1. non-GET        -> None (not intercepted)
    2. navigation     -> NAVIGATION
    3. partial        -> PARTIAL        (same origin)
    4. .css / .js     -> STATIC_ASSET   (same origin)
    5. image ext      -> IMAGE          (any origin)
    6. sensitive host -> SENSITIVE_BYPASS
    7. API host       -> EXTERNAL_API
    8. anything else  -> FALLBACK

    Example:
        classifier = RequestClassifier("https://books.example")
        classifier.classify(Request("https://books.example/main.css"))
        # StrategyClass.STATIC_ASSET
    """

    def __init__(self, origin: str, rules: Optional[ClassifierRules] = None):
        """Initialize classifier.

        Args:
            origin: Origin of the application (scheme://host[:port])
            rules: Matching patterns
        """
        self.origin = origin.rstrip("/").lower()
        self.rules = rules or ClassifierRules()

        self._partial = re.compile(self.rules.partial_path)
        self._static = re.compile(self.rules.static_asset_path)
        self._image = re.compile(self.rules.image_path, re.IGNORECASE)
        self._sensitive = re.compile(self.rules.sensitive_host)
        self._api = re.compile(self.rules.api_host)

    def classify(self, request: Request) -> Optional[StrategyClass]:
        """Classify a request.

        Args:
            request: Intercepted request

        Returns:
            Strategy class, or None for requests that are never cached
        """
        if request.method != "GET":
            return None

        if request.is_navigation:
            return StrategyClass.NAVIGATION

        path = request.path
        same_origin = request.origin == self.origin

        if same_origin and self._partial.search(path):
            return StrategyClass.PARTIAL

        if same_origin and self._static.search(path):
            return StrategyClass.STATIC_ASSET

        if self._image.search(path):
            return StrategyClass.IMAGE

        host = request.host
        if self._sensitive.search(host):
            return StrategyClass.SENSITIVE_BYPASS

        if self._api.search(host):
            return StrategyClass.EXTERNAL_API

        return StrategyClass.FALLBACK

    def __repr__(self) -> str:
        return f"RequestClassifier(origin={self.origin!r})"


__all__ = ["ClassifierRules", "RequestClassifier", "StrategyClass"]
