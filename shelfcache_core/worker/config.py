"""ShelfCache Worker Config - Version, Manifest and Policy Settings.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple
from urllib.parse import urljoin

from shelfcache_core.routing.classifier import ClassifierRules

DAY = 60 * 60 * 24
HOUR = 60 * 60

PRECACHE_URLS: Tuple[str, ...] = (
    "/",
    "/index.html",
    "/pages/admin.html",
    "/pages/reader.html",
    "/pages/my_library.html",
    "/pages/login_register.html",
    "/book.css",
    "/assets/css/components.css",
    "/assets/css/main.css",
    "/assets/css/responsive.css",
    "/assets/css/google-books.css",
    "/assets/js/main.js",
    "/assets/js/login.js",
    "/assets/js/google-books.js",
    "/assets/js/search.js",
    "/assets/js/library.js",
    "/assets/js/layout.js",
    "/assets/js/geminiClient.js",
    "/assets/js/reader.js",
    "/manifest.json",
    "/assets/icons/icon-192.png",
    "/assets/icons/icon-512.png",
)


@dataclass
class WorkerConfig:
    """Configuration of one cache manager version.

    Attributes:
        version: Version tag baked into version-bound namespace names
        cache_prefix: Prefix of every namespace this application owns
        origin: Application origin; precache paths resolve against it
        precache_urls: Shell manifest, fetched verbatim at install
        image_ttl: Maximum image age in seconds
        api_ttl: Maximum API response age in seconds
        max_image_entries: Entry bound of the images namespace
        max_api_entries: Entry bound of the API namespace
        navigation_timeout: Network race deadline for navigations
        partial_timeout: Network race deadline for header/footer partials
        skip_waiting_on_install: Activate as soon as install succeeds
        offline_title: Title of the synthesized offline document
        rules: Classifier patterns
    """

    version: str = "v7"
    cache_prefix: str = "bse"
    origin: str = "http://localhost:8000"
    precache_urls: Tuple[str, ...] = PRECACHE_URLS
    image_ttl: float = 30 * DAY
    api_ttl: float = 6 * HOUR
    max_image_entries: int = 120
    max_api_entries: int = 80
    navigation_timeout: float = 5.0
    partial_timeout: float = 4.0
    skip_waiting_on_install: bool = True
    offline_title: str = "Offline - Book Shelf Explorer"
    rules: ClassifierRules = field(default_factory=ClassifierRules)

    def __post_init__(self):
        if not self.version:
            raise ValueError("version is required")
        if self.max_image_entries < 1 or self.max_api_entries < 1:
            raise ValueError("entry bounds must be at least 1")
        if self.navigation_timeout <= 0 or self.partial_timeout <= 0:
            raise ValueError("timeouts must be positive")

    def resolve(self, path: str) -> str:
        """Resolve a manifest path against the origin."""
        return urljoin(self.origin.rstrip("/") + "/", path)

    def precache_targets(self) -> Tuple[str, ...]:
        """Absolute URLs of the precache manifest, in manifest order."""
        return tuple(self.resolve(path) for path in self.precache_urls)


__all__ = ["WorkerConfig", "PRECACHE_URLS", "DAY", "HOUR"]
