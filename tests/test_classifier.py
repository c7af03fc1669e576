"""Tests for request classification.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from shelfcache_core.http.message import Request, RequestMode
from shelfcache_core.routing.classifier import (
    ClassifierRules,
    RequestClassifier,
    StrategyClass,
)

from conftest import ORIGIN, url


@pytest.fixture
def classifier():
    return RequestClassifier(ORIGIN)


class TestRequestClassifier:
    """Tests for RequestClassifier."""

    def test_non_get_is_not_intercepted(self, classifier):
        """Test that non-GET requests pass through."""
        for method in ("POST", "PUT", "DELETE", "HEAD"):
            assert classifier.classify(Request(url("/index.html"), method=method)) is None

    def test_navigation_wins_over_path_rules(self, classifier):
        """Test that navigations are classified before any path rule."""
        request = Request(url("/assets/js/main.js"), mode=RequestMode.NAVIGATE)
        assert classifier.classify(request) == StrategyClass.NAVIGATION

    def test_partials(self, classifier):
        """Test header/footer partial detection."""
        assert classifier.classify(Request(url("/assets/partials/header.html"))) == StrategyClass.PARTIAL
        assert classifier.classify(Request(url("/assets/partials/footer.html"))) == StrategyClass.PARTIAL
        assert classifier.classify(Request(url("/assets/partials/sidebar.html"))) == StrategyClass.FALLBACK

    def test_static_assets_same_origin_only(self, classifier):
        """Test that .css/.js are static assets only on the app origin."""
        assert classifier.classify(Request(url("/assets/css/main.css"))) == StrategyClass.STATIC_ASSET
        assert classifier.classify(Request(url("/assets/js/search.js?v=2"))) == StrategyClass.STATIC_ASSET
        assert classifier.classify(Request("https://cdn.example.com/lib.js")) == StrategyClass.FALLBACK

    def test_images_any_origin(self, classifier):
        """Test image extensions on any origin, case-insensitive."""
        assert classifier.classify(Request(url("/assets/icons/icon-192.png"))) == StrategyClass.IMAGE
        assert classifier.classify(Request("https://books.google.com/cover.JPG")) == StrategyClass.IMAGE
        assert classifier.classify(Request("https://img.example.org/a.webp")) == StrategyClass.IMAGE

    def test_image_beats_api_host(self, classifier):
        """Test that an image on an API host is still an image."""
        request = Request("https://books.googleapis.com/thumb.png")
        assert classifier.classify(request) == StrategyClass.IMAGE

    def test_sensitive_host_beats_api_host(self, classifier):
        """Test that the generative API is bypassed, not TTL-cached."""
        sensitive = Request("https://generativelanguage.googleapis.com/v1/models")
        api = Request("https://www.googleapis.com/books/v1/volumes?q=dune")
        assert classifier.classify(sensitive) == StrategyClass.SENSITIVE_BYPASS
        assert classifier.classify(api) == StrategyClass.EXTERNAL_API

    def test_everything_else_falls_back(self, classifier):
        """Test the catch-all class."""
        assert classifier.classify(Request(url("/manifest.json"))) == StrategyClass.FALLBACK
        assert classifier.classify(Request("https://example.org/data")) == StrategyClass.FALLBACK

    def test_deterministic(self, classifier):
        """Test that classification is a pure function of the request."""
        request = Request("https://www.googleapis.com/books/v1/volumes?q=x")
        results = {classifier.classify(request) for _ in range(10)}
        assert results == {StrategyClass.EXTERNAL_API}

    def test_custom_rules(self):
        """Test configurable patterns."""
        rules = ClassifierRules(api_host=r"api\.example\.com")
        classifier = RequestClassifier(ORIGIN, rules)

        assert classifier.classify(Request("https://api.example.com/items")) == StrategyClass.EXTERNAL_API
        assert classifier.classify(Request("https://www.googleapis.com/x")) == StrategyClass.FALLBACK
