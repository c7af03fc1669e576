"""Tests for the strategy executors, driven through the worker's router.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio

import pytest

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.cache.expiry import FETCHED_AT_HEADER, STORED_AT_HEADER
from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.message import Request, RequestMode, Response, ResponseType
from shelfcache_core.metrics.collector import Outcome
from shelfcache_core.store.backend import StorageConfig
from shelfcache_core.store.memory import MemoryStore
from shelfcache_core.worker.service import OfflineCacheWorker

from conftest import make_config, serve_manifest, url

DAY = 86400
HOUR = 3600

PAGES = "bse-pages-v7"
SHELL = "bse-shell-v7"
ASSETS = "bse-assets-v7"
IMAGES = "bse-img"
API = "bse-api-runtime"

BOOKS_API = "https://www.googleapis.com/books/v1/volumes?q=dune"
GEMINI_API = "https://generativelanguage.googleapis.com/v1beta/models"
COVER = "https://books.google.com/covers/dune.jpg"


async def seed(worker, namespace: str, target: str, body: bytes, headers=None) -> None:
    request = Request(target)
    response = Response(body=body, headers=headers or {}, url=target)
    await worker.storage.open(namespace).put(
        request.cache_key, CacheEntry.from_response(request.cache_key, response)
    )


async def cached_body(worker, namespace: str, target: str):
    entry = await worker.storage.open(namespace).get(Request(target).cache_key)
    return entry.body if entry is not None else None


def navigate(path: str) -> Request:
    return Request(url(path), mode=RequestMode.NAVIGATE)


class TestNavigation:
    """Tests for page navigations."""

    @pytest.mark.asyncio
    async def test_online_writes_through(self, worker, fetcher):
        """Test that a network response is returned and cached in pages."""
        fetcher.respond(url("/pages/reader.html"), body=b"<html>reader</html>")

        response = await worker.handle_fetch(navigate("/pages/reader.html"))

        assert response.body == b"<html>reader</html>"
        assert await cached_body(worker, PAGES, url("/pages/reader.html")) == b"<html>reader</html>"

    @pytest.mark.asyncio
    async def test_timeout_serves_cache(self, worker, fetcher, metrics):
        """Test that a slow network loses to the cached copy."""
        await seed(worker, PAGES, url("/pages/admin.html"), b"cached admin")
        fetcher.respond(url("/pages/admin.html"), body=b"late admin", delay=0.3)

        response = await worker.handle_fetch(navigate("/pages/admin.html"))

        assert response.body == b"cached admin"
        assert metrics.get_metrics().count("navigation", Outcome.CACHE_FALLBACK) == 1
        await worker.drain()

    @pytest.mark.asyncio
    async def test_late_response_refreshes_cache(self, worker, fetcher):
        """Test that a fetch finishing after the deadline still updates the cache."""
        await seed(worker, PAGES, url("/pages/admin.html"), b"cached admin")
        fetcher.respond(url("/pages/admin.html"), body=b"late admin", delay=0.2)

        await worker.handle_fetch(navigate("/pages/admin.html"))
        await worker.drain()

        assert await cached_body(worker, PAGES, url("/pages/admin.html")) == b"late admin"

    @pytest.mark.asyncio
    async def test_fallback_searches_shell(self, worker, fetcher, config):
        """Test that a precached page is served when offline."""
        serve_manifest(fetcher, config)
        await worker.install()
        fetcher.offline = True

        response = await worker.handle_fetch(navigate("/index.html"))

        assert response.body == f"shell {url('/index.html')}".encode()

    @pytest.mark.asyncio
    async def test_unvisited_page_offline(self, worker, metrics):
        """Test the synthesized offline document."""
        response = await worker.handle_fetch(navigate("/pages/unknown.html"))

        assert response.status == 200
        assert response.headers["content-type"] == "text/html; charset=utf-8"
        assert "<title>Offline - Book Shelf Explorer</title>" in response.text
        assert metrics.get_metrics().count("navigation", Outcome.OFFLINE_PAGE) == 1

    @pytest.mark.asyncio
    async def test_error_status_not_cached(self, worker, fetcher):
        """Test that a 404 is returned but not written."""
        fetcher.respond(url("/pages/gone.html"), body=b"not found", status=404)

        response = await worker.handle_fetch(navigate("/pages/gone.html"))

        assert response.status == 404
        assert await cached_body(worker, PAGES, url("/pages/gone.html")) is None

    @pytest.mark.asyncio
    async def test_preload_used_without_fetch(self, worker, fetcher):
        """Test that a navigation preload replaces the network fetch."""
        target = url("/pages/my_library.html")

        async def preloaded():
            return Response(body=b"preloaded", url=target)

        response = await worker.handle_fetch(navigate("/pages/my_library.html"), preloaded())

        assert response.body == b"preloaded"
        assert fetcher.count(target) == 0
        entry = await worker.storage.open(PAGES).get(Request(target).cache_key)
        assert entry.metadata.source == "preload"

    @pytest.mark.asyncio
    async def test_failed_preload_falls_back(self, worker):
        """Test a rejected preload falls back to the cache."""
        target = url("/pages/my_library.html")
        await seed(worker, PAGES, target, b"cached library")

        async def preloaded():
            raise NetworkUnavailable(target, "offline")

        response = await worker.handle_fetch(navigate("/pages/my_library.html"), preloaded())
        assert response.body == b"cached library"


class TestPartial:
    """Tests for header/footer partials."""

    @pytest.mark.asyncio
    async def test_online(self, worker, fetcher):
        """Test network response cached in assets."""
        target = url("/assets/partials/header.html")
        fetcher.respond(target, body=b"<header/>")

        response = await worker.handle_fetch(Request(target))

        assert response.body == b"<header/>"
        assert await cached_body(worker, ASSETS, target) == b"<header/>"

    @pytest.mark.asyncio
    async def test_timeout_serves_cache(self, worker, fetcher):
        """Test the partial deadline."""
        target = url("/assets/partials/footer.html")
        await seed(worker, ASSETS, target, b"<footer>old</footer>")
        fetcher.respond(target, body=b"<footer>new</footer>", delay=0.3)

        response = await worker.handle_fetch(Request(target))
        assert response.body == b"<footer>old</footer>"
        await worker.drain()

    @pytest.mark.asyncio
    async def test_no_cache_gives_network_error(self, worker):
        """Test that partials get no offline document."""
        response = await worker.handle_fetch(Request(url("/assets/partials/header.html")))

        assert response.type == ResponseType.ERROR
        assert response.status == 0


class TestStaleWhileRevalidate:
    """Tests for static assets."""

    @pytest.mark.asyncio
    async def test_hit_returns_cached_and_refreshes(self, worker, fetcher):
        """Test the first response is cached and the next one is fresh."""
        target = url("/assets/css/main.css")
        await seed(worker, ASSETS, target, b"old css")
        fetcher.respond(target, body=b"new css")

        first = await worker.handle_fetch(Request(target))
        await worker.drain()
        second = await worker.handle_fetch(Request(target))

        assert first.body == b"old css"
        assert second.body == b"new css"
        assert fetcher.count(target) == 2

    @pytest.mark.asyncio
    async def test_miss_waits_for_network(self, worker, fetcher):
        """Test a miss resolves to the network response and caches it."""
        target = url("/assets/js/search.js")
        fetcher.respond(target, body=b"js")

        response = await worker.handle_fetch(Request(target))

        assert response.body == b"js"
        assert await cached_body(worker, ASSETS, target) == b"js"

    @pytest.mark.asyncio
    async def test_background_failure_swallowed(self, worker, fetcher):
        """Test an offline refresh keeps the cached copy."""
        target = url("/assets/js/main.js")
        await seed(worker, ASSETS, target, b"cached js")
        fetcher.offline = True

        response = await worker.handle_fetch(Request(target))
        await worker.drain()

        assert response.body == b"cached js"
        assert await cached_body(worker, ASSETS, target) == b"cached js"

    @pytest.mark.asyncio
    async def test_miss_offline(self, worker):
        """Test a miss with no network."""
        response = await worker.handle_fetch(Request(url("/assets/js/reader.js")))
        assert response.is_error

    @pytest.mark.asyncio
    async def test_error_status_not_stored(self, worker, fetcher):
        """Test a 500 refresh does not overwrite the cache."""
        target = url("/assets/css/components.css")
        await seed(worker, ASSETS, target, b"good css")
        fetcher.respond(target, body=b"oops", status=500)

        await worker.handle_fetch(Request(target))
        await worker.drain()

        assert await cached_body(worker, ASSETS, target) == b"good css"


class TestImages:
    """Tests for cache-first images."""

    @pytest.mark.asyncio
    async def test_miss_stamps_and_stores(self, worker, fetcher, clock):
        """Test the stored-at stamp."""
        fetcher.respond(COVER, body=b"jpeg")

        response = await worker.handle_fetch(Request(COVER))

        assert response.headers[STORED_AT_HEADER] == str(clock.now_ms())
        entry = await worker.storage.open(IMAGES).get(Request(COVER).cache_key)
        assert entry.to_response().headers[STORED_AT_HEADER] == str(clock.now_ms())

    @pytest.mark.asyncio
    async def test_fresh_hit_skips_network(self, worker, fetcher, clock):
        """Test a fresh image is served from cache."""
        fetcher.respond(COVER, body=b"jpeg")
        await worker.handle_fetch(Request(COVER))
        clock.advance(29 * DAY)

        response = await worker.handle_fetch(Request(COVER))

        assert response.body == b"jpeg"
        assert fetcher.count(COVER) == 1

    @pytest.mark.asyncio
    async def test_expired_refetches(self, worker, fetcher, clock):
        """Test an image stored 31 days ago is fetched again."""
        fetcher.respond(COVER, body=b"v1")
        await worker.handle_fetch(Request(COVER))
        clock.advance(31 * DAY)
        fetcher.respond(COVER, body=b"v2")

        response = await worker.handle_fetch(Request(COVER))

        assert response.body == b"v2"
        assert fetcher.count(COVER) == 2
        assert response.headers[STORED_AT_HEADER] == str(clock.now_ms())

    @pytest.mark.asyncio
    async def test_expired_offline_serves_stale(self, worker, fetcher, clock, metrics):
        """Test the last known copy beats an error."""
        fetcher.respond(COVER, body=b"old cover")
        await worker.handle_fetch(Request(COVER))
        clock.advance(40 * DAY)
        fetcher.offline = True

        response = await worker.handle_fetch(Request(COVER))

        assert response.body == b"old cover"
        assert metrics.get_metrics().count("image", Outcome.EXPIRED) == 1

    @pytest.mark.asyncio
    async def test_miss_offline(self, worker):
        """Test an unknown image with no network."""
        response = await worker.handle_fetch(Request(COVER))
        assert response.is_error

    @pytest.mark.asyncio
    async def test_error_status_not_stored(self, worker, fetcher):
        """Test a 404 image is returned and not cached."""
        fetcher.respond(COVER, body=b"", status=404)

        response = await worker.handle_fetch(Request(COVER))

        assert response.status == 404
        assert await cached_body(worker, IMAGES, COVER) is None

    @pytest.mark.asyncio
    async def test_entry_bound(self, store, fetcher, clock):
        """Test the images namespace keeps the most recent entries."""
        worker = OfflineCacheWorker(
            make_config(max_image_entries=3), store=store, fetcher=fetcher, clock=clock,
        )
        covers = [f"https://img.example.org/{i}.png" for i in range(5)]
        for cover in covers:
            fetcher.respond(cover, body=cover.encode())
            await worker.handle_fetch(Request(cover))

        keys = await worker.storage.open(IMAGES).keys()
        assert keys == [Request(cover).cache_key for cover in covers[2:]]
        assert worker.metrics.get_metrics().count("image", Outcome.EVICTED) == 2

    @pytest.mark.asyncio
    async def test_concurrent_misses_keep_newest(self, store, fetcher, clock):
        """Test parallel misses never evict an entry newer than their own."""
        worker = OfflineCacheWorker(
            make_config(max_image_entries=2), store=store, fetcher=fetcher, clock=clock,
        )
        covers = [url(f"/img/{name}.png") for name in ("x", "y", "z")]
        for cover in covers:
            fetcher.respond(cover, body=cover.encode())

        responses = await asyncio.gather(*(worker.handle_fetch(Request(cover)) for cover in covers))

        assert [r.body for r in responses] == [cover.encode() for cover in covers]
        keys = await worker.storage.open(IMAGES).keys()
        assert keys == [Request(cover).cache_key for cover in covers[1:]]


class TestExternalAPI:
    """Tests for TTL-bounded API caching."""

    @pytest.mark.asyncio
    async def test_online_stamps_and_stores(self, worker, fetcher, clock):
        """Test the fetched-at stamp."""
        fetcher.respond(BOOKS_API, body=b'{"items": []}')

        response = await worker.handle_fetch(Request(BOOKS_API))

        assert response.headers[FETCHED_AT_HEADER] == str(clock.now_ms())
        assert await cached_body(worker, API, BOOKS_API) == b'{"items": []}'

    @pytest.mark.asyncio
    async def test_offline_within_ttl(self, worker, fetcher, clock):
        """Test a five-hour-old response is served offline."""
        fetcher.respond(BOOKS_API, body=b"books")
        await worker.handle_fetch(Request(BOOKS_API))
        clock.advance(5 * HOUR)
        fetcher.offline = True

        response = await worker.handle_fetch(Request(BOOKS_API))
        assert response.body == b"books"

    @pytest.mark.asyncio
    async def test_offline_past_ttl_fails(self, worker, fetcher, clock):
        """Test a seven-hour-old response is not served."""
        fetcher.respond(BOOKS_API, body=b"books")
        await worker.handle_fetch(Request(BOOKS_API))
        clock.advance(7 * HOUR)
        fetcher.offline = True

        response = await worker.handle_fetch(Request(BOOKS_API))
        assert response.is_error

    @pytest.mark.asyncio
    async def test_unstamped_entry_not_served(self, worker, fetcher):
        """Test that a cached response without a stamp counts as expired."""
        await seed(worker, API, BOOKS_API, b"unstamped")
        fetcher.offline = True

        response = await worker.handle_fetch(Request(BOOKS_API))
        assert response.is_error

    @pytest.mark.asyncio
    async def test_online_ignores_cache(self, worker, fetcher, clock):
        """Test network first even with a fresh cached copy."""
        fetcher.respond(BOOKS_API, body=b"v1")
        await worker.handle_fetch(Request(BOOKS_API))
        fetcher.respond(BOOKS_API, body=b"v2")

        response = await worker.handle_fetch(Request(BOOKS_API))
        assert response.body == b"v2"


class TestPassthrough:
    """Tests for the bypass and fallback classes."""

    @pytest.mark.asyncio
    async def test_sensitive_never_cached(self, worker, fetcher, store):
        """Test the generative API never touches the cache."""
        fetcher.respond(GEMINI_API, body=b"answer")

        response = await worker.handle_fetch(Request(GEMINI_API))

        assert response.body == b"answer"
        assert await store.list_namespaces() == []

    @pytest.mark.asyncio
    async def test_sensitive_offline_is_503(self, worker):
        """Test the synthetic 503."""
        response = await worker.handle_fetch(Request(GEMINI_API))

        assert response.status == 503
        assert response.text == "Upstream API unreachable"

    @pytest.mark.asyncio
    async def test_fallback_serves_any_namespace(self, worker, fetcher, config):
        """Test the catch-all class reads the precached shell."""
        serve_manifest(fetcher, config)
        await worker.install()
        fetcher.offline = True

        response = await worker.handle_fetch(Request(url("/manifest.json")))
        assert response.body == f"shell {url('/manifest.json')}".encode()

    @pytest.mark.asyncio
    async def test_fallback_online_not_stored(self, worker, fetcher, store):
        """Test the catch-all class writes nothing."""
        target = "https://example.org/data.json"
        fetcher.respond(target, body=b"{}")

        response = await worker.handle_fetch(Request(target))

        assert response.body == b"{}"
        assert await store.list_namespaces() == []

    @pytest.mark.asyncio
    async def test_fallback_double_miss(self, worker):
        """Test the explicit network error."""
        response = await worker.handle_fetch(Request("https://example.org/data.json"))

        assert response.is_error
        assert response.status == 0

    @pytest.mark.asyncio
    async def test_non_get_not_intercepted(self, worker, fetcher):
        """Test POST requests are left alone."""
        assert await worker.handle_fetch(Request(url("/api/login"), method="POST")) is None
        assert fetcher.calls == []


class TestStoreFailures:
    """Tests for responses served when the cache cannot be written."""

    @pytest.fixture
    def full_worker(self, fetcher, clock):
        store = MemoryStore(StorageConfig(max_bytes=1))
        return OfflineCacheWorker(make_config(), store=store, fetcher=fetcher, clock=clock)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_, strategy",
        [
            (navigate("/pages/reader.html"), "navigation"),
            (Request(url("/assets/js/reader.js")), "static-asset"),
            (Request(COVER), "image"),
            (Request(BOOKS_API), "external-api"),
        ],
    )
    async def test_write_failure_still_served(self, full_worker, fetcher, request_, strategy):
        """Test a quota failure is recorded and the body still returned."""
        fetcher.respond(request_.url, body=b"payload")

        response = await full_worker.handle_fetch(request_)
        await full_worker.drain()

        assert response.body == b"payload"
        assert full_worker.metrics.get_metrics().count(strategy, Outcome.STORE_ERROR) == 1
        assert await full_worker.storage.open(full_worker.route(request_)[2]).size() == 0
