"""Tests for the event dispatcher and worker registration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio

import pytest

from shelfcache_core.errors import InstallError
from shelfcache_core.http.message import Request, RequestMode
from shelfcache_core.worker.dispatcher import (
    EventDispatcher,
    FetchEvent,
    InstallEvent,
    MessageEvent,
)
from shelfcache_core.worker.lifecycle import LifecycleState
from shelfcache_core.worker.preload import PRELOAD_HEADER, NavigationPreload
from shelfcache_core.worker.registration import WorkerRegistration
from shelfcache_core.worker.service import OfflineCacheWorker

from conftest import make_config, serve_manifest, url


def new_worker(version, store, fetcher, clock, **overrides) -> OfflineCacheWorker:
    config = make_config(version, **overrides)
    serve_manifest(fetcher, config)
    return OfflineCacheWorker(config, store=store, fetcher=fetcher, clock=clock)


class TestEventDispatcher:
    """Tests for EventDispatcher."""

    @pytest.mark.asyncio
    async def test_events_reach_handlers(self, worker, fetcher, config):
        """Test install, fetch and message events."""
        serve_manifest(fetcher, config)
        dispatcher = EventDispatcher(worker)
        dispatcher.start()

        stats = await dispatcher.dispatch(InstallEvent())
        response = await dispatcher.dispatch(FetchEvent(Request(url("/book.css"))))
        reply = await dispatcher.dispatch(MessageEvent("PING"))
        await dispatcher.stop()

        assert stats.stored == 22
        assert response.body == f"shell {url('/book.css')}".encode()
        assert reply == {"type": "PONG", "version": "v7"}
        assert dispatcher.get_stats().completed == 3

    @pytest.mark.asyncio
    async def test_slow_fetch_does_not_block_queue(self, worker, fetcher):
        """Test fetch handlers run concurrently."""
        fetcher.respond("https://example.org/slow", body=b"slow", delay=0.3)
        dispatcher = EventDispatcher(worker)
        dispatcher.start()

        slow = asyncio.ensure_future(dispatcher.dispatch(FetchEvent(Request("https://example.org/slow"))))
        reply = await asyncio.wait_for(dispatcher.dispatch(MessageEvent("GET_VERSION")), timeout=0.2)

        assert reply["version"] == "v7"
        assert not slow.done()
        assert (await slow).body == b"slow"
        await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_handler_errors_propagate(self, worker):
        """Test a failing install surfaces to the caller."""
        dispatcher = EventDispatcher(worker)
        dispatcher.start()

        with pytest.raises(InstallError):
            await dispatcher.dispatch(InstallEvent())

        assert dispatcher.running
        await dispatcher.stop()
        assert dispatcher.get_stats().failed == 1

    @pytest.mark.asyncio
    async def test_not_running(self, worker):
        """Test dispatching to a stopped dispatcher."""
        with pytest.raises(RuntimeError):
            await EventDispatcher(worker).dispatch(MessageEvent("PING"))


class TestWorkerRegistration:
    """Tests for WorkerRegistration."""

    @pytest.mark.asyncio
    async def test_first_worker_activates(self, store, fetcher, clock):
        """Test the first registration takes control immediately."""
        registration = WorkerRegistration()
        changes = []
        registration.on_controller_change(lambda w: changes.append(w.version))

        worker = await registration.register(new_worker("v7", store, fetcher, clock))

        assert registration.active is worker
        assert registration.waiting is None
        assert worker.state == LifecycleState.ACTIVE
        assert changes == ["v7"]
        await registration.close()

    @pytest.mark.asyncio
    async def test_no_controller_no_interception(self, fetcher):
        """Test requests before activation are not intercepted."""
        registration = WorkerRegistration()
        assert await registration.fetch(Request(url("/index.html"))) is None
        assert await registration.post_message("PING") is None

    @pytest.mark.asyncio
    async def test_upgrade_with_skip_waiting(self, store, fetcher, clock):
        """Test v8 replaces v7 and sweeps its namespaces."""
        registration = WorkerRegistration()
        updates = []
        registration.on_update_found(lambda w: updates.append(w.version))

        v7 = await registration.register(new_worker("v7", store, fetcher, clock))
        v8 = await registration.register(new_worker("v8", store, fetcher, clock))

        assert registration.active is v8
        assert v7.state == LifecycleState.SUPERSEDED
        assert updates == ["v8"]
        assert "bse-shell-v7" not in await store.list_namespaces()
        assert await registration.post_message("GET_VERSION") == {"type": "SW_VERSION", "version": "v8"}
        await registration.close()

    @pytest.mark.asyncio
    async def test_update_waits_until_skip_waiting(self, store, fetcher, clock):
        """Test a worker without skip-waiting stays waiting until told."""
        registration = WorkerRegistration()
        v7 = await registration.register(new_worker("v7", store, fetcher, clock))
        v8 = await registration.register(
            new_worker("v8", store, fetcher, clock, skip_waiting_on_install=False)
        )

        assert registration.active is v7
        assert registration.waiting is v8
        assert v8.state == LifecycleState.WAITING

        reply = await registration.post_message("SKIP_WAITING", worker=v8)

        assert reply is None
        assert registration.active is v8
        assert registration.waiting is None
        assert v7.state == LifecycleState.SUPERSEDED
        await registration.close()

    @pytest.mark.asyncio
    async def test_newer_waiting_worker_replaces_older(self, store, fetcher, clock):
        """Test a second waiting worker supersedes the first."""
        registration = WorkerRegistration()
        await registration.register(new_worker("v7", store, fetcher, clock))
        v8 = await registration.register(new_worker("v8", store, fetcher, clock, skip_waiting_on_install=False))
        v9 = await registration.register(new_worker("v9", store, fetcher, clock, skip_waiting_on_install=False))

        assert registration.waiting is v9
        assert v8.state == LifecycleState.SUPERSEDED
        assert await registration.skip_waiting()
        assert registration.active is v9
        await registration.close()

    @pytest.mark.asyncio
    async def test_failed_install_keeps_active(self, store, fetcher, clock):
        """Test a broken update leaves the current version in control."""
        registration = WorkerRegistration()
        v7 = await registration.register(new_worker("v7", store, fetcher, clock))

        broken = new_worker("v8", store, fetcher, clock)
        fetcher.fail(url("/assets/js/reader.js"))

        with pytest.raises(InstallError):
            await registration.register(broken)

        assert registration.active is v7
        assert registration.installing is None
        assert broken.state == LifecycleState.FAILED
        assert "bse-shell-v8" not in await store.list_namespaces()
        await registration.close()

    @pytest.mark.asyncio
    async def test_unexpected_install_error_retires_worker(self, store, fetcher, clock):
        """Test a worker whose install hit a non-network error is dropped."""
        registration = WorkerRegistration()
        v7 = await registration.register(new_worker("v7", store, fetcher, clock))

        broken = new_worker("v8", store, fetcher, clock)
        fetcher.raise_error(url("/manifest.json"), ValueError("malformed URL"))

        with pytest.raises(InstallError):
            await registration.register(broken)

        assert registration.active is v7
        assert registration.installing is None
        assert broken.state == LifecycleState.FAILED
        assert await registration.post_message("PING", worker=broken) is None
        await registration.close()

    @pytest.mark.asyncio
    async def test_navigation_preload(self, store, fetcher, clock):
        """Test the host starts navigation fetches when preload is on."""
        registration = WorkerRegistration(NavigationPreload())
        await registration.register(new_worker("v7", store, fetcher, clock))
        fetcher.respond(url("/pages/reader.html"), body=b"reader")
        fetcher.calls.clear()

        response = await registration.fetch(Request(url("/pages/reader.html"), mode=RequestMode.NAVIGATE))

        assert response.body == b"reader"
        reader_calls = [r for r in fetcher.calls if r.url == url("/pages/reader.html")]
        assert len(reader_calls) == 1
        assert reader_calls[0].headers[PRELOAD_HEADER] == "true"
        await registration.close()

    @pytest.mark.asyncio
    async def test_offline_navigation_through_registration(self, store, fetcher, clock):
        """Test the shell answers navigations once the network is gone."""
        registration = WorkerRegistration(NavigationPreload())
        await registration.register(new_worker("v7", store, fetcher, clock))
        fetcher.offline = True

        home = await registration.fetch(Request(url("/"), mode=RequestMode.NAVIGATE))
        unknown = await registration.fetch(Request(url("/pages/nope.html"), mode=RequestMode.NAVIGATE))

        assert home.body == f"shell {url('/')}".encode()
        assert "Offline - Book Shelf Explorer" in unknown.text
        await registration.close()

    @pytest.mark.asyncio
    async def test_close_stops_everything(self, store, fetcher, clock):
        """Test close releases fetchers and dispatchers."""
        registration = WorkerRegistration()
        await registration.register(new_worker("v7", store, fetcher, clock))

        await registration.close()
        assert fetcher.closed
