"""Shared fixtures: a controllable clock and a scripted network.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import pytest

from shelfcache_core.clock import Clock
from shelfcache_core.errors import NetworkUnavailable
from shelfcache_core.http.fetcher import Fetcher
from shelfcache_core.http.message import Request, Response
from shelfcache_core.metrics.collector import MetricsCollector
from shelfcache_core.store.memory import MemoryStore
from shelfcache_core.worker.config import WorkerConfig
from shelfcache_core.worker.service import OfflineCacheWorker

ORIGIN = "http://localhost:8000"
START = 1_700_000_000.0


class FakeClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: float = START):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@dataclass
class Route:
    result: Union[Response, BaseException]
    delay: float = 0.0


class FakeFetcher(Fetcher):
    """Network stand-in answering from a table of scripted routes.

    Unknown URLs, and every URL while offline, raise NetworkUnavailable.
    """

    def __init__(self):
        self.routes: Dict[str, Route] = {}
        self.calls: List[Request] = []
        self.offline = False
        self.closed = False

    def respond(
        self,
        url: str,
        body: bytes = b"ok",
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
    ) -> None:
        response = Response(status=status, headers=headers or {}, body=body, url=url)
        self.routes[url] = Route(response, delay)

    def fail(self, url: str, delay: float = 0.0) -> None:
        self.routes[url] = Route(NetworkUnavailable(url, "connection refused"), delay)

    def raise_error(self, url: str, error: BaseException) -> None:
        self.routes[url] = Route(error)

    def count(self, url: str) -> int:
        return sum(1 for request in self.calls if request.url == url)

    async def fetch(self, request: Request) -> Response:
        self.calls.append(request)
        route = self.routes.get(request.url)
        if route is not None and route.delay:
            await asyncio.sleep(route.delay)
        if self.offline or route is None:
            raise NetworkUnavailable(request.url, "offline")
        if isinstance(route.result, BaseException):
            raise route.result
        return route.result.clone()

    async def close(self) -> None:
        self.closed = True


def url(path: str) -> str:
    return f"{ORIGIN}{path}"


def serve_manifest(fetcher: FakeFetcher, config: WorkerConfig) -> None:
    """Script an OK answer for every precache URL."""
    for target in config.precache_targets():
        fetcher.respond(target, body=f"shell {target}".encode())


def make_config(version: str = "v7", **overrides) -> WorkerConfig:
    settings = dict(
        version=version,
        origin=ORIGIN,
        navigation_timeout=0.05,
        partial_timeout=0.05,
    )
    settings.update(overrides)
    return WorkerConfig(**settings)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def worker(config, store, fetcher, clock, metrics):
    return OfflineCacheWorker(config, store=store, fetcher=fetcher, clock=clock, metrics=metrics)
