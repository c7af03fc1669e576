"""ShelfCache Precache - All-or-Nothing Shell Installation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.cache.storage import CacheStorage
from shelfcache_core.errors import InstallError, NetworkUnavailable, StoreWriteError
from shelfcache_core.http.fetcher import Fetcher
from shelfcache_core.http.message import Request, Response

logger = logging.getLogger(__name__)


@dataclass
class PrecacheStats:
    """Precache run statistics.

    Attributes:
        total_urls: URLs in the manifest
        fetched: URLs answered with an OK response
        stored: Entries written
        failed: URLs that failed or answered non-OK
        duration_seconds: Total duration
        started_at: Start time
        completed_at: Completion time
    """

    total_urls: int = 0
    fetched: int = 0
    stored: int = 0
    failed: int = 0
    duration_seconds: float = 0.0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Get success rate."""
        total = self.fetched + self.failed
        return self.fetched / total if total > 0 else 0.0


class Precacher:
    """Fills a namespace from a URL manifest, atomically.

    Every URL is fetched concurrently. Only when all of them answered
    with an OK status are the responses written; a single failure aborts
    the run with nothing written.

    Example:
        precacher = Precacher(storage, fetcher)
        stats = await precacher.precache(urls, "bse-shell-v7", version="v7")
    """

    def __init__(self, storage: CacheStorage, fetcher: Fetcher):
        """Initialize precacher.

        Args:
            storage: Cache storage to fill
            fetcher: Network fetcher
        """
        self.storage = storage
        self.fetcher = fetcher
        self._stats = PrecacheStats()

    async def precache(self, urls: Iterable[str], namespace: str, version: str) -> PrecacheStats:
        """Fetch every URL and store all responses in a namespace.

        Args:
            urls: Absolute URLs to precache
            namespace: Namespace to write
            version: Version being installed, for error reporting

        Returns:
            Precache statistics

        Raises:
            InstallError: If any URL failed, answered non-OK, or could not be stored
        """
        requests = [Request(url) for url in urls]
        self._stats = PrecacheStats(total_urls=len(requests), started_at=datetime.now())
        logger.info(f"Precaching {len(requests)} URLs into {namespace}")

        results = await asyncio.gather(
            *(self.fetcher.fetch(request) for request in requests),
            return_exceptions=True,
        )

        fetched: List[Tuple[Request, Response]] = []
        first_failure: Optional[InstallError] = None
        for request, result in zip(requests, results):
            if isinstance(result, NetworkUnavailable):
                failure = InstallError(version, request.url, result.reason or "network unavailable")
            elif isinstance(result, Exception):
                failure = InstallError(version, request.url, f"{type(result).__name__}: {result}")
            elif isinstance(result, BaseException):
                raise result
            elif not result.ok:
                failure = InstallError(version, request.url, f"HTTP {result.status}")
            else:
                fetched.append((request, result))
                self._stats.fetched += 1
                continue

            self._stats.failed += 1
            logger.error(f"Precache of {request.url} failed: {failure.reason}")
            if first_failure is None:
                first_failure = failure

        if first_failure is not None:
            self._finish()
            raise first_failure

        await self._write(fetched, namespace, version)
        self._finish()
        logger.info(f"Precache completed: {self._stats.stored} entries in {namespace}")
        return self._stats

    async def _write(self, fetched: List[Tuple[Request, Response]], namespace: str, version: str) -> None:
        handle = self.storage.open(namespace)
        try:
            for request, response in fetched:
                key = request.cache_key
                entry = CacheEntry.from_response(key, response, namespace=namespace, source="precache")
                await handle.put(key, entry)
                self._stats.stored += 1
        except StoreWriteError as e:
            # Roll back so a failed install leaves nothing behind
            await self.storage.delete(namespace)
            self._stats.stored = 0
            self._finish()
            raise InstallError(version, e.key, f"store write failed: {e.reason}") from e

    def _finish(self) -> None:
        self._stats.completed_at = datetime.now()
        self._stats.duration_seconds = (
            self._stats.completed_at - self._stats.started_at
        ).total_seconds()

    def get_stats(self) -> PrecacheStats:
        """Get statistics of the last run."""
        return self._stats


__all__ = ["Precacher", "PrecacheStats"]
