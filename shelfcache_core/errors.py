"""ShelfCache Errors - Exception Hierarchy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Optional


class ShelfCacheError(Exception):
    """Base class for all cache manager errors."""


class NetworkUnavailable(ShelfCacheError):
    """A network fetch was rejected or timed out.

    Attributes:
        url: URL that could not be fetched
        timed_out: True if the fetch lost a race against a deadline
    """

    def __init__(self, url: str, reason: str = "", timed_out: bool = False):
        self.url = url
        self.reason = reason
        self.timed_out = timed_out
        message = f"Network unavailable for {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StoreWriteError(ShelfCacheError):
    """A cache write could not be persisted (quota, disk, backend failure)."""

    def __init__(self, namespace: str, key: str, reason: str = ""):
        self.namespace = namespace
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to store {key!r} in {namespace!r}: {reason}")


class InstallError(ShelfCacheError):
    """Precaching failed; the installing version is not eligible to activate."""

    def __init__(self, version: str, url: Optional[str] = None, reason: str = ""):
        self.version = version
        self.url = url
        self.reason = reason
        where = f" ({url})" if url else ""
        super().__init__(f"Install of {version} failed{where}: {reason}")


class InvalidTransition(ShelfCacheError):
    """A lifecycle transition is not allowed from the current state."""

    def __init__(self, version: str, current: str, target: str):
        self.version = version
        self.current = current
        self.target = target
        super().__init__(f"Worker {version} cannot go from {current} to {target}")


class PreloadUnsupported(ShelfCacheError):
    """The host cannot start navigation fetches ahead of the worker."""


__all__ = [
    "ShelfCacheError",
    "NetworkUnavailable",
    "StoreWriteError",
    "InstallError",
    "InvalidTransition",
    "PreloadUnsupported",
]
