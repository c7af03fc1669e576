"""ShelfCache Expiry - Timestamp Header Codec.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Cached responses carry their own age: a synthetic header holding the
Unix epoch milliseconds at which they were stored (images) or fetched
(API responses). Age is computed from the entry itself, so no side
index is needed.
"""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from shelfcache_core.clock import Clock
    from shelfcache_core.http.message import Response

logger = logging.getLogger(__name__)

STORED_AT_HEADER = "sw-cached-at"
FETCHED_AT_HEADER = "sw-fetched-at"

# Never forwarded to the network
INTERNAL_HEADERS = (STORED_AT_HEADER, FETCHED_AT_HEADER)


class ExpiryCodec:
    """Stamps responses with a timestamp header and checks their age.

    Example:
        codec = ExpiryCodec(STORED_AT_HEADER, ttl_seconds=30 * 86400, clock=clock)
        stored = codec.stamp(response)
        codec.is_fresh(stored)  # True until the TTL has elapsed
    """

    def __init__(
        self,
        header: str,
        ttl_seconds: float,
        clock: "Clock",
        require_stamp: bool = False,
    ):
        """Initialize codec.

        Args:
            header: Name of the timestamp header
            ttl_seconds: Maximum age in seconds
            clock: Time source
            require_stamp: Treat responses without a stamp as expired
        """
        self.header = header
        self.ttl_seconds = ttl_seconds
        self.require_stamp = require_stamp
        self._clock = clock

    @property
    def ttl_ms(self) -> int:
        return int(self.ttl_seconds * 1000)

    def stamp(self, response: "Response") -> "Response":
        """Return a copy of the response stamped with the current time.

        Args:
            response: Response to stamp

        Returns:
            Stamped copy
        """
        return response.with_header(self.header, str(self._clock.now_ms()))

    def timestamp(self, response: "Response") -> Optional[int]:
        """Read the stamp from a response.

        Args:
            response: Cached response

        Returns:
            Epoch milliseconds or None if absent or unparseable
        """
        raw = response.headers.get(self.header)
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            logger.warning(f"Ignoring malformed {self.header} header: {raw!r}")
            return None

    def age_ms(self, response: "Response") -> Optional[int]:
        """Get response age in milliseconds, or None if unstamped."""
        ts = self.timestamp(response)
        if ts is None:
            return None
        return self._clock.now_ms() - ts

    def is_fresh(self, response: "Response") -> bool:
        """Check whether a cached response may still be served.

        Fresh while ``age <= ttl``; a response older than the TTL is
        treated as absent for reads.

        Args:
            response: Cached response

        Returns:
            True if within TTL
        """
        age = self.age_ms(response)
        if age is None:
            return not self.require_stamp
        return age <= self.ttl_ms

    def __repr__(self) -> str:
        return f"ExpiryCodec(header={self.header!r}, ttl={self.ttl_seconds}s)"


__all__ = [
    "ExpiryCodec",
    "STORED_AT_HEADER",
    "FETCHED_AT_HEADER",
    "INTERNAL_HEADERS",
]
