"""ShelfCache Entry - Stored Response Record.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from shelfcache_core.http.message import Response, ResponseType


@dataclass
class EntryMetadata:
    """Store-side metadata for a cache entry.

    Attributes:
        inserted_at: When the entry was written (seconds)
        size_bytes: Payload size in bytes
        checksum: Payload checksum for integrity
        source: Where the payload came from (network, preload, precache)
    """

    inserted_at: float = field(default_factory=time.time)
    size_bytes: int = 0
    checksum: Optional[str] = None
    source: Optional[str] = None


@dataclass
class CacheEntry:
    """A response held in a cache namespace.

    Attributes:
        key: Normalized request identity (``GET <url>``)
        url: Response URL
        status: HTTP status
        status_text: Reason phrase
        headers: Header pairs in original order
        body: Payload bytes
        namespace: Owning namespace name
        metadata: Entry metadata
    """

    key: str
    url: str = ""
    status: int = 200
    status_text: str = ""
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    namespace: str = ""
    metadata: EntryMetadata = field(default_factory=EntryMetadata)

    def __post_init__(self):
        if self.metadata.size_bytes == 0:
            self.metadata.size_bytes = len(self.body)
        if self.metadata.checksum is None:
            self.metadata.checksum = self._calculate_checksum()

    @classmethod
    def from_response(
        cls,
        key: str,
        response: Response,
        namespace: str = "",
        source: Optional[str] = None,
    ) -> "CacheEntry":
        """Build an entry from a response.

        Args:
            key: Cache key
            response: Response to store
            namespace: Owning namespace
            source: Payload source tag

        Returns:
            CacheEntry instance
        """
        return cls(
            key=key,
            url=response.url,
            status=response.status,
            status_text=response.status_text or "",
            headers=list(response.headers.multi_items()),
            body=response.body,
            namespace=namespace,
            metadata=EntryMetadata(source=source),
        )

    def to_response(self) -> Response:
        """Rebuild the response this entry holds."""
        return Response(
            status=self.status,
            status_text=self.status_text,
            headers=list(self.headers),
            body=self.body,
            type=ResponseType.BASIC,
            url=self.url,
        )

    def _calculate_checksum(self) -> str:
        return hashlib.md5(self.body).hexdigest()[:16]

    def verify_integrity(self) -> bool:
        """Verify payload integrity via checksum.

        Returns:
            True if integrity check passes
        """
        return self._calculate_checksum() == self.metadata.checksum

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "key": self.key,
            "url": self.url,
            "status": self.status,
            "status_text": self.status_text,
            "headers": [list(pair) for pair in self.headers],
            "body": self.body,
            "namespace": self.namespace,
            "metadata": {
                "inserted_at": self.metadata.inserted_at,
                "size_bytes": self.metadata.size_bytes,
                "checksum": self.metadata.checksum,
                "source": self.metadata.source,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from dictionary.

        Args:
            data: Dictionary data

        Returns:
            CacheEntry instance
        """
        meta = data.get("metadata", {})
        metadata = EntryMetadata(
            inserted_at=meta.get("inserted_at", time.time()),
            size_bytes=meta.get("size_bytes", 0),
            checksum=meta.get("checksum"),
            source=meta.get("source"),
        )

        return cls(
            key=data["key"],
            url=data.get("url", ""),
            status=data.get("status", 200),
            status_text=data.get("status_text", ""),
            headers=[(name, value) for name, value in data.get("headers", [])],
            body=bytes(data.get("body", b"")),
            namespace=data.get("namespace", ""),
            metadata=metadata,
        )

    def __repr__(self) -> str:
        return (
            f"CacheEntry(key={self.key!r}, status={self.status}, "
            f"bytes={self.metadata.size_bytes})"
        )


__all__ = ["CacheEntry", "EntryMetadata"]
