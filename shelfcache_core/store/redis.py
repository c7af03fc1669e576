"""ShelfCache Redis Store - Redis Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import redis.asyncio as aioredis

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.errors import StoreWriteError
from shelfcache_core.protocol.serializer import get_serializer
from shelfcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
    """

    name: str = "redis"
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "shelfcache:"


class RedisStore(StorageBackend):
    """Redis storage backend.

    Key layout (with the configured prefix):

        <prefix>namespaces          sorted set of namespace names
        <prefix>seq                 insertion counter
        <prefix>ns:<ns>:order       sorted set of keys scored by insertion
        <prefix>ns:<ns>:e:<key>     serialized entry

    Every put takes a fresh counter value, so the order set enumerates keys
    oldest-first and an overwrite moves a key to the newest position.

    Example:
        store = RedisStore(RedisConfig(host="redis.local"))
        await store.put("bse-api-runtime", key, entry)
    """

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[Any] = None):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Existing redis.asyncio client to use
        """
        super().__init__(config or RedisConfig())
        self.config: RedisConfig
        self._client = client
        self._pool: Optional[aioredis.ConnectionPool] = None
        self._serializer = get_serializer(self.config.serializer)

    def _ensure_connected(self) -> Any:
        """Ensure a Redis client exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        self._pool = aioredis.ConnectionPool(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            max_connections=self.config.max_connections,
            decode_responses=False,  # We handle serialization
        )
        self._client = aioredis.Redis(connection_pool=self._pool)
        logger.info(f"Using Redis at {self.config.host}:{self.config.port}")
        return self._client

    def _namespaces_key(self) -> str:
        return f"{self.config.prefix}namespaces"

    def _seq_key(self) -> str:
        return f"{self.config.prefix}seq"

    def _order_key(self, namespace: str) -> str:
        return f"{self.config.prefix}ns:{namespace}:order"

    def _entry_key(self, namespace: str, key: str) -> str:
        return f"{self.config.prefix}ns:{namespace}:e:{key}"

    @staticmethod
    def _decode(value: Any) -> str:
        return value.decode() if isinstance(value, bytes) else value

    async def get(self, namespace: str, key: str) -> Optional[CacheEntry]:
        try:
            client = self._ensure_connected()
            self._stats.reads += 1
            data = await client.get(self._entry_key(namespace, key))
            if data is None:
                return None
            return CacheEntry.from_dict(self._serializer.loads(data))

        except Exception as e:
            logger.error(f"Redis get error: {e}")
            self._stats.record_error(str(e))
            return None

    async def put(self, namespace: str, key: str, entry: CacheEntry) -> None:
        try:
            client = self._ensure_connected()

            if self.config.max_entries:
                exists = await client.zscore(self._order_key(namespace), key)
                if exists is None and await self._total_entries(client) >= self.config.max_entries:
                    raise StoreWriteError(namespace, key, "entry quota exceeded")

            entry.namespace = namespace
            data = self._serializer.dumps(entry.to_dict(), compress=self.config.compression)
            seq = await client.incr(self._seq_key())

            pipe = client.pipeline(transaction=True)
            pipe.set(self._entry_key(namespace, key), data)
            pipe.zadd(self._order_key(namespace), {key: seq})
            pipe.zadd(self._namespaces_key(), {namespace: seq}, nx=True)
            await pipe.execute()

            self._stats.writes += 1

        except StoreWriteError as e:
            self._stats.record_error(str(e))
            raise
        except Exception as e:
            logger.error(f"Redis put error: {e}")
            self._stats.record_error(str(e))
            raise StoreWriteError(namespace, key, str(e)) from e

    async def delete(self, namespace: str, key: str) -> bool:
        try:
            client = self._ensure_connected()
            pipe = client.pipeline(transaction=True)
            pipe.delete(self._entry_key(namespace, key))
            pipe.zrem(self._order_key(namespace), key)
            removed, _ = await pipe.execute()
            if removed:
                self._stats.deletes += 1
            return removed > 0

        except Exception as e:
            logger.error(f"Redis delete error: {e}")
            self._stats.record_error(str(e))
            return False

    async def keys(self, namespace: str) -> List[str]:
        try:
            client = self._ensure_connected()
            members = await client.zrange(self._order_key(namespace), 0, -1)
            return [self._decode(m) for m in members]

        except Exception as e:
            logger.error(f"Redis keys error: {e}")
            self._stats.record_error(str(e))
            return []

    async def delete_namespace(self, namespace: str) -> bool:
        try:
            client = self._ensure_connected()
            keys = await self.keys(namespace)

            pipe = client.pipeline(transaction=True)
            for key in keys:
                pipe.delete(self._entry_key(namespace, key))
            pipe.delete(self._order_key(namespace))
            pipe.zrem(self._namespaces_key(), namespace)
            results = await pipe.execute()

            existed = results[-1] > 0
            if existed:
                self._stats.namespaces_deleted += 1
            return existed

        except Exception as e:
            logger.error(f"Redis delete_namespace error: {e}")
            self._stats.record_error(str(e))
            return False

    async def list_namespaces(self) -> List[str]:
        try:
            client = self._ensure_connected()
            members = await client.zrange(self._namespaces_key(), 0, -1)
            return [self._decode(m) for m in members]

        except Exception as e:
            logger.error(f"Redis list_namespaces error: {e}")
            self._stats.record_error(str(e))
            return []

    async def count(self, namespace: str) -> int:
        client = self._ensure_connected()
        return await client.zcard(self._order_key(namespace))

    async def _total_entries(self, client: Any) -> int:
        total = 0
        for namespace in await self.list_namespaces():
            total += await client.zcard(self._order_key(namespace))
        return total

    async def close(self) -> None:
        """Close Redis connection."""
        if self._pool is not None:
            await self._client.aclose()
            await self._pool.disconnect()
            self._pool = None
            self._client = None

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig"]
