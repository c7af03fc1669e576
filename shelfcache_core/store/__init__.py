"""Store module - Namespaced storage backends for cached responses."""

from typing import Optional

from shelfcache_core.store.backend import (
    StorageBackend,
    StorageStats,
    StorageConfig,
)
from shelfcache_core.store.memory import MemoryStore
from shelfcache_core.store.file import FileStore, FileConfig
from shelfcache_core.store.redis import RedisStore, RedisConfig


def create_store(config: Optional[StorageConfig] = None) -> StorageBackend:
    """Build a storage backend from its configuration.

    Args:
        config: StorageConfig, FileConfig or RedisConfig

    Returns:
        Backend instance

    Raises:
        ValueError: If the backend name is unknown
    """
    config = config or StorageConfig()
    if config.name == "memory":
        return MemoryStore(config)
    if config.name == "file":
        if not isinstance(config, FileConfig):
            raise ValueError("File store requires a FileConfig")
        return FileStore(config)
    if config.name == "redis":
        if not isinstance(config, RedisConfig):
            raise ValueError("Redis store requires a RedisConfig")
        return RedisStore(config)
    raise ValueError(f"Unknown storage backend: {config.name}")


__all__ = [
    "StorageBackend",
    "StorageStats",
    "StorageConfig",
    "MemoryStore",
    "FileStore",
    "FileConfig",
    "RedisStore",
    "RedisConfig",
    "create_store",
]
