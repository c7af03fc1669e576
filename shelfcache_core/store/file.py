"""ShelfCache File Store - File-Based Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from shelfcache_core.cache.entry import CacheEntry
from shelfcache_core.errors import StoreWriteError
from shelfcache_core.protocol.serializer import get_serializer
from shelfcache_core.store.backend import StorageBackend, StorageConfig

logger = logging.getLogger(__name__)

NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9._@-]+$")


@dataclass
class FileConfig(StorageConfig):
    """File-store configuration.

    Attributes:
        base_path: Root directory for namespaces
    """

    name: str = "file"
    base_path: str = ".shelfcache"


class FileStore(StorageBackend):
    """File-based storage backend.

    Persists entries to disk so the cache survives restarts. Layout:

        <base>/namespaces.json       namespace names in creation order
        <base>/<ns>/index.json       keys in insertion order
        <base>/<ns>/<sha256>.entry   serialized entries

    Writes go to a temporary file and are renamed into place. File I/O
    is synchronous, so each call completes without yielding to the loop.

    Example:
        store = FileStore(FileConfig(base_path="/var/cache/shelf"))
        await store.put("bse-img", "GET https://x/a.png", entry)
    """

    NAMESPACES_FILE = "namespaces.json"
    INDEX_FILE = "index.json"

    def __init__(self, config: Optional[FileConfig] = None):
        """Initialize file store.

        Args:
            config: File store configuration
        """
        super().__init__(config or FileConfig())
        self.config: FileConfig
        self.base_path = Path(self.config.base_path)
        self._serializer = get_serializer(self.config.serializer)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _ns_dir(self, namespace: str) -> Path:
        if not NAMESPACE_PATTERN.match(namespace):
            raise ValueError(f"Invalid namespace name: {namespace!r}")
        return self.base_path / namespace

    def _entry_path(self, namespace: str, key: str) -> Path:
        # Hash keys so URLs never leak into file names
        filename = hashlib.sha256(key.encode()).hexdigest()
        return self._ns_dir(namespace) / f"{filename}.entry"

    def _read_json(self, path: Path) -> List[str]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return []

    def _write_atomic(self, path: Path, data: bytes) -> None:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(temp_path, "wb") as f:
                f.write(data)
            os.replace(temp_path, path)
        finally:
            if temp_path.exists():
                temp_path.unlink()

    def _write_json(self, path: Path, value: List[str]) -> None:
        self._write_atomic(path, json.dumps(value).encode("utf-8"))

    def _load_index(self, namespace: str) -> List[str]:
        return self._read_json(self._ns_dir(namespace) / self.INDEX_FILE)

    async def get(self, namespace: str, key: str) -> Optional[CacheEntry]:
        path = self._entry_path(namespace, key)
        self._stats.reads += 1

        try:
            with open(path, "rb") as f:
                data = self._serializer.loads(f.read())
            return CacheEntry.from_dict(data)

        except FileNotFoundError:
            return None
        except Exception as e:
            logger.error(f"Error reading {key} from {namespace}: {e}")
            self._stats.record_error(str(e))
            return None

    async def put(self, namespace: str, key: str, entry: CacheEntry) -> None:
        ns_dir = self._ns_dir(namespace)

        try:
            index = self._load_index(namespace)
            replacing = key in index

            if self.config.max_entries and not replacing:
                if self._total_entries() >= self.config.max_entries:
                    raise StoreWriteError(namespace, key, "entry quota exceeded")
            if self.config.max_bytes:
                if self.disk_usage() + entry.metadata.size_bytes > self.config.max_bytes:
                    raise StoreWriteError(namespace, key, "byte quota exceeded")

            if not ns_dir.exists():
                ns_dir.mkdir(parents=True)
                namespaces = self._read_json(self.base_path / self.NAMESPACES_FILE)
                if namespace not in namespaces:
                    namespaces.append(namespace)
                    self._write_json(self.base_path / self.NAMESPACES_FILE, namespaces)

            entry.namespace = namespace
            data = self._serializer.dumps(entry.to_dict(), compress=self.config.compression)
            self._write_atomic(self._entry_path(namespace, key), data)

            if replacing:
                index.remove(key)
            index.append(key)
            self._write_json(ns_dir / self.INDEX_FILE, index)
            self._stats.writes += 1

        except StoreWriteError as e:
            self._stats.record_error(str(e))
            raise
        except OSError as e:
            logger.error(f"Error writing {key} to {namespace}: {e}")
            self._stats.record_error(str(e))
            raise StoreWriteError(namespace, key, str(e)) from e

    async def delete(self, namespace: str, key: str) -> bool:
        ns_dir = self._ns_dir(namespace)
        index = self._load_index(namespace)
        if key not in index:
            return False

        try:
            index.remove(key)
            self._write_json(ns_dir / self.INDEX_FILE, index)
            path = self._entry_path(namespace, key)
            if path.exists():
                path.unlink()
            self._stats.deletes += 1
            return True

        except OSError as e:
            logger.error(f"Error deleting {key} from {namespace}: {e}")
            self._stats.record_error(str(e))
            return False

    async def keys(self, namespace: str) -> List[str]:
        return self._load_index(namespace)

    async def delete_namespace(self, namespace: str) -> bool:
        ns_dir = self._ns_dir(namespace)
        namespaces = self._read_json(self.base_path / self.NAMESPACES_FILE)
        if not ns_dir.exists() and namespace not in namespaces:
            return False

        shutil.rmtree(ns_dir, ignore_errors=True)
        if namespace in namespaces:
            namespaces.remove(namespace)
            self._write_json(self.base_path / self.NAMESPACES_FILE, namespaces)
        self._stats.namespaces_deleted += 1
        return True

    async def list_namespaces(self) -> List[str]:
        return self._read_json(self.base_path / self.NAMESPACES_FILE)

    def _total_entries(self) -> int:
        return sum(
            len(self._load_index(ns))
            for ns in self._read_json(self.base_path / self.NAMESPACES_FILE)
        )

    def disk_usage(self) -> int:
        """Get total bytes used by entry files.

        Returns:
            Size in bytes
        """
        return sum(path.stat().st_size for path in self.base_path.glob("*/*.entry"))

    def __repr__(self) -> str:
        return f"FileStore(path={self.base_path})"


__all__ = ["FileStore", "FileConfig"]
