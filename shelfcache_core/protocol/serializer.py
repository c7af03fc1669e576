"""ShelfCache Serializer - Entry Serialization for Persistent Stores.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import base64
import gzip
import json
import logging
import pickle
from abc import ABC, abstractmethod
from typing import Any, Dict

import msgpack

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


class Serializer(ABC):
    """Abstract serializer for cache entry dictionaries.

    Implementations handle different serialization formats. Payloads
    may optionally be gzip-compressed; compressed data is recognized on
    load by its magic bytes, so readers need no extra flag.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: Value to serialize

        Returns:
            Serialized bytes
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: Serialized bytes

        Returns:
            Deserialized value
        """
        pass

    def dumps(self, value: Any, compress: bool = False) -> bytes:
        """Serialize with optional gzip compression.

        Args:
            value: Value to serialize
            compress: Compress when it makes the payload smaller

        Returns:
            Bytes to persist
        """
        data = self.serialize(value)
        if compress:
            compressed = gzip.compress(data)
            if len(compressed) < len(data):
                return compressed
        return data

    def loads(self, data: bytes) -> Any:
        """Inverse of dumps.

        Args:
            data: Persisted bytes

        Returns:
            Deserialized value
        """
        if data[:2] == GZIP_MAGIC:
            data = gzip.decompress(data)
        return self.deserialize(data)


def _encode_bytes(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {"__bytes__": base64.b64encode(bytes(value)).decode("ascii")}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_bytes(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and "__bytes__" in obj:
        return base64.b64decode(obj["__bytes__"])
    return obj


class JSONSerializer(Serializer):
    """JSON serializer; byte strings are carried as base64.

    Human-readable, at the cost of a larger payload.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, default=_encode_bytes, separators=(",", ":")).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"), object_hook=_decode_bytes)


class PickleSerializer(Serializer):
    """Python pickle serializer.

    Fast, but only safe for stores this process alone writes to.
    """

    @property
    def format_name(self) -> str:
        return "pickle"

    def serialize(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def deserialize(self, data: bytes) -> Any:
        return pickle.loads(data)


class MsgPackSerializer(Serializer):
    """MessagePack serializer.

    Compact binary format with native byte strings; the default for
    persistent stores.
    """

    @property
    def format_name(self) -> str:
        return "msgpack"

    def serialize(self, value: Any) -> bytes:
        return msgpack.packb(value, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False)


class SerializerRegistry:
    """Registry of serializers."""

    def __init__(self):
        self._serializers: Dict[str, Serializer] = {}

        # Register default serializers
        self.register(MsgPackSerializer())
        self.register(JSONSerializer())
        self.register(PickleSerializer())

    def register(self, serializer: Serializer) -> None:
        """Register a serializer.

        Args:
            serializer: Serializer to register
        """
        self._serializers[serializer.format_name] = serializer

    def get(self, format_name: str) -> Serializer:
        """Get serializer by format.

        Args:
            format_name: Format name

        Returns:
            Serializer instance

        Raises:
            KeyError: If format not found
        """
        if format_name not in self._serializers:
            raise KeyError(f"Unknown serializer: {format_name}")
        return self._serializers[format_name]


_registry = SerializerRegistry()


def get_serializer(format_name: str) -> Serializer:
    """Get a registered serializer by name."""
    return _registry.get(format_name)


__all__ = [
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "SerializerRegistry",
    "get_serializer",
]
