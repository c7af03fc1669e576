"""ShelfCache Messages - Control Message Protocol.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Control messages arrive either as a bare string (``"PING"``) or as a
mapping with a ``type`` field (``{"type": "CLEAR_CACHES"}``); both forms
are accepted for every type. Replies are plain dicts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """Inbound control message types."""

    SKIP_WAITING = "SKIP_WAITING"
    PING = "PING"
    GET_VERSION = "GET_VERSION"
    CLEAR_CACHES = "CLEAR_CACHES"


class ReplyType(str, Enum):
    """Outbound reply types."""

    PONG = "PONG"
    SW_VERSION = "SW_VERSION"
    CLEAR_DONE = "CLEAR_DONE"


@dataclass
class ControlMessage:
    """A parsed control message.

    Attributes:
        type: Message type
        payload: Extra fields of a mapping-form message
    """

    type: MessageType
    payload: Dict[str, Any] = field(default_factory=dict)


def parse_message(data: Any) -> Optional[ControlMessage]:
    """Parse a raw control message.

    Args:
        data: String or mapping as posted by the page

    Returns:
        Parsed message, or None if it is not a known control message
    """
    if isinstance(data, str):
        name, payload = data, {}
    elif isinstance(data, dict) and isinstance(data.get("type"), str):
        name = data["type"]
        payload = {k: v for k, v in data.items() if k != "type"}
    else:
        return None

    try:
        return ControlMessage(MessageType(name), payload)
    except ValueError:
        logger.debug(f"Ignoring unknown control message {name!r}")
        return None


def pong(version: str) -> Dict[str, str]:
    return {"type": ReplyType.PONG.value, "version": version}


def version_reply(version: str) -> Dict[str, str]:
    return {"type": ReplyType.SW_VERSION.value, "version": version}


def clear_done() -> Dict[str, str]:
    return {"type": ReplyType.CLEAR_DONE.value}


__all__ = [
    "ControlMessage",
    "MessageType",
    "ReplyType",
    "clear_done",
    "parse_message",
    "pong",
    "version_reply",
]
