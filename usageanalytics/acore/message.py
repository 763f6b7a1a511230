"""Message interfaces, JSON encoding and batching of queued messages."""

from __future__ import annotations

import base64
import dataclasses
import json
import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import MessageTooBigError
from .jsonutil import struct_to_map

LIBRARY_NAME = "cf-analytics-python"

MAX_BATCH_BYTES = 500_000
MAX_MESSAGE_BYTES = 32_000

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class Message(ABC):
    """An analytics object that a client can send."""

    @abstractmethod
    def validate(self) -> None:
        """Raise FieldError if the message is malformed."""

    @abstractmethod
    def apify(self) -> dict[str, Any]:
        """Return the form of the message sent to the API."""


class Callback(ABC):
    """Notified when queued messages are delivered or dropped."""

    @abstractmethod
    def success(self, message: Any) -> None:
        """Called for every message that the API accepted."""

    @abstractmethod
    def failure(self, message: Any, error: BaseException) -> None:
        """Called for every message that is dropped after failing to send."""


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
    )
    if ts.microsecond:
        text += "." + f"{ts.microsecond:06d}".rstrip("0")
    offset = ts.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _plain(value: Any) -> Any:
    """Turn a value into JSON-ready builtins."""
    if isinstance(value, Enum):
        return _plain(value.value)
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, bool) or value is None or isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {name: _plain(item) for name, item in struct_to_map(value).items()}
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(item) for item in value]
    return value


def _to_json(value: Any) -> bytes:
    text = json.dumps(
        _plain(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def make_timestamp(value: datetime | None, default: datetime) -> datetime:
    """Return ``value`` unless it is unset, in which case ``default``."""
    return default if value is None else value


@dataclass(frozen=True)
class QueuedMessage:
    """An API message together with its JSON encoding."""

    message: Any
    data: bytes

    def size(self) -> int:
        """Bytes taken in a batch, including the separating comma."""
        return len(self.data) + 1


def make_message(api_message: Any, max_bytes: int) -> QueuedMessage:
    """Encode a message, raising MessageTooBigError if it exceeds ``max_bytes``."""
    data = _to_json(api_message)
    if len(data) > max_bytes:
        raise MessageTooBigError()
    return QueuedMessage(api_message, data)


@dataclass
class MessageQueue:
    """Accumulates messages until a batch limit in count or bytes is reached."""

    max_batch_size: int
    max_batch_bytes: int
    pending: list[QueuedMessage] = field(default_factory=list)
    pending_bytes: int = 0

    def push(self, message: QueuedMessage) -> list[QueuedMessage] | None:
        """Queue a message; return a batch to send if a limit was reached."""
        batch: list[QueuedMessage] | None = None
        if self.pending_bytes + message.size() > self.max_batch_bytes:
            batch = self.flush() or None

        self.pending.append(message)
        self.pending_bytes += len(message.data)

        if batch is None and len(self.pending) == self.max_batch_size:
            batch = self.flush()
        return batch

    def flush(self) -> list[QueuedMessage]:
        """Remove and return every pending message."""
        batch, self.pending, self.pending_bytes = self.pending, [], 0
        return batch