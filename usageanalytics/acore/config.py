"""Configuration of the batching analytics client."""

from __future__ import annotations

import dataclasses
import os
import string
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from .backo import default_backo
from .errors import ConfigError
from .logger import Logger, default_logger

DEFAULT_ENDPOINT = "https://t.commonfate.io"
DEFAULT_INTERVAL = 5.0
DEFAULT_BATCH_SIZE = 250
DEFAULT_MAX_CONCURRENT_REQUESTS = 1000

Transport = Callable[[str, bytes, "dict[str, str]", float], "tuple[int, str, bytes]"]

_KSUID_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
_KSUID_EPOCH = 1_400_000_000
_KSUID_LENGTH = 27


def _urllib_transport(
    url: str, body: bytes, headers: dict[str, str], timeout: float
) -> tuple[int, str, bytes]:
    request = urllib.request.Request(url, data=body, headers=headers, method="POST")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.status, response.reason, response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.code, str(exc.reason), exc.read()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_ksuid() -> str:
    """Return a new 27-character, time-ordered unique identifier."""
    timestamp = (int(time.time()) - _KSUID_EPOCH) & 0xFFFFFFFF
    raw = timestamp.to_bytes(4, "big") + os.urandom(16)
    number = int.from_bytes(raw, "big")
    chars = []
    while number:
        number, digit = divmod(number, 62)
        chars.append(_KSUID_ALPHABET[digit])
    return "".join(reversed(chars)).rjust(_KSUID_LENGTH, "0")


@dataclass
class Config:
    """Options of the batching client; zero values mean the defaults.

    Durations are in seconds. ``transport`` posts a body to a URL:
    ``transport(url, body, headers, timeout) -> (status, reason, body)``,
    raising ``OSError`` when the request cannot be made.
    """

    endpoint: str = ""
    interval: float = 0.0
    transport: Transport | None = None
    logger: Logger | None = None
    callback: Any = None
    batch_size: int = 0
    verbose: bool = False
    retry_after: Callable[[int], float] | None = None
    uid: Callable[[], str] | None = None
    now: Callable[[], datetime] | None = None
    max_concurrent_requests: int = 0

    def validate(self) -> None:
        """Raise ConfigError if a field holds an impossible value."""
        if self.interval < 0:
            raise ConfigError(
                "negative time intervals are not supported", "interval", self.interval
            )
        if self.batch_size < 0:
            raise ConfigError(
                "negative batch sizes are not supported", "batch_size", self.batch_size
            )

    def with_defaults(self) -> "Config":
        """Return a copy with every unset field filled with its default."""
        return dataclasses.replace(
            self,
            endpoint=self.endpoint or DEFAULT_ENDPOINT,
            interval=self.interval or DEFAULT_INTERVAL,
            transport=self.transport or _urllib_transport,
            logger=self.logger or default_logger(),
            batch_size=self.batch_size or DEFAULT_BATCH_SIZE,
            retry_after=self.retry_after or default_backo().duration,
            uid=self.uid or new_ksuid,
            now=self.now or _utc_now,
            max_concurrent_requests=self.max_concurrent_requests
            or DEFAULT_MAX_CONCURRENT_REQUESTS,
        )