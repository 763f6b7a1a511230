"""Loggers used by the analytics client for background messages."""

from __future__ import annotations

import sys
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, TextIO


class Logger(ABC):
    """Destination for the client's informational and error messages."""

    @abstractmethod
    def logf(self, format: str, *args: Any) -> None:
        """Log a regular message."""

    @abstractmethod
    def errorf(self, format: str, *args: Any) -> None:
        """Log an error message."""


class StdLogger(Logger):
    """Writes prefixed lines to a text stream (stderr when none is given)."""

    def __init__(
        self,
        stream: TextIO | None = None,
        prefix: str = "",
        timestamps: bool = False,
    ) -> None:
        self.stream = stream
        self.prefix = prefix
        self.timestamps = timestamps
        self._lock = threading.Lock()

    def _write(self, level: str, format: str, args: tuple[Any, ...]) -> None:
        text = format % args if args else format
        stamp = time.strftime("%Y/%m/%d %H:%M:%S ") if self.timestamps else ""
        line = f"{self.prefix}{stamp}{level}: {text}"
        if not line.endswith("\n"):
            line += "\n"
        stream = self.stream if self.stream is not None else sys.stderr
        with self._lock:
            stream.write(line)
            stream.flush()

    def logf(self, format: str, *args: Any) -> None:
        self._write("INFO", format, args)

    def errorf(self, format: str, *args: Any) -> None:
        self._write("ERROR", format, args)


def default_logger() -> StdLogger:
    """Logger writing timestamped lines to stderr."""
    return StdLogger(None, "cf-analytics ", True)