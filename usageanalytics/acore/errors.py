"""Errors raised by the analytics core."""

from __future__ import annotations

import json
from typing import Any


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    return repr(value)


class AnalyticsError(Exception):
    """Base class for every error raised by the analytics core."""


class ConfigError(AnalyticsError, ValueError):
    """A configuration field holds an impossible value."""

    def __init__(self, reason: str, field: str, value: Any) -> None:
        super().__init__(reason, field, value)
        self.reason = reason
        self.field = field
        self.value = value

    def __str__(self) -> str:
        return (
            f"analytics.NewWithConfig: {self.reason} "
            f"(analytics.Config.{self.field}: {_format_value(self.value)})"
        )


class FieldError(AnalyticsError, ValueError):
    """A message field was not initialised properly."""

    def __init__(self, type_name: str, name: str, value: Any) -> None:
        super().__init__(type_name, name, value)
        self.type_name = type_name
        self.name = name
        self.value = value

    def __str__(self) -> str:
        return f"{self.type_name}.{self.name}: invalid field value: {_format_value(self.value)}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldError):
            return NotImplemented
        return (self.type_name, self.name, self.value) == (
            other.type_name,
            other.name,
            other.value,
        )

    def __hash__(self) -> int:
        return hash((self.type_name, self.name, _format_value(self.value)))


class ClientClosedError(AnalyticsError):
    """The client was used after it had been closed."""

    def __init__(self, message: str = "the client was already closed") -> None:
        super().__init__(message)


class TooManyRequestsError(AnalyticsError):
    """Too many requests are in flight to accept more messages."""

    def __init__(self, message: str = "too many requests are already in-flight") -> None:
        super().__init__(message)


class MessageTooBigError(AnalyticsError):
    """The JSON form of a message exceeds the allowed size."""

    def __init__(
        self, message: str = "the message exceeds the maximum allowed size"
    ) -> None:
        super().__init__(message)