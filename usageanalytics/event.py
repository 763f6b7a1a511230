"""The event interface, the event registry and shared event types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, TypeVar


class Event(ABC):
    """A product analytics event that is tracked.

    ``event_type`` has the form ``namespace:entity.action``, for example
    ``cf:request.created``; ``emitted_when`` describes when it is sent.
    """

    event_type: ClassVar[str]
    emitted_when: ClassVar[str]

    @abstractmethod
    def user_id(self) -> str:
        """Return the identifier of the user the event is attributed to."""

    @classmethod
    @abstractmethod
    def fixture(cls) -> "Event":
        """Return a sample event for tests and examples."""


E = TypeVar("E", bound="type[Event]")

ALL_EVENTS: dict[str, type[Event]] = {}


def register_event(event_cls: E) -> E:
    """Record an event class under its event type; usable as a decorator."""
    ALL_EVENTS[event_cls.event_type] = event_cls
    return event_cls


@dataclass(frozen=True)
class MarshalContext:
    """Extra context handed to events that marshal themselves."""

    deployment_id: str | None = None


@dataclass
class Provider:
    """An access provider, identified by publisher, name and version."""

    publisher: str = field(default="", metadata={"json": "publisher"})
    name: str = field(default="", metadata={"json": "name"})
    version: str = field(default="", metadata={"json": "version"})
    # only used for target groups
    kind: str = field(default="", metadata={"json": "kind,omitempty"})