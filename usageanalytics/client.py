"""The analytics client used to track product events."""

from __future__ import annotations

import logging
import os
import sys
import threading
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

from .acore.capture import Capture
from .acore.config import Config as CoreConfig
from .acore.errors import AnalyticsError, ConfigError
from .acore.message import Message
from .acore.properties import Groups
from .acore.transport import CoreClient, NoopClient, new_client
from .encoding import event_to_properties, hash_value
from .event import Event, MarshalContext

DEV_ENDPOINT = "https://t-dev.commonfate.io"
DEFAULT_ENDPOINT = "https://t.commonfate.io"

_LOGGER_NAME = "cf-analytics"
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}


@dataclass(frozen=True)
class Config:
    """Configuration of the analytics client."""

    endpoint: str = ""
    enabled: bool = False
    verbose: bool = False


DISABLED = Config(endpoint="", enabled=False, verbose=False)
DEVELOPMENT = Config(endpoint=DEV_ENDPOINT, enabled=True, verbose=True)
DEFAULT = Config(endpoint=DEFAULT_ENDPOINT, enabled=True, verbose=False)


@runtime_checkable
class _EventMarshaller(Protocol):
    def marshal_event(self, context: MarshalContext) -> list[Message]: ...


def _level_from_env() -> int:
    return _LEVELS.get(
        os.environ.get("CF_ANALYTICS_LOG_LEVEL", "").lower(), logging.CRITICAL
    )


def _default_logger() -> logging.Logger:
    log = logging.getLogger(_LOGGER_NAME)
    log.setLevel(_level_from_env())
    if not log.handlers:
        log.addHandler(logging.StreamHandler(sys.stderr))
    return log


def endpoint_or_default(endpoint: str) -> str:
    """Return ``endpoint``, or the default endpoint if it is empty."""
    return endpoint or DEFAULT_ENDPOINT


class Client:
    """Tracks events and hands them to a core client for delivery.

    ``on_failure`` is called with any event that could not be dispatched.
    """

    def __init__(
        self, core_client: CoreClient, logger: logging.Logger | None = None
    ) -> None:
        self.core_client = core_client
        self.log = logger if logger is not None else _default_logger()
        self.on_failure: Callable[[Event], Any] | None = None
        self._lock = threading.Lock()
        self._deployment_id: str | None = None

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the core client, logging rather than raising on failure."""
        self.log.debug(
            "closing analytics client url=%s", self.core_client.endpoint_url()
        )
        try:
            self.core_client.close()
        except AnalyticsError as exc:
            self.log.error("error closing client: %s", exc)

    def set_deployment_id(self, deployment_id: str) -> None:
        """Attach events to a deployment; an empty ID is ignored."""
        if not deployment_id:
            return
        with self._lock:
            self._deployment_id = deployment_id
        self.log.debug("set deployment deployment.id=%s", deployment_id)

    def _current_deployment(self) -> str | None:
        with self._lock:
            return self._deployment_id

    def track(self, event: Event) -> None:
        """Send an event; failures go to ``on_failure`` instead of raising."""
        if isinstance(event, _EventMarshaller):
            context = MarshalContext(deployment_id=self._current_deployment())
            try:
                messages = event.marshal_event(context)
            except (ValueError, AnalyticsError) as exc:
                self.log.error("error marshalling analytics events: %s", exc)
                self._failed(event)
                return
            for message in messages:
                if not self._enqueue_and_log(message):
                    self._failed(event)
            return

        try:
            capture = self.marshal_to_capture(event)
        except ValueError as exc:
            self.log.error("error marshalling event: %s", exc)
            self._failed(event)
            return

        if not self._enqueue_and_log(capture):
            self._failed(event)

    def marshal_to_capture(self, event: Event) -> Capture:
        """Build the capture message for an event.

        Raises ValueError if the event's user ID cannot be hashed.
        """
        distinct_id = hash_value(event.user_id(), "usr")
        if distinct_id is None:
            raise ValueError("could not hash user ID")

        capture = Capture(
            event=event.event_type,
            properties=event_to_properties(event),
            distinct_id=distinct_id,
        )
        deployment_id = self._current_deployment()
        if deployment_id is not None:
            capture.groups = Groups().set("deployment", deployment_id)
        return capture

    def _failed(self, event: Event) -> None:
        if self.on_failure is not None:
            self.on_failure(event)

    def _enqueue_and_log(self, message: Message) -> bool:
        self.log.debug(
            "emitting analytics event url=%s event=%r",
            self.core_client.endpoint_url(),
            message,
        )
        try:
            self.core_client.enqueue(message)
        except (AnalyticsError, TypeError) as exc:
            self.log.debug("could not enqueue analytics event: %s", exc)
            return False
        return True


def new(config: Config) -> Client:
    """Create an analytics client, e.g. ``new(DEVELOPMENT)``.

    A disabled or misconfigured client discards every event.
    """
    log = _default_logger()
    if not config.enabled:
        return Client(NoopClient(), log)

    try:
        core = new_client(
            CoreConfig(
                endpoint=config.endpoint,
                verbose=config.verbose,
                interval=0.05,
                batch_size=3,
            )
        )
    except ConfigError as exc:
        log.error("error setting client: %s", exc)
        return Client(NoopClient(), log)

    log.debug("configured analytics client config=%r", config)
    return Client(core, log)


def env() -> Config:
    """Build a configuration from the environment.

    The endpoint is CF_ANALYTICS_URL (or the default), analytics are disabled
    when CF_ANALYTICS_DISABLED is ``true``, and verbose when
    CF_ANALYTICS_LOG_LEVEL is ``debug``.
    """
    return Config(
        endpoint=endpoint_or_default(os.environ.get("CF_ANALYTICS_URL", "")),
        enabled=os.environ.get("CF_ANALYTICS_DISABLED", "").lower() != "true",
        verbose=os.environ.get("CF_ANALYTICS_LOG_LEVEL", "").lower() == "debug",
    )


_current_client: ContextVar[Client | None] = ContextVar(
    "analytics_client", default=None
)


def from_context() -> Client:
    """Return the client set for the current context, or a new no-op client."""
    client = _current_client.get()
    if client is None:
        return Client(NoopClient(), _default_logger())
    return client


def set_context(client: Client) -> Token:
    """Set the client for the current context; the token undoes it."""
    return _current_client.set(client)