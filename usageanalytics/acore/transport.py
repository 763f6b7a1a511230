"""Clients that deliver analytics messages to the batch API."""

from __future__ import annotations

import dataclasses
import queue
import threading
import time
from abc import ABC, abstractmethod
from typing import Any

from .alias import Alias
from .capture import Capture
from .config import Config
from .errors import (
    AnalyticsError,
    ClientClosedError,
    MessageTooBigError,
    TooManyRequestsError,
)
from .executor import Executor
from .group_identify import GroupIdentify
from .identify import Identify
from .message import (
    LIBRARY_NAME,
    MAX_BATCH_BYTES,
    MAX_MESSAGE_BYTES,
    Message,
    MessageQueue,
    QueuedMessage,
    make_message,
    make_timestamp,
)
from .version import get_version

_QUIT = object()
_EMPTY_BATCH = b'{"batch":[]}'
_ATTEMPTS = 10
_HTTP_TIMEOUT = 1.0
_QUEUE_CAPACITY = 100


class CoreClient(ABC):
    """Sends analytics messages to a backend."""

    @abstractmethod
    def enqueue(self, message: Message) -> None:
        """Queue a message to be sent once a batch is ready."""

    @abstractmethod
    def close(self) -> None:
        """Flush queued messages and stop the client."""

    @abstractmethod
    def endpoint_url(self) -> str:
        """Return the configured analytics endpoint."""


class NoopClient(CoreClient):
    """A client that discards everything it is given."""

    def enqueue(self, message: Message) -> None:
        return None

    def close(self) -> None:
        return None

    def endpoint_url(self) -> str:
        return "<noop client>"


class BatchClient(CoreClient):
    """Batches messages on a background thread and posts them to ``/batch/``.

    Batches are sent when ``batch_size`` messages are queued, when the byte
    limit would be exceeded, or every ``interval`` seconds.
    """

    def __init__(self, config: Config) -> None:
        config.validate()
        self.config = config.with_defaults()
        self._messages: queue.Queue[Any] = queue.Queue(maxsize=_QUEUE_CAPACITY)
        self._lock = threading.Lock()
        self._closed = False
        self._quit = threading.Event()
        self._shutdown = threading.Event()
        self._inflight = 0
        self._inflight_cond = threading.Condition()
        self._thread = threading.Thread(
            target=self._loop, name="analytics-batch", daemon=True
        )
        self._thread.start()

    def __enter__(self) -> "BatchClient":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def endpoint_url(self) -> str:
        return self.config.endpoint

    def enqueue(self, message: Message) -> None:
        """Validate and queue a message.

        Raises FieldError for malformed messages, TypeError for unsupported
        message types and ClientClosedError once the client is closed.
        """
        if not isinstance(message, Message):
            raise TypeError(
                f"messages with custom types cannot be enqueued: {type(message).__name__}"
            )
        message.validate()
        stamped = self._stamp(message)
        with self._lock:
            if self._closed:
                raise ClientClosedError()
            self._messages.put(stamped.apify())

    def close(self) -> None:
        """Flush everything queued, wait for sends to finish, then stop.

        Raises ClientClosedError if the client was already closed.
        """
        with self._lock:
            if self._closed:
                raise ClientClosedError()
            self._closed = True
            self._quit.set()
            self._messages.put(_QUIT)
        self._shutdown.wait()

    def _stamp(self, message: Message) -> Message:
        now = self.config.now()
        if isinstance(message, Alias):
            return dataclasses.replace(
                message, type="alias", timestamp=make_timestamp(message.timestamp, now)
            )
        if isinstance(message, Identify):
            return dataclasses.replace(
                message,
                type="identify",
                timestamp=make_timestamp(message.timestamp, now),
            )
        if isinstance(message, GroupIdentify):
            return dataclasses.replace(
                message, timestamp=make_timestamp(message.timestamp, now)
            )
        if isinstance(message, Capture):
            return dataclasses.replace(
                message,
                type="capture",
                timestamp=make_timestamp(message.timestamp, now),
            )
        raise TypeError(
            f"messages with custom types cannot be enqueued: {type(message).__name__}"
        )

    def _loop(self) -> None:
        cfg = self.config
        executor = Executor(cfg.max_concurrent_requests)
        pending = MessageQueue(cfg.batch_size, MAX_BATCH_BYTES - len(_EMPTY_BATCH))
        next_tick = time.monotonic() + cfg.interval
        try:
            while True:
                timeout = next_tick - time.monotonic()
                if timeout <= 0:
                    self._flush(pending, executor)
                    next_tick = time.monotonic() + cfg.interval
                    continue
                try:
                    item = self._messages.get(timeout=timeout)
                except queue.Empty:
                    continue
                if item is _QUIT:
                    self._debugf("exit requested - draining messages")
                    while True:
                        try:
                            item = self._messages.get_nowait()
                        except queue.Empty:
                            break
                        self._push(pending, item, executor)
                    self._flush(pending, executor)
                    self._debugf("exit")
                    return
                self._push(pending, item, executor)
        finally:
            with self._inflight_cond:
                self._inflight_cond.wait_for(lambda: self._inflight == 0)
            executor.close()
            self._shutdown.set()

    def _push(self, pending: MessageQueue, api_message: Any, executor: Executor) -> None:
        try:
            queued = make_message(api_message, MAX_MESSAGE_BYTES)
        except (MessageTooBigError, TypeError, ValueError) as exc:
            self._errorf("%s - %s", exc, api_message)
            self._notify_failure([QueuedMessage(api_message, b"")], exc)
            return

        self._debugf(
            "buffer (%d/%d) %s", len(pending.pending), self.config.batch_size, api_message
        )
        batch = pending.push(queued)
        if batch:
            self._debugf(
                "exceeded messages batch limit with batch of %d messages - flushing",
                len(batch),
            )
            self._send_async(batch, executor)

    def _flush(self, pending: MessageQueue, executor: Executor) -> None:
        batch = pending.flush()
        if batch:
            self._debugf("flushing %d messages", len(batch))
            self._send_async(batch, executor)

    def _send_async(self, batch: list[QueuedMessage], executor: Executor) -> None:
        with self._inflight_cond:
            self._inflight += 1

        def task() -> None:
            try:
                self._send(batch)
            except Exception as exc:  # a failed send must never crash the client
                self._errorf("panic - %s", exc)
            finally:
                self._release()

        if not executor.do(task):
            self._release()
            error = TooManyRequestsError()
            self._errorf("sending messages failed - %s", error)
            self._notify_failure(batch, error)

    def _release(self) -> None:
        with self._inflight_cond:
            self._inflight -= 1
            self._inflight_cond.notify_all()

    def _send(self, batch: list[QueuedMessage]) -> None:
        body = b'{"batch":[' + b",".join(m.data for m in batch) + b"]}"
        error: BaseException | None = None
        for attempt in range(_ATTEMPTS):
            error = self._upload(body)
            if error is None:
                self._notify_success(batch)
                return
            if attempt == _ATTEMPTS - 1:
                break
            if self._quit.wait(self.config.retry_after(attempt)):
                self._errorf(
                    "%d messages dropped because they failed to be sent and the client was closed",
                    len(batch),
                )
                self._notify_failure(batch, error)
                return

        self._errorf(
            "%d messages dropped because they failed to be sent after %d attempts",
            len(batch),
            _ATTEMPTS,
        )
        assert error is not None
        self._notify_failure(batch, error)

    def _upload(self, body: bytes) -> BaseException | None:
        url = self.config.endpoint + "/batch/"
        headers = {
            "User-Agent": f"{LIBRARY_NAME} (version: {get_version()})",
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }
        try:
            status, reason, payload = self.config.transport(
                url, body, headers, _HTTP_TIMEOUT
            )
        except OSError as exc:
            self._errorf("sending request - %s", exc)
            return exc
        return self._report(status, reason, payload)

    def _report(self, status: int, reason: str, payload: bytes) -> BaseException | None:
        if status < 300:
            self._debugf("response %d %s", status, reason)
            return None
        text = payload.decode("utf-8", "replace")
        self._logf("response %d %s - %s", status, reason, text)
        return AnalyticsError(f"{status} {reason}")

    def _notify_success(self, batch: list[QueuedMessage]) -> None:
        callback = self.config.callback
        if callback is not None:
            for queued in batch:
                callback.success(queued.message)

    def _notify_failure(self, batch: list[QueuedMessage], error: BaseException) -> None:
        callback = self.config.callback
        if callback is not None:
            for queued in batch:
                callback.failure(queued.message, error)

    def _debugf(self, format: str, *args: Any) -> None:
        if self.config.verbose:
            self._logf(format, *args)

    def _logf(self, format: str, *args: Any) -> None:
        self.config.logger.logf(format, *args)

    def _errorf(self, format: str, *args: Any) -> None:
        self.config.logger.errorf(format, *args)


def new_client(config: Config | None = None) -> BatchClient:
    """Start a batching client; raises ConfigError for impossible settings."""
    return BatchClient(config if config is not None else Config())