"""Exponential backoff with optional jitter."""

from __future__ import annotations

import math
import random
import threading
import time
from datetime import datetime


class Backo:
    """Backoff policy; all durations are in seconds."""

    def __init__(self, base: float, factor: int, jitter: float, cap: float) -> None:
        self.base = base
        self.factor = factor
        self.jitter = jitter
        self.cap = cap

    def duration(self, attempt: int) -> float:
        """Return the backoff interval for the given attempt."""
        try:
            duration = self.base * math.pow(self.factor, attempt)
        except OverflowError:
            duration = math.inf

        if self.jitter and math.isfinite(duration):
            rnd = random.random()
            # work in nanoseconds so the floor does not swallow sub-second values
            deviation = math.floor(rnd * self.jitter * duration * 1e9) / 1e9
            if math.floor(rnd * 10) & 1 == 0:
                duration -= deviation
            else:
                duration += deviation

        return min(duration, self.cap)

    def sleep(self, attempt: int) -> None:
        """Block for the backoff interval of the given attempt."""
        time.sleep(self.duration(attempt))

    def ticker(self) -> "Ticker":
        """Start a ticker that fires after each successive backoff interval."""
        return Ticker(self)


class Ticker:
    """Delivers the current time after each backoff interval until stopped."""

    def __init__(self, backo: Backo) -> None:
        self._backo = backo
        self._cond = threading.Condition()
        self._pending: datetime | None = None
        self._closed = False
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        attempt = 0
        while not self._stop.wait(self._backo.duration(attempt)):
            with self._cond:
                while self._pending is not None and not self._stop.is_set():
                    self._cond.wait()
                if self._stop.is_set():
                    break
                self._pending = datetime.now()
                self._cond.notify_all()
            attempt += 1
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def get(self, timeout: float | None = None) -> datetime | None:
        """Wait for the next tick; return None once the ticker is stopped.

        Raises TimeoutError if nothing arrives within ``timeout`` seconds.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._pending is not None or self._closed, timeout
            )
            if not ready:
                raise TimeoutError("no tick within timeout")
            if self._pending is not None:
                value, self._pending = self._pending, None
                self._cond.notify_all()
                return value
            return None

    def stop(self) -> None:
        """Stop the ticker."""
        self._stop.set()
        with self._cond:
            self._cond.notify_all()


def default_backo() -> Backo:
    """Backoff of 100ms base, factor 2, no jitter, capped at 10 seconds."""
    return Backo(0.1, 2, 0, 10.0)