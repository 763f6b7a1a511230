"""Bounded executor running each task on its own thread."""

from __future__ import annotations

import threading
from typing import Callable


class Executor:
    """Runs at most ``cap`` tasks concurrently, refusing any beyond that."""

    def __init__(self, cap: int) -> None:
        self.cap = cap
        self._size = 0
        self._closed = False
        self._lock = threading.Lock()

    def do(self, task: Callable[[], object]) -> bool:
        """Start the task if there is capacity; return whether it was accepted."""
        with self._lock:
            if self._closed:
                raise RuntimeError("executor is closed")
            if self._size == self.cap:
                return False
            self._size += 1
        threading.Thread(target=self._run, args=(task,), daemon=True).start()
        return True

    def _run(self, task: Callable[[], object]) -> None:
        try:
            task()
        finally:
            with self._lock:
                self._size -= 1

    def close(self) -> None:
        """Stop accepting tasks; running tasks carry on to completion."""
        with self._lock:
            self._closed = True