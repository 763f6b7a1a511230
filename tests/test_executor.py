import threading
import time

import pytest

from usageanalytics.acore.executor import Executor


def test_executor_close_rejects_new_tasks():
    ex = Executor(1)
    ex.close()
    with pytest.raises(RuntimeError):
        ex.do(lambda: None)


def test_executor_simple():
    done = threading.Event()
    ex = Executor(1)
    try:
        assert ex.do(done.set) is True
        assert done.wait(timeout=2)
    finally:
        ex.close()


def test_executor_multi():
    release = threading.Event()
    finished = threading.Semaphore(0)
    ex = Executor(3)

    def task():
        release.wait(timeout=5)
        finished.release()

    try:
        accepted = [ex.do(task) for _ in range(3)]
        assert accepted == [True, True, True]
        assert ex.do(lambda: None) is False
        release.set()
        assert all(finished.acquire(timeout=2) for _ in range(3))
    finally:
        ex.close()


def test_executor_frees_capacity_after_task():
    ex = Executor(1)
    first = threading.Event()
    assert ex.do(first.set)
    assert first.wait(timeout=2)
    second = threading.Event()
    deadline = time.monotonic() + 2
    accepted = False
    while not accepted and time.monotonic() < deadline:
        accepted = ex.do(second.set)
        if not accepted:
            time.sleep(0.005)
    assert accepted
    assert second.wait(timeout=2)
    ex.close()


def test_executor_failing_task_releases_slot():
    ex = Executor(1)
    ran = threading.Event()

    def bad():
        ran.set()
        raise ValueError("boom")

    assert ex.do(bad)
    assert ran.wait(timeout=2)
    deadline = time.monotonic() + 2
    accepted = False
    while not accepted and time.monotonic() < deadline:
        accepted = ex.do(lambda: None)
        if not accepted:
            time.sleep(0.005)
    assert accepted