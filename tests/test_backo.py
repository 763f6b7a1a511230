import time
from datetime import datetime

import pytest

from usageanalytics.acore.backo import Backo, default_backo


def test_default_backo_first_attempt():
    assert default_backo().duration(0) == pytest.approx(0.1)


def test_default_backo_is_capped():
    assert default_backo().duration(50) == pytest.approx(10.0)


def test_duration_grows_by_factor():
    backo = Backo(0.5, 3, 0, 1000.0)
    assert backo.duration(1) == pytest.approx(backo.duration(0) * 3)
    assert backo.duration(2) == pytest.approx(backo.duration(1) * 3)


def test_duration_never_exceeds_cap_even_for_huge_attempts():
    backo = Backo(1.0, 2, 0.5, 7.0)
    assert all(backo.duration(attempt) <= 7.0 for attempt in (5, 100, 5000))


def test_jitter_stays_within_bounds():
    backo = Backo(1.0, 2, 0.5, 1000.0)
    values = [backo.duration(2) for _ in range(200)]
    assert all(2.0 <= value <= 6.0 for value in values)


def test_sleep_waits_at_least_duration():
    backo = Backo(0.02, 2, 0, 1.0)
    expected = backo.duration(0)
    start = time.monotonic()
    backo.sleep(0)
    elapsed = time.monotonic() - start
    assert expected == pytest.approx(0.02)
    assert elapsed >= expected * 0.95


def test_ticker_ticks_then_closes():
    ticker = Backo(0.001, 2, 0, 0.005).ticker()
    first = ticker.get(timeout=2)
    second = ticker.get(timeout=2)
    assert isinstance(first, datetime)
    assert second >= first
    ticker.stop()
    result = first
    for _ in range(3):
        result = ticker.get(timeout=2)
        if result is None:
            break
    assert result is None


def test_ticker_get_times_out():
    ticker = Backo(10.0, 2, 0, 10.0).ticker()
    try:
        with pytest.raises(TimeoutError):
            ticker.get(timeout=0.01)
    finally:
        ticker.stop()