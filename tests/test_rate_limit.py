import pytest

from casetrack.exceptions import RateLimited
from casetrack.utils.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_rejects():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(limit=3, window=60, clock=clock)

    for _ in range(3):
        limiter.hit("10.0.0.1")
    with pytest.raises(RateLimited) as exc_info:
        limiter.hit("10.0.0.1")
    assert exc_info.value.retry_after == 60


def test_keys_are_counted_separately():
    limiter = SlidingWindowLimiter(limit=1, window=60, clock=FakeClock())
    limiter.hit("10.0.0.1")
    limiter.hit("10.0.0.2")
    with pytest.raises(RateLimited):
        limiter.hit("10.0.0.1")


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(limit=2, window=60, clock=clock)

    limiter.hit("k")
    clock.now += 30
    limiter.hit("k")
    with pytest.raises(RateLimited) as exc_info:
        limiter.hit("k")
    assert exc_info.value.retry_after == 30

    # The first hit falls out of the window, freeing one slot
    clock.now += 30
    limiter.hit("k")
    with pytest.raises(RateLimited):
        limiter.hit("k")


def test_rejected_requests_do_not_count():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(limit=1, window=10, clock=clock)
    limiter.hit("k")
    for _ in range(5):
        with pytest.raises(RateLimited):
            limiter.hit("k")
    clock.now += 10
    limiter.hit("k")


def test_reset_clears_all_keys():
    limiter = SlidingWindowLimiter(limit=1, window=60, clock=FakeClock())
    limiter.hit("k")
    limiter.reset()
    limiter.hit("k")


def test_idle_clients_are_forgotten():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(limit=5, window=10, clock=clock)
    for i in range(1000):
        limiter.hit(f"10.0.{i // 256}.{i % 256}")
    assert limiter.tracked_keys() == 1000

    clock.now += 10000
    limiter.hit("10.9.9.9")

    assert limiter.tracked_keys() == 1


def test_active_clients_survive_a_sweep():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(limit=2, window=10, clock=clock)
    limiter.hit("idle")
    clock.now += 5
    limiter.hit("busy")
    limiter.hit("busy")

    clock.now += 6
    limiter.hit("other")

    assert limiter.tracked_keys() == 2
    with pytest.raises(RateLimited):
        limiter.hit("busy")
