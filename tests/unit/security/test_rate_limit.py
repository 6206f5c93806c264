import pytest

from pixeltune.exceptions import RateLimitedError
from pixeltune.security.rate_limit import RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
def test_rejects_requests_beyond_cap() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    limiter.check("10.0.0.1")
    limiter.check("10.0.0.1")
    with pytest.raises(RateLimitedError) as excinfo:
        limiter.check("10.0.0.1")

    assert excinfo.value.retry_after == 60


@pytest.mark.unit
def test_window_rolls_forward() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.check("10.0.0.1")
    clock.now += 30
    limiter.check("10.0.0.1")

    clock.now += 31
    limiter.check("10.0.0.1")

    with pytest.raises(RateLimitedError) as excinfo:
        limiter.check("10.0.0.1")
    assert excinfo.value.retry_after == 29


@pytest.mark.unit
def test_clients_are_counted_separately() -> None:
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    limiter.check("10.0.0.1")
    limiter.check("10.0.0.2")

    with pytest.raises(RateLimitedError):
        limiter.check("10.0.0.1")


@pytest.mark.unit
def test_idle_clients_are_forgotten() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=60, clock=clock)
    limiter.check("10.0.0.1")

    clock.now += 120
    limiter.check("10.0.0.2")

    assert set(limiter.hits) == {"10.0.0.2"}


@pytest.mark.unit
def test_idle_clients_are_pruned_only_on_interval() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=60, clock=clock, prune_interval_seconds=300)
    limiter.check("10.0.0.1")

    clock.now += 100
    limiter.check("10.0.0.2")
    assert set(limiter.hits) == {"10.0.0.1", "10.0.0.2"}

    clock.now += 200
    limiter.check("10.0.0.3")
    assert set(limiter.hits) == {"10.0.0.3"}
