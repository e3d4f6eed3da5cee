import pytest

from rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_blocks():
    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=60, clock=FakeClock())

    first = limiter.check("employee-42")
    second = limiter.check("employee-42")
    third = limiter.check("employee-42")

    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)
    assert (third.allowed, third.remaining) == (False, 0)


def test_window_slides_forward():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.check("employee-42").allowed is True
    clock.now += 59
    assert limiter.check("employee-42").allowed is False
    clock.now += 1
    assert limiter.check("employee-42").allowed is True


def test_keys_are_independent_and_reset_clears_state():
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60, clock=FakeClock())

    assert limiter.check("a").allowed is True
    assert limiter.check("b").allowed is True
    assert limiter.check("a").allowed is False

    limiter.reset()
    assert limiter.check("a").allowed is True


@pytest.mark.parametrize("limit, window", [(0, 60), (1, 0), (-1, -1)])
def test_invalid_configuration(limit, window):
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(limit=limit, window_seconds=window)


def test_idle_keys_are_forgotten():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    for key in ("a", "b", "c"):
        limiter.check(key)
    assert len(limiter._hits) == 3

    clock.now += 61
    limiter.check("d")

    assert list(limiter._hits) == ["d"]
