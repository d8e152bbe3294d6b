"""
Tests for the sliding-window rate limiter, driven by a fake clock.
"""
import pytest

from sentry_academy.rate_limit import RateLimitExceeded, SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return SlidingWindowRateLimiter(window_seconds=60, clock=clock)


class TestSlidingWindow:
    def test_allows_up_to_limit(self, limiter):
        assert all(limiter.try_acquire("docs", 3) for _ in range(3))
        assert limiter.try_acquire("docs", 3) is False

    def test_denied_call_is_not_recorded(self, limiter, clock):
        for _ in range(2):
            limiter.try_acquire("docs", 2)
        clock.advance(30)
        assert limiter.try_acquire("docs", 2) is False
        clock.advance(30)
        assert limiter.remaining("docs", 2) == 2

    def test_window_slides(self, limiter, clock):
        limiter.try_acquire("docs", 2)
        clock.advance(30)
        limiter.try_acquire("docs", 2)
        clock.advance(30)
        # first call is now exactly one window old
        assert limiter.try_acquire("docs", 2) is True
        assert limiter.try_acquire("docs", 2) is False

    def test_keys_are_independent(self, limiter):
        limiter.try_acquire("docs", 1)
        assert limiter.try_acquire("blog", 1) is True
        assert limiter.try_acquire("docs", 1) is False

    def test_remaining(self, limiter):
        assert limiter.remaining("docs", 5) == 5
        limiter.try_acquire("docs", 5)
        assert limiter.remaining("docs", 5) == 4

    def test_reset_one_key(self, limiter):
        limiter.try_acquire("docs", 1)
        limiter.try_acquire("blog", 1)
        limiter.reset("docs")
        assert limiter.try_acquire("docs", 1) is True
        assert limiter.try_acquire("blog", 1) is False

    def test_reset_all(self, limiter):
        limiter.try_acquire("docs", 1)
        limiter.try_acquire("blog", 1)
        limiter.reset()
        assert limiter.remaining("docs", 1) == 1
        assert limiter.remaining("blog", 1) == 1


class TestAcquire:
    def test_raises_when_full(self, limiter):
        limiter.acquire("openai", 1)
        with pytest.raises(RateLimitExceeded) as exc:
            limiter.acquire("openai", 1)
        assert exc.value.key == "openai"
        assert exc.value.limit == 1
        assert str(exc.value) == "Rate limit exceeded for 'openai': 1 calls per 60s"
