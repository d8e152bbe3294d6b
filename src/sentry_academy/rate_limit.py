"""
rate_limit.py — Sliding-window rate limiter
============================================
Used in two places:

- the research engine, one window per source domain (N fetches per rolling
  60 seconds; a denied fetch is skipped)
- the AI client, one window per process (N completions per rolling hour;
  a denied call raises ``RateLimitExceeded``)

The clock is injectable so tests can move time forward without sleeping.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Optional


class RateLimitExceeded(Exception):
    """Raised by callers that treat a denied slot as an error."""

    def __init__(self, key: str, limit: int, window_seconds: float) -> None:
        self.key = key
        self.limit = limit
        self.window_seconds = window_seconds
        super().__init__(
            f"Rate limit exceeded for '{key}': {limit} calls per {window_seconds:g}s"
        )


class SlidingWindowRateLimiter:
    def __init__(
        self,
        window_seconds: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._calls: dict[str, deque[float]] = {}

    def try_acquire(self, key: str, limit: int) -> bool:
        """Record a call for *key* and return True, or return False if the window is full."""
        now = self._clock()
        calls = self._prune(key, now)
        if len(calls) >= limit:
            return False
        calls.append(now)
        return True

    def acquire(self, key: str, limit: int) -> None:
        if not self.try_acquire(key, limit):
            raise RateLimitExceeded(key, limit, self.window_seconds)

    def remaining(self, key: str, limit: int) -> int:
        return max(0, limit - len(self._prune(key, self._clock())))

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._calls.clear()
        else:
            self._calls.pop(key, None)

    def _prune(self, key: str, now: float) -> deque[float]:
        calls = self._calls.setdefault(key, deque())
        while calls and now - calls[0] >= self.window_seconds:
            calls.popleft()
        return calls
