"""In-memory sliding-window rate limiter for the public submission endpoint."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Deque, Dict, Optional

from upload_config import SUBMISSION_RATE_LIMIT, SUBMISSION_RATE_WINDOW_SECONDS


@dataclass
class RateLimitDecision:
    allowed: bool
    remaining: int


class SlidingWindowRateLimiter:
    """Allows ``limit`` hits per key within any ``window_seconds`` span.

    State lives in process memory, so limits are per worker and reset on restart.
    """

    def __init__(
        self,
        limit: int = SUBMISSION_RATE_LIMIT,
        window_seconds: float = SUBMISSION_RATE_WINDOW_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if limit <= 0 or window_seconds <= 0:
            raise ValueError("limit and window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = Lock()

    def check(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            self._evict_stale(now)
            hits = self._hits.setdefault(key, deque())

            if len(hits) >= self.limit:
                return RateLimitDecision(allowed=False, remaining=0)

            hits.append(now)
            return RateLimitDecision(allowed=True, remaining=self.limit - len(hits))

    def _evict_stale(self, now: float) -> None:
        # Drop keys with no hit left inside the window.
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if not hits:
                del self._hits[key]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
