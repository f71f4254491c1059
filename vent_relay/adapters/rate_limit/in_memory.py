"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around the shared timestamp table.
- Callers idle for a full window are dropped from the table on the next
  sweep, which runs at most once per window.
- Blocked attempts are not recorded; allowed ones count for the full window
  even if the request fails later on.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable

from vent_relay.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class SlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter keeping a log of request timestamps per key.

    A request is allowed when fewer than ``limit`` requests from the same key
    were recorded within the trailing ``window_seconds``. Timestamps at least
    ``window_seconds`` old are pruned before counting.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of requests per rolling window.
            window_seconds: Size of the rolling window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._timestamps_by_key: dict[str, deque[float]] = {}
        self._next_sweep_at: float | None = None

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _prune(self, timestamps: deque[float], now: float) -> None:
        while timestamps and now - timestamps[0] >= self._window_seconds:
            timestamps.popleft()

    def consume(self, key: str) -> RateLimitResult:
        """Check the caller's recent history and record this request if allowed.

        Args:
            key: Unique identifier for rate limiting (e.g. client IP).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            if self._next_sweep_at is None or now >= self._next_sweep_at:
                self._sweep(now)
                self._next_sweep_at = now + self._window_seconds

            timestamps = self._timestamps_by_key.get(key)
            if timestamps is None:
                timestamps = self._timestamps_by_key[key] = deque()
            else:
                self._prune(timestamps, now)

            if len(timestamps) >= self._limit:
                reset_at = timestamps[0] + self._window_seconds
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=int(math.ceil(reset_at)),
                    retry_after_seconds=max(1, int(math.ceil(reset_at - now))),
                )

            timestamps.append(now)
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(timestamps),
                reset_at=int(math.ceil(timestamps[0] + self._window_seconds)),
                retry_after_seconds=None,
            )

    def count(self, key: str) -> int:
        """Return how many requests from ``key`` fall within the current window."""
        now = self._clock()
        with self._lock:
            timestamps = self._timestamps_by_key.get(key)
            if not timestamps:
                return 0
            self._prune(timestamps, now)
            if not timestamps:
                del self._timestamps_by_key[key]
            return len(timestamps)

    def tracked_keys(self) -> int:
        """Number of callers with at least one request in the current window."""
        now = self._clock()
        with self._lock:
            self._sweep(now)
            return len(self._timestamps_by_key)

    def _sweep(self, now: float) -> None:
        expired = []
        for key, timestamps in self._timestamps_by_key.items():
            self._prune(timestamps, now)
            if not timestamps:
                expired.append(key)
        for key in expired:
            del self._timestamps_by_key[key]
