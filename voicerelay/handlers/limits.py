"""Sliding-window rate limiter for per-connection client messages."""

from __future__ import annotations

import time
import collections
from collections.abc import Callable

from voicerelay.errors import RateLimitError

TimeFn = Callable[[], float]


class SlidingWindowRateLimiter:
    """Counts accepted events over a rolling window.

    A limit or window of zero disables the limiter entirely.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        now_fn: TimeFn | None = None,
    ) -> None:
        self.limit = max(0, int(limit))
        self.window_seconds = max(0.0, float(window_seconds))
        self._now = now_fn or time.monotonic
        self._stamps: collections.deque[float] = collections.deque()

    @property
    def enabled(self) -> bool:
        return self.limit > 0 and self.window_seconds > 0

    def _expire(self, now: float) -> None:
        horizon = now - self.window_seconds
        while self._stamps and self._stamps[0] <= horizon:
            self._stamps.popleft()

    def remaining(self) -> int:
        if not self.enabled:
            return -1
        self._expire(self._now())
        return max(0, self.limit - len(self._stamps))

    def consume(self) -> None:
        """Record one event or raise `RateLimitError` with the time until a slot frees up."""
        if not self.enabled:
            return

        now = self._now()
        self._expire(now)
        if len(self._stamps) >= self.limit:
            raise RateLimitError(
                retry_in=max(0.0, self._stamps[0] + self.window_seconds - now),
                limit=self.limit,
                window_seconds=self.window_seconds,
            )
        self._stamps.append(now)


__all__ = ["SlidingWindowRateLimiter"]
