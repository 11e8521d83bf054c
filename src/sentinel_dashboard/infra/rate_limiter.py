from __future__ import annotations

from threading import Lock

from ..core.ports.clock_port import ClockPort, SystemClock
from ..core.ports.rate_limiter_port import RateLimiterPort


class SimpleRateLimiter(RateLimiterPort):
    """Spaces calls at least 1/rps seconds apart across threads.

    Used to pace outbound AI requests when the detail view fires several
    lookups at once.
    """

    def __init__(self, rps: float, clock: ClockPort | None = None) -> None:
        self._interval = 1.0 / max(0.0001, rps)
        self._clock = clock or SystemClock()
        self._lock = Lock()
        self._last: float | None = None

    def acquire(self) -> None:
        with self._lock:
            now = self._clock.monotonic()
            if self._last is not None:
                wait = self._last + self._interval - now
                if wait > 0:
                    self._clock.sleep(wait)
            self._last = self._clock.monotonic()
