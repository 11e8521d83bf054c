from __future__ import annotations

import logging
import random
from collections import deque
from datetime import timedelta
from threading import Event, Lock, Thread
from typing import Optional

from ..domain.models import TrafficSample
from ..ports.clock_port import ClockPort

logger = logging.getLogger(__name__)

RPS_RANGE = (50, 150)
LATENCY_RANGE_MS = (80, 200)


class TrafficMonitor:
    """Synthetic live-traffic feed owning a bounded window of samples.

    `start()` spawns a daemon thread that calls `tick()` every `interval_seconds`
    until `stop()`. The window is pre-filled so charts have data immediately.

    Example:
        with TrafficMonitor(SystemClock()) as monitor:
            latest = monitor.current()
    """

    def __init__(
        self,
        clock: ClockPort,
        *,
        interval_seconds: float = 2.0,
        window: int = 30,
        rng: Optional[random.Random] = None,
    ) -> None:
        if window < 1:
            raise ValueError("window must be at least 1")
        self._clock = clock
        self._interval = interval_seconds
        self._rng = rng or random.Random()
        self._lock = Lock()
        self._stop = Event()
        self._thread: Optional[Thread] = None

        now = clock.now()
        self._samples: deque[TrafficSample] = deque(maxlen=window)
        for i in range(window - 1, -1, -1):
            self._samples.append(self._sample(now - timedelta(seconds=i * interval_seconds)))

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def samples(self) -> tuple[TrafficSample, ...]:
        with self._lock:
            return tuple(self._samples)

    def current(self) -> TrafficSample:
        with self._lock:
            return self._samples[-1]

    def tick(self) -> TrafficSample:
        sample = self._sample(self._clock.now())
        with self._lock:
            self._samples.append(sample)
        return sample

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = Thread(target=self._loop, name="traffic-monitor", daemon=True)
        self._thread.start()
        logger.debug(f"Traffic monitor started (interval={self._interval}s)")

    def stop(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join()
            logger.debug("Traffic monitor stopped")

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            self.tick()

    def _sample(self, when) -> TrafficSample:
        return TrafficSample(
            time=when,
            rps=self._rng.randint(*RPS_RANGE),
            latency_ms=self._rng.randint(*LATENCY_RANGE_MS),
        )

    def __enter__(self) -> TrafficMonitor:
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()
