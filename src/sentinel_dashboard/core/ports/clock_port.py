from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol
import time


class ClockPort(Protocol):
    def now(self) -> datetime:
        """Return current UTC wall-clock datetime (used for record timestamps)."""
        ...

    def monotonic(self) -> float:
        """Return a monotonic reading in seconds (used for pacing)."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block the calling thread for the given seconds."""


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
