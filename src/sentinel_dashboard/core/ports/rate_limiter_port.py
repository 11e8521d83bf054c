from __future__ import annotations

from typing import Protocol


class RateLimiterPort(Protocol):
    """Paces outbound AI calls; HttpClient calls `acquire` before every request."""

    def acquire(self) -> None:
        """Block the calling thread until the next request may be sent."""
