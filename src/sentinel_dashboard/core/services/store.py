from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from threading import RLock
from typing import Optional

from ..domain.enums import VulnerabilityStatus
from ..domain.errors import VulnerabilityNotFoundError
from ..domain.models import Vulnerability
from ..ports.clock_port import ClockPort
from .status_workflow import apply_status_change, reassign

logger = logging.getLogger(__name__)

Snapshot = tuple[Vulnerability, ...]
Listener = Callable[[Snapshot], None]


class VulnerabilityStore:
    """Sole owner of the session's vulnerability records.

    Readers get immutable snapshots. Existing records change only through
    `change_status` and `assign`; new ones arrive through `add`. Records are
    never removed.
    """

    def __init__(self, clock: ClockPort, records: Iterable[Vulnerability] = ()) -> None:
        self._clock = clock
        self._lock = RLock()
        self._records: Snapshot = ()
        self._listeners: list[Listener] = []
        self._version = 0
        for v in records:
            self._check_unique(v.id)
            self._records = self._records + (v,)
        logger.debug(f"Initialized VulnerabilityStore with {len(self._records)} records")

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> Snapshot:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, vulnerability_id: str) -> Optional[Vulnerability]:
        for v in self._records:
            if v.id == vulnerability_id:
                return v
        return None

    def require(self, vulnerability_id: str) -> Vulnerability:
        v = self.get(vulnerability_id)
        if v is None:
            raise VulnerabilityNotFoundError(vulnerability_id)
        return v

    def add(self, v: Vulnerability) -> Snapshot:
        """Insert a new record at the front (newest first)."""
        with self._lock:
            self._check_unique(v.id)
            self._records = (v,) + self._records
            logger.info(f"Added {v.id} ({v.severity.value} {v.type}) at {v.endpoint}")
            return self._publish()

    def change_status(self, vulnerability_id: str, status: VulnerabilityStatus) -> Vulnerability:
        with self._lock:
            current = self.require(vulnerability_id)
            updated = apply_status_change(current, status, self._clock.now())
            if updated is not current:
                self._replace(updated)
            return updated

    def assign(self, vulnerability_id: str, assignee: Optional[str]) -> Vulnerability:
        with self._lock:
            current = self.require(vulnerability_id)
            updated = reassign(current, assignee)
            if updated is not current:
                self._replace(updated)
            return updated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback fired with each new snapshot; returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _check_unique(self, vulnerability_id: str) -> None:
        if any(v.id == vulnerability_id for v in self._records):
            raise ValueError(f"Duplicate vulnerability id: {vulnerability_id}")

    def _replace(self, updated: Vulnerability) -> Snapshot:
        self._records = tuple(updated if v.id == updated.id else v for v in self._records)
        return self._publish()

    def _publish(self) -> Snapshot:
        self._version += 1
        snapshot = self._records
        for listener in tuple(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Snapshot listener {listener!r} failed; continuing with the rest")
        return snapshot
