from __future__ import annotations

from typing import Optional

from ..domain.enums import VulnerabilityStatus
from ..domain.models import Vulnerability
from ..services.store import VulnerabilityStore


class ChangeStatusUseCase:
    def __init__(self, store: VulnerabilityStore) -> None:
        self._store = store

    def execute(self, vulnerability_id: str, status: VulnerabilityStatus) -> Vulnerability:
        return self._store.change_status(vulnerability_id, status)


class AssignVulnerabilityUseCase:
    def __init__(self, store: VulnerabilityStore) -> None:
        self._store = store

    def execute(self, vulnerability_id: str, assignee: Optional[str]) -> Vulnerability:
        return self._store.assign(vulnerability_id, assignee)
