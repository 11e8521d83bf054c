from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from ..domain.enums import Severity, VulnerabilityStatus
from ..domain.models import Vulnerability

RECENT_LIMIT = 4


@dataclass(frozen=True)
class DashboardSummary:
    total: int
    by_severity: tuple[tuple[Severity, int], ...]
    by_status: tuple[tuple[VulnerabilityStatus, int], ...]
    critical_and_high: int
    recent: tuple[Vulnerability, ...]


def summarize(records: Sequence[Vulnerability]) -> DashboardSummary:
    """Overview counts; severities listed Critical first, zero counts omitted."""
    severities = Counter(v.severity for v in records)
    statuses = Counter(v.status for v in records)
    recent = sorted(records, key=lambda v: v.discovered_at, reverse=True)[:RECENT_LIMIT]
    return DashboardSummary(
        total=len(records),
        by_severity=tuple((s, severities[s]) for s in Severity if severities[s]),
        by_status=tuple((s, statuses[s]) for s in VulnerabilityStatus),
        critical_and_high=severities[Severity.CRITICAL] + severities[Severity.HIGH],
        recent=tuple(recent),
    )
