from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from .enums import HttpMethod, Severity, VulnerabilityStatus


@dataclass(frozen=True)
class StatusChange:
    status: VulnerabilityStatus
    timestamp: datetime


@dataclass(frozen=True)
class Endpoint:
    method: HttpMethod
    path: str

    def __str__(self) -> str:
        return f"{self.method.value} {self.path}"


@dataclass(frozen=True)
class Vulnerability:
    id: str
    type: str
    owasp_id: str
    description: str
    details: str
    severity: Severity
    status: VulnerabilityStatus
    endpoint: Endpoint
    discovered_at: datetime
    status_history: tuple[StatusChange, ...]
    assignee: Optional[str] = None

    def __post_init__(self) -> None:
        history = self.status_history
        if not history:
            raise ValueError(f"{self.id}: status history must not be empty")
        first = history[0]
        if first.status is not VulnerabilityStatus.NEW or first.timestamp != self.discovered_at:
            raise ValueError(f"{self.id}: status history must start with New at discovery time")
        if history[-1].status is not self.status:
            raise ValueError(f"{self.id}: last history entry does not match current status")
        for prev, cur in zip(history, history[1:]):
            if cur.timestamp < prev.timestamp:
                raise ValueError(f"{self.id}: status history is not chronological")

    @classmethod
    def new(
        cls,
        *,
        id: str,
        type: str,
        owasp_id: str,
        description: str,
        details: str,
        severity: Severity,
        endpoint: Endpoint,
        discovered_at: datetime,
        assignee: Optional[str] = None,
    ) -> "Vulnerability":
        return cls(
            id=id,
            type=type,
            owasp_id=owasp_id,
            description=description,
            details=details,
            severity=severity,
            status=VulnerabilityStatus.NEW,
            endpoint=endpoint,
            discovered_at=discovered_at,
            status_history=(StatusChange(VulnerabilityStatus.NEW, discovered_at),),
            assignee=assignee,
        )

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignee)

    def with_updates(self, **kwargs) -> "Vulnerability":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class CveSource:
    uri: str
    title: str


@dataclass(frozen=True)
class CveInfo:
    summary: str
    cve_ids: tuple[str, ...] = field(default_factory=tuple)
    sources: tuple[CveSource, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CveDetails:
    cve_id: str
    description: str
    cvss_score: float
    cvss_vector: str
    affected: str
    references: tuple[str, ...] = field(default_factory=tuple)

    @property
    def severity(self) -> Severity:
        if self.cvss_vector:
            parsed = Severity.from_str(self.cvss_vector)
            if parsed is not None:
                return parsed
        return Severity.from_score(self.cvss_score)


@dataclass(frozen=True)
class ScanSummary:
    vulnerabilities_found: int
    highest_severity: Severity
    endpoints_scanned: int


@dataclass(frozen=True)
class ScanResult:
    vulnerability: Vulnerability
    summary: ScanSummary


@dataclass(frozen=True)
class TrafficSample:
    time: datetime
    rps: int
    latency_ms: int
