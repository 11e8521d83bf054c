"""tests/conftest.py

Common fixtures for the entire test suite.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from typer.testing import CliRunner

from sentinel_dashboard.core.domain.enums import HttpMethod, Severity, VulnerabilityStatus
from sentinel_dashboard.core.domain.errors import AdvisorUnavailableError
from sentinel_dashboard.core.domain.models import (
    CveDetails,
    CveInfo,
    CveSource,
    Endpoint,
    StatusChange,
    Vulnerability,
)


T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock: sleeping advances time instead of blocking."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start
        self._mono = 0.0
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    def monotonic(self) -> float:
        return self._mono

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)

    def advance(self, seconds: float) -> None:
        self._mono += seconds
        self.current = self.current + timedelta(seconds=seconds)


class ImmediateExecutor(Executor):
    """Runs submitted work inline and returns an already-resolved future."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as e:
            future.set_exception(e)
        return future


class FakeAdvisor:
    def __init__(
        self,
        *,
        remediation: Optional[str] = "Use parameterized queries.",
        cve_info: Optional[CveInfo] = None,
        details: Optional[dict[str, CveDetails]] = None,
    ) -> None:
        self._remediation = remediation
        self._cve_info = cve_info
        self._details = details or {}
        self.calls: list[tuple[str, str]] = []

    def remediation(self, v: Vulnerability) -> str:
        self.calls.append(("remediation", v.id))
        if self._remediation is None:
            raise AdvisorUnavailableError("Failed to communicate with the AI service.")
        return self._remediation

    def related_cves(self, v: Vulnerability) -> CveInfo:
        self.calls.append(("related_cves", v.id))
        if self._cve_info is None:
            raise AdvisorUnavailableError("Failed to communicate with the AI service for CVE information.")
        return self._cve_info

    def cve_details(self, cve_id: str) -> CveDetails:
        self.calls.append(("cve_details", cve_id))
        if cve_id not in self._details:
            raise AdvisorUnavailableError(f"Failed to communicate with the AI service for details on {cve_id}.")
        return self._details[cve_id]


def make_vuln(
    id: str,
    *,
    severity: Severity = Severity.MEDIUM,
    status: VulnerabilityStatus = VulnerabilityStatus.NEW,
    type: str = "Security Misconfiguration",
    owasp_id: str = "API8:2023",
    description: str = "Missing security hardening.",
    path: str = "/api/v1/health",
    method: HttpMethod = HttpMethod.GET,
    discovered_at: datetime = T0,
    assignee: Optional[str] = None,
) -> Vulnerability:
    history = [StatusChange(VulnerabilityStatus.NEW, discovered_at)]
    if status is not VulnerabilityStatus.NEW:
        history.append(StatusChange(status, discovered_at + timedelta(days=1)))
    return Vulnerability(
        id=id,
        type=type,
        owasp_id=owasp_id,
        description=description,
        details=f"Details for {id}",
        severity=severity,
        status=status,
        endpoint=Endpoint(method, path),
        discovered_at=discovered_at,
        status_history=tuple(history),
        assignee=assignee,
    )


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def executor() -> ImmediateExecutor:
    return ImmediateExecutor()


@pytest.fixture
def sample_vulnerabilities() -> list[Vulnerability]:
    """Five records: 2 Critical, 1 High, 2 Low."""
    return [
        make_vuln("v-1", severity=Severity.CRITICAL, type="SQL Injection", owasp_id="API3:2023",
                  path="/api/v1/products/search", discovered_at=T0, assignee="Charlie"),
        make_vuln("v-2", severity=Severity.LOW, type="Improper Inventory Management", owasp_id="API9:2023",
                  path="/api/v1/debug", discovered_at=T0 + timedelta(days=1)),
        make_vuln("v-3", severity=Severity.HIGH, type="Broken Authentication", owasp_id="API2:2023",
                  path="/auth/v1/login", status=VulnerabilityStatus.ACKNOWLEDGED,
                  discovered_at=T0 + timedelta(days=2), assignee="alice"),
        make_vuln("v-4", severity=Severity.CRITICAL, type="Server Side Request Forgery", owasp_id="API10:2023",
                  path="/api/v2/webhooks", status=VulnerabilityStatus.FIXED,
                  discovered_at=T0 + timedelta(days=3), assignee="Bob"),
        make_vuln("v-5", severity=Severity.LOW, type="Cross-Site Scripting (XSS)", owasp_id="A03:2021",
                  path="/api/v2/profiles/me", discovered_at=T0 + timedelta(days=4)),
    ]


@pytest.fixture
def cve_info() -> CveInfo:
    return CveInfo(
        summary="See CVE-2021-44228.",
        cve_ids=("CVE-2021-44228",),
        sources=(CveSource("https://nvd.nist.gov/vuln/detail/CVE-2021-44228", "NVD"),),
    )


@pytest.fixture
def log4shell() -> CveDetails:
    return CveDetails(
        cve_id="CVE-2021-44228",
        description="Apache Log4j2 JNDI features do not protect against attacker controlled LDAP endpoints.",
        cvss_score=10.0,
        cvss_vector="CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:C/C:H/I:H/A:H",
        affected="Apache Log4j 2.0-beta9 through 2.15.0",
        references=("https://nvd.nist.gov/vuln/detail/CVE-2021-44228",),
    )


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def vuln_factory():
    """Builds valid records; see make_vuln for the keyword arguments."""
    return make_vuln


@pytest.fixture
def advisor_factory():
    return FakeAdvisor
