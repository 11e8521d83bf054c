from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from ..domain.enums import HttpMethod, Severity, VulnerabilityStatus
from ..domain.models import Endpoint, StatusChange, Vulnerability


@dataclass(frozen=True)
class FindingTemplate:
    type: str
    owasp_id: str
    description: str


VULNERABILITY_TEMPLATES: tuple[FindingTemplate, ...] = (
    FindingTemplate("Broken Object Level Authorization", "API1:2023", "API does not properly validate that the user is authorized to access the requested object."),
    FindingTemplate("Broken Authentication", "API2:2023", "Authentication mechanisms are implemented incorrectly, allowing attackers to compromise authentication tokens or exploit implementation flaws."),
    FindingTemplate("SQL Injection", "API3:2023", "User-provided data is not validated, filtered, or sanitized by the application."),
    FindingTemplate("Broken Function Level Authorization", "API5:2023", "Policies and roles are not properly aligned with the business functions of the API."),
    FindingTemplate("Security Misconfiguration", "API8:2023", "Missing security hardening across any part of the application stack or improperly configured permissions."),
    FindingTemplate("Improper Inventory Management", "API9:2023", "The API hosts outdated versions or exposes debug endpoints that should not be public."),
    FindingTemplate("Server Side Request Forgery", "API10:2023", "A vulnerability that allows an attacker to induce the server-side application to make requests to an unintended location."),
    FindingTemplate("Cross-Site Scripting (XSS)", "A03:2021", "Untrusted data is sent to a web browser without proper validation and escaping."),
)

API_ENDPOINTS: tuple[Endpoint, ...] = (
    Endpoint(HttpMethod.GET, "/api/v1/users/{userId}/orders"),
    Endpoint(HttpMethod.POST, "/api/v2/payments/transaction"),
    Endpoint(HttpMethod.GET, "/api/v1/products/search"),
    Endpoint(HttpMethod.DELETE, "/api/v1/admin/users/{id}"),
    Endpoint(HttpMethod.PATCH, "/api/v2/profiles/me"),
    Endpoint(HttpMethod.POST, "/auth/v1/login"),
    Endpoint(HttpMethod.GET, "/api/v1/inventory/{itemId}"),
)

TEAM_MEMBERS: tuple[str, ...] = ("Alice", "Bob", "Charlie", "Dana", "Eve")

# The single finding every simulated scan reports
NEW_SCAN_FINDING = FindingTemplate(
    "SQL Injection",
    "API3:2023",
    "User-provided input is not properly sanitized, allowing an attacker to execute arbitrary SQL queries.",
)
NEW_SCAN_SEVERITY = Severity.CRITICAL
NEW_SCAN_DETAILS = (
    "The `q` query parameter in the specified search endpoint is directly concatenated into a SQL query. "
    "An attacker can provide a payload like `' OR 1=1; --` to extract sensitive data."
)

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)
_DAY = timedelta(days=1)


def _history_for(
    status: VulnerabilityStatus,
    discovered_at: datetime,
    now: datetime,
    rng: random.Random,
) -> tuple[StatusChange, ...]:
    # back-filled entries never land after `now`
    latest = max(now, discovered_at)
    history = [StatusChange(VulnerabilityStatus.NEW, discovered_at)]
    if status in (VulnerabilityStatus.ACKNOWLEDGED, VulnerabilityStatus.FIXED):
        acknowledged_at = min(discovered_at + _DAY * (rng.random() * 5), latest)
        history.append(StatusChange(VulnerabilityStatus.ACKNOWLEDGED, acknowledged_at))
        if status is VulnerabilityStatus.FIXED:
            fixed_at = min(acknowledged_at + _DAY * (rng.random() * 10), latest)
            history.append(StatusChange(VulnerabilityStatus.FIXED, fixed_at))
    return tuple(history)


def generate_mock_vulnerabilities(
    count: int,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[Vulnerability]:
    """Generate `count` mock records, newest first.

    Discovery dates fall between 2024-01-01 and `now`; Acknowledged and Fixed
    records get a matching back-filled history. About 60% are assigned.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    span = max((now - _EPOCH).total_seconds(), 0.0)
    batch = f"{rng.getrandbits(32):08x}"

    result: list[Vulnerability] = []
    for i in range(count):
        template = rng.choice(VULNERABILITY_TEMPLATES)
        severity = rng.choice(list(Severity))
        status = rng.choice(list(VulnerabilityStatus))
        endpoint = rng.choice(API_ENDPOINTS)
        discovered_at = _EPOCH + timedelta(seconds=rng.random() * span)
        assignee = rng.choice(TEAM_MEMBERS) if rng.random() > 0.4 else None

        result.append(
            Vulnerability(
                id=f"vuln-gen-{batch}-{i}",
                type=template.type,
                owasp_id=template.owasp_id,
                description=template.description,
                details=(
                    f"A potential {template.type} issue was detected on the {endpoint.path} endpoint. "
                    "Further investigation is required. This is a mock entry generated for demonstration purposes."
                ),
                severity=severity,
                status=status,
                endpoint=endpoint,
                discovered_at=discovered_at,
                status_history=_history_for(status, discovered_at, now, rng),
                assignee=assignee,
            )
        )

    result.sort(key=lambda v: v.discovered_at, reverse=True)
    return result
