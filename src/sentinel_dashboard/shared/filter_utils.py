from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

from asteval import Interpreter

if TYPE_CHECKING:
    from ..core.domain.models import Vulnerability


def filter_vulnerabilities(vulns: Sequence[Vulnerability], filter_expr: str) -> list[Vulnerability]:
    """Filter vulnerability records using an asteval expression.

    Available variables in filter expression:
    - id: str - Record identifier
    - type: str - Vulnerability class name (e.g. "SQL Injection")
    - owasp_id: str - Classification code (e.g. "API3:2023")
    - severity: str - Critical, High, Medium, Low or Info
    - severity_rank: int - 4 (Critical) down to 0 (Info)
    - status: str - New, Acknowledged or Fixed
    - method: str - Endpoint HTTP method
    - path: str - Endpoint path
    - assignee: str | None - Assigned team member
    - has_assignee: bool - Whether an assignee is set
    - description: str - Description text
    - details: str - Details text
    - discovered_at: datetime - Discovery timestamp
    - history_len: int - Number of status history entries
    """
    aeval = Interpreter()
    filtered = []

    for v in vulns:
        ctx = {
            "id": v.id,
            "type": v.type,
            "owasp_id": v.owasp_id,
            "severity": v.severity.value,
            "severity_rank": v.severity.rank,
            "status": v.status.value,
            "method": v.endpoint.method.value,
            "path": v.endpoint.path,
            "assignee": v.assignee,
            "has_assignee": v.is_assigned,
            "description": v.description,
            "details": v.details,
            "discovered_at": v.discovered_at,
            "history_len": len(v.status_history),
        }

        for key, value in ctx.items():
            aeval.symtable[key] = value

        result = aeval(filter_expr)
        if aeval.error:
            error_msg = aeval.error[0].get_error()
            raise ValueError(f"Filter evaluation error: {error_msg}")
        if result:
            filtered.append(v)

    return filtered
