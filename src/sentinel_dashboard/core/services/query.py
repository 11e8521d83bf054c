from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..domain.enums import Severity, SortKey, VulnerabilityStatus
from ..domain.models import Vulnerability
from ...shared.filter_utils import filter_vulnerabilities

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VulnerabilityQuery:
    severity: Optional[Severity] = None
    status: Optional[VulnerabilityStatus] = None  # None shows all statuses
    text: Optional[str] = None
    sort: SortKey = SortKey.DISCOVERED_DESC
    expression: Optional[str] = None


def matches_text(v: Vulnerability, text: str) -> bool:
    needle = text.strip().lower()
    if not needle:
        return True
    haystacks = (v.type, v.owasp_id, v.description, v.endpoint.path)
    return any(needle in h.lower() for h in haystacks)


def _matches(v: Vulnerability, query: VulnerabilityQuery) -> bool:
    if query.severity is not None and v.severity is not query.severity:
        return False
    if query.status is not None and v.status is not query.status:
        return False
    if query.text and not matches_text(v, query.text):
        return False
    return True


def sort_vulnerabilities(items: Sequence[Vulnerability], key: SortKey) -> list[Vulnerability]:
    """Stable sort by the given key.

    For assignee sorts, unassigned records come after every assigned record
    in both directions.
    """
    if key is SortKey.DISCOVERED_DESC:
        return sorted(items, key=lambda v: v.discovered_at, reverse=True)
    if key is SortKey.DISCOVERED_ASC:
        return sorted(items, key=lambda v: v.discovered_at)
    if key is SortKey.SEVERITY_DESC:
        return sorted(items, key=lambda v: v.severity.rank, reverse=True)
    if key is SortKey.SEVERITY_ASC:
        return sorted(items, key=lambda v: v.severity.rank)

    assigned = [v for v in items if v.is_assigned]
    unassigned = [v for v in items if not v.is_assigned]
    reverse = key is SortKey.ASSIGNEE_DESC
    assigned.sort(key=lambda v: (v.assignee or "").casefold(), reverse=reverse)
    return assigned + unassigned


def apply_query(records: Sequence[Vulnerability], query: VulnerabilityQuery) -> tuple[Vulnerability, ...]:
    """Derive the display list: filter, then sort. Pure; the input is left untouched."""
    selected = [v for v in records if _matches(v, query)]
    if query.expression:
        selected = filter_vulnerabilities(selected, query.expression)
    result = tuple(sort_vulnerabilities(selected, query.sort))
    logger.debug(f"Query {query} matched {len(result)}/{len(records)} records")
    return result


def describe_empty_state(total: int, shown: int) -> Optional[str]:
    """Message for an empty list, distinguishing no data from no matches."""
    if shown:
        return None
    if total == 0:
        return "No vulnerabilities found. Run a new scan to get started."
    return "No vulnerabilities match the current filters."
