from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..domain.enums import Severity, SortKey, VulnerabilityStatus
from ..domain.models import Vulnerability
from ..services.query import VulnerabilityQuery, apply_query
from ..services.store import VulnerabilityStore

logger = logging.getLogger(__name__)


class ListVulnerabilitiesUseCase:
    def __init__(self, store: VulnerabilityStore) -> None:
        self._store = store

    def execute(
        self,
        *,
        severity: Optional[Severity] = None,
        status: Optional[VulnerabilityStatus] = None,
        text: Optional[str] = None,
        sort: SortKey = SortKey.DISCOVERED_DESC,
        filter_expr: Optional[str] = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> Sequence[Vulnerability]:
        logger.info(
            f"Listing vulnerabilities: severity={severity}, status={status}, text={text!r}, "
            f"sort={sort.value}, filter={filter_expr}, limit={limit}, skip={skip}"
        )
        query = VulnerabilityQuery(severity=severity, status=status, text=text, sort=sort, expression=filter_expr)
        results = apply_query(self._store.snapshot(), query)
        results = results[skip:]
        if limit is not None:
            results = results[:limit]
        logger.info(f"Found {len(results)} vulnerabilities")
        return results
