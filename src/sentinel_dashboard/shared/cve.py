from __future__ import annotations

import re
from typing import Iterable

from ..core.domain.models import CveSource


CVE_ID_RE = re.compile(r"CVE-\d{4}-\d{4,}")


def extract_cve_ids(text: str) -> tuple[str, ...]:
    """Return CVE identifiers found in `text`, deduplicated in first-seen order.

    Examples:
        >>> extract_cve_ids("CVE-2021-44228 and CVE-2021-44228, then CVE-2019-0708")
        ('CVE-2021-44228', 'CVE-2019-0708')
    """
    return tuple(dict.fromkeys(CVE_ID_RE.findall(text or "")))


def dedupe_sources(sources: Iterable[CveSource]) -> tuple[CveSource, ...]:
    """Deduplicate citations by URI; the last title seen for a URI wins, first position kept."""
    by_uri: dict[str, CveSource] = {}
    for s in sources:
        if not s.uri or not s.title:
            continue
        by_uri[s.uri] = s
    return tuple(by_uri.values())
