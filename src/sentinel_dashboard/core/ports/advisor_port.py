from __future__ import annotations

from typing import Protocol

from ..domain.models import CveDetails, CveInfo, Vulnerability


class AdvisorPort(Protocol):
    """Opaque boundary to the generative-AI service.

    Every method raises AdvisorUnavailableError when the service fails.
    """

    def remediation(self, v: Vulnerability) -> str:
        """Return free-form (markdown) remediation advice for the record."""
        ...

    def related_cves(self, v: Vulnerability) -> CveInfo:
        """Return a summary of related CVEs with extracted ids and source citations."""
        ...

    def cve_details(self, cve_id: str) -> CveDetails:
        """Return structured details for one CVE identifier."""
        ...
