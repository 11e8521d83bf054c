from __future__ import annotations

import logging
import random
import uuid
from urllib.parse import urlsplit

from ..domain.enums import HttpMethod
from ..domain.models import Endpoint, ScanResult, ScanSummary, Vulnerability
from ..ports.clock_port import ClockPort
from .mock_data import NEW_SCAN_DETAILS, NEW_SCAN_FINDING, NEW_SCAN_SEVERITY

logger = logging.getLogger(__name__)

DEFAULT_SCAN_DELAY_SECONDS = 3.0
FALLBACK_PATH = "/simulated/path"


def endpoint_path_from_url(target_url: str) -> str:
    """Path component of the target; a bare host maps to "/", a blank target to the fallback."""
    if not target_url or not target_url.strip():
        return FALLBACK_PATH
    return urlsplit(target_url.strip()).path or "/"


class ScanSimulator:
    """Pretends to scan a target and reports one fixed finding after a delay.

    There is no failure path: `run` always returns a result.
    """

    def __init__(
        self,
        clock: ClockPort,
        delay_seconds: float = DEFAULT_SCAN_DELAY_SECONDS,
        rng: random.Random | None = None,
    ) -> None:
        self._clock = clock
        self._delay = delay_seconds
        self._rng = rng or random.Random()

    def run(self, target_url: str) -> ScanResult:
        logger.info(f"Scanning {target_url} (simulated, {self._delay}s)")
        self._clock.sleep(self._delay)

        discovered_at = self._clock.now()
        v = Vulnerability.new(
            id=f"vuln-{uuid.uuid4().hex}",
            type=NEW_SCAN_FINDING.type,
            owasp_id=NEW_SCAN_FINDING.owasp_id,
            description=NEW_SCAN_FINDING.description,
            details=NEW_SCAN_DETAILS,
            severity=NEW_SCAN_SEVERITY,
            endpoint=Endpoint(HttpMethod.GET, endpoint_path_from_url(target_url)),
            discovered_at=discovered_at,
        )
        summary = ScanSummary(
            vulnerabilities_found=1,
            highest_severity=NEW_SCAN_SEVERITY,
            endpoints_scanned=self._rng.randint(10, 59),
        )
        logger.info(f"Scan of {target_url} complete: {v.id} at {v.endpoint}")
        return ScanResult(vulnerability=v, summary=summary)
