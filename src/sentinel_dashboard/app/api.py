from __future__ import annotations

from typing import Callable, Optional, Sequence

from dependency_injector import providers

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.enums import Severity, SortKey, VulnerabilityStatus
from ..core.domain.models import CveDetails, Vulnerability
from ..core.ports.advisor_port import AdvisorPort
from ..core.ports.clock_port import ClockPort
from ..core.services.dashboard import DashboardSummary, summarize
from ..core.services.detail_session import VulnerabilityDetailSession
from ..core.services.mock_data import TEAM_MEMBERS
from ..core.services.scan_wizard import ScanWizard
from ..core.services.store import Snapshot
from ..core.services.traffic import TrafficMonitor


class SentinelClient:
    """One dashboard session: mock records, scan wizard, AI lookups and traffic feed.

    The record collection lives only as long as the client. It is regenerated
    for every new client and never persisted.

    Example:
        with SentinelClient() as client:
            critical = client.list_vulnerabilities(severity=Severity.CRITICAL)
            client.change_status(critical[0].id, VulnerabilityStatus.ACKNOWLEDGED)

        # Reproducible data and a configured AI key
        with SentinelClient(config=AppConfig(mock_seed=7, gemini_api_key="AIza...")) as client:
            session = client.detail(client.vulnerabilities()[0].id)
            session.request_remediation().result()
            print(session.remediation.result or session.remediation.error)
    """

    def __init__(
        self,
        *,
        config: AppConfig | None = None,
        advisor: AdvisorPort | None = None,
        clock: ClockPort | None = None,
    ):
        """Initialize the client.

        Args:
            config: Optional AppConfig. If None, settings come from SENTINEL_* environment variables.
            advisor: Optional AdvisorPort replacing the Gemini-backed advisor.
            clock: Optional ClockPort replacing the system clock.
        """
        self._container = Container()
        if config is not None:
            self._container.config.from_pydantic(config)
        if advisor is not None:
            self._container.advisor.override(providers.Object(advisor))
        if clock is not None:
            self._container.clock.override(providers.Object(clock))
        self._container.init_resources()

    @property
    def team_members(self) -> tuple[str, ...]:
        return TEAM_MEMBERS

    def vulnerabilities(self) -> Snapshot:
        """Return the full, unfiltered snapshot (newest first)."""
        return self._container.store().snapshot()

    def list_vulnerabilities(
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
        """Return the filtered, searched and sorted view of the collection.

        Args:
            severity: Keep only this severity.
            status: Keep only this status. None shows all.
            text: Case-insensitive substring matched against type, OWASP id, description and endpoint path.
            sort: Ordering. Assignee sorts put unassigned records last in both directions.
            filter_expr: Optional asteval expression, e.g. 'severity_rank >= 3 and not has_assignee'.
            limit: Maximum number of results to return.
            skip: Number of results to skip.

        Raises:
            ValueError: If filter_expr is invalid.
        """
        uc = self._container.list_uc()
        return uc.execute(
            severity=severity,
            status=status,
            text=text,
            sort=sort,
            filter_expr=filter_expr,
            limit=limit,
            skip=skip,
        )

    def get(self, id: str) -> Vulnerability | None:
        return self._container.store().get(id)

    def change_status(self, id: str, status: VulnerabilityStatus) -> Vulnerability:
        """Move a record to `status`; a no-op when it already has it.

        Raises:
            VulnerabilityNotFoundError: If no record has this id.
        """
        return self._container.change_status_uc().execute(id, status)

    def assign(self, id: str, assignee: str | None) -> Vulnerability:
        """Set or clear (None/blank) the assignee of a record.

        Raises:
            VulnerabilityNotFoundError: If no record has this id.
        """
        return self._container.assign_uc().execute(id, assignee)

    def subscribe(self, listener: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Call `listener` with every new snapshot. Returns the unsubscribe function."""
        return self._container.store().subscribe(listener)

    def new_scan(self) -> ScanWizard:
        """Open a new-scan wizard. Its finding is added to this client's records."""
        return self._container.scan_wizard()

    def detail(self, id: str) -> VulnerabilityDetailSession:
        """Open the lookup session behind a record's detail view.

        Raises:
            VulnerabilityNotFoundError: If no record has this id.
        """
        v = self._container.store().require(id)
        return VulnerabilityDetailSession(v, self._container.advisor(), self._container.executor())

    def lookup_cve(self, cve_id: str) -> CveDetails:
        """Fetch structured details for one CVE id outside any detail view.

        Raises:
            AdvisorUnavailableError: If the AI service fails.
        """
        return self._container.advisor().cve_details(cve_id.strip().upper())

    def dashboard(self) -> DashboardSummary:
        return summarize(self.vulnerabilities())

    def traffic_monitor(self) -> TrafficMonitor:
        """Create a traffic feed. Call start()/stop() (or use it as a context manager)."""
        return self._container.traffic_monitor()

    def close(self) -> None:
        """Release the executor and HTTP client. Waits for running lookups and scans."""
        self._container.shutdown_resources()

    def __enter__(self) -> SentinelClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "SentinelClient",
    "AppConfig",
]
