from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Generic, Optional, TypeVar

from ..domain.errors import AdvisorUnavailableError
from ..domain.models import CveDetails, CveInfo, Vulnerability
from ..ports.advisor_port import AdvisorPort

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMEDIATION_ERROR = "Failed to get remediation advice. Please try again."
CVE_ERROR = "Failed to get CVE information. Please try again."


def cve_details_error(cve_id: str) -> str:
    return f"Failed to fetch details for {cve_id}."


@dataclass
class LookupState(Generic[T]):
    loading: bool = False
    result: Optional[T] = None
    error: Optional[str] = None


class VulnerabilityDetailSession:
    """Lookup state behind the detail view of one record.

    Remediation, related-CVE and CVE-detail lookups run independently on
    `executor`; each has its own loading flag, result and error. A failed
    lookup stores a generic message and leaves the other lookups alone.
    In-flight calls are not cancelled.
    """

    def __init__(self, vulnerability: Vulnerability, advisor: AdvisorPort, executor: Executor) -> None:
        self.vulnerability = vulnerability
        self._advisor = advisor
        self._executor = executor
        self._lock = Lock()
        self.remediation: LookupState[str] = LookupState()
        self.cves: LookupState[CveInfo] = LookupState()
        self.cve_details: LookupState[CveDetails] = LookupState()
        self.selected_cve_id: Optional[str] = None

    def request_remediation(self) -> Future[Optional[str]]:
        v = self.vulnerability
        return self._launch("remediation", lambda: self._advisor.remediation(v), REMEDIATION_ERROR)

    def request_related_cves(self) -> Future[Optional[CveInfo]]:
        v = self.vulnerability
        return self._launch("cves", lambda: self._advisor.related_cves(v), CVE_ERROR)

    def toggle_cve_details(self, cve_id: str) -> Optional[Future[Optional[CveDetails]]]:
        """Open details for `cve_id`, or collapse them if it is already selected.

        Returns None when collapsing.
        """
        with self._lock:
            if self.selected_cve_id == cve_id:
                self.selected_cve_id = None
                self.cve_details = LookupState()
                return None
            self.selected_cve_id = cve_id
            self.cve_details = LookupState(loading=True)
            state = self.cve_details

        def still_selected() -> bool:
            return self.selected_cve_id == cve_id and self.cve_details is state

        return self._executor.submit(
            self._run,
            state,
            lambda: self._advisor.cve_details(cve_id),
            cve_details_error(cve_id),
            still_selected,
        )

    def _launch(self, attr: str, call: Callable[[], T], message: str) -> Future[Optional[T]]:
        # a fresh state per request; an older call still running can no longer touch it
        with self._lock:
            state: LookupState[T] = LookupState(loading=True)
            setattr(self, attr, state)

        def is_current() -> bool:
            return getattr(self, attr) is state

        return self._executor.submit(self._run, state, call, message, is_current)

    def _run(
        self,
        state: LookupState[T],
        call: Callable[[], T],
        message: str,
        is_current: Callable[[], bool],
    ) -> Optional[T]:
        try:
            value = call()
        except AdvisorUnavailableError as e:
            logger.warning(f"{self.vulnerability.id}: {message} ({e})")
            self._fail(state, message, is_current)
            return None
        except Exception:
            # the detail view only ever shows the generic message
            logger.exception(f"{self.vulnerability.id}: unexpected lookup failure")
            self._fail(state, message, is_current)
            return None
        with self._lock:
            if not is_current():
                logger.debug(f"{self.vulnerability.id}: discarding stale lookup result")
                return None
            state.result = value
            state.loading = False
        return value

    def _fail(self, state: LookupState[T], message: str, is_current: Callable[[], bool]) -> None:
        with self._lock:
            if is_current():
                state.error = message
                state.loading = False
