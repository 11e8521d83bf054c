from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from threading import RLock
from typing import Optional

from pydantic import AnyUrl, BaseModel, TypeAdapter, ValidationError

from ..domain.enums import ScanDepth, ScanProfile, ScanStep, Severity
from ..domain.errors import InvalidScanStepError, ScanInProgressError
from ..domain.models import ScanResult, ScanSummary
from .scan_simulator import ScanSimulator
from .store import VulnerabilityStore

logger = logging.getLogger(__name__)

_URL = TypeAdapter(AnyUrl)


class ScanConfig(BaseModel):
    """Values of the new-scan form. Defaults match what the form is pre-filled with."""

    scan_name: str = "Weekly Production Scan"
    target_url: str = "https://api.example.com/v2/products/search"
    show_advanced: bool = False
    profile: ScanProfile = ScanProfile.STANDARD_UNAUTHENTICATED
    api_key: str = ""
    depth: ScanDepth = ScanDepth.NORMAL
    include_regex: str = ""
    exclude_regex: str = "/api/v1/health"
    min_severity: Severity = Severity.LOW

    @property
    def masked_api_key(self) -> str:
        if not self.api_key:
            return ""
        return "************" + self.api_key[-4:]


def validate_scan_config(config: ScanConfig) -> dict[str, str]:
    """Return field name -> message for every invalid field (empty when valid)."""
    errors: dict[str, str] = {}
    if not config.scan_name.strip():
        errors["scan_name"] = "Scan name is required."
    if not config.target_url.strip():
        errors["target_url"] = "Target URL is required."
    else:
        try:
            _URL.validate_python(config.target_url.strip())
        except ValidationError:
            errors["target_url"] = "Please enter a valid URL."
    if config.profile is ScanProfile.AUTHENTICATED_DEEP_SCAN and not config.api_key.strip():
        errors["api_key"] = "API Key is required for authenticated scans."
    return errors


class ScanWizard:
    """Linear new-scan flow: form -> (confirm) -> scanning -> complete.

    The simulated scan runs on `executor`; its record is added to the store
    when it finishes. Only one scan may be outstanding per wizard.
    """

    def __init__(self, simulator: ScanSimulator, store: VulnerabilityStore, executor: Executor) -> None:
        self._simulator = simulator
        self._store = store
        self._executor = executor
        self._lock = RLock()
        self.step = ScanStep.FORM
        self.config = ScanConfig()
        self.errors: dict[str, str] = {}
        self.summary: Optional[ScanSummary] = None
        self.result: Optional[ScanResult] = None

    @property
    def is_scanning(self) -> bool:
        return self.step is ScanStep.SCANNING

    def submit(self, config: ScanConfig) -> Optional[Future[ScanResult]]:
        """Validate the form. Advanced scans move to confirmation; others start at once.

        Returns the scan future when a scan was started, otherwise None.
        """
        with self._lock:
            if self.step is ScanStep.SCANNING:
                raise ScanInProgressError("A scan is already running")
            if self.step is not ScanStep.FORM:
                raise InvalidScanStepError(f"Cannot submit the form in step {self.step.value}")
            self.config = config
            self.errors = validate_scan_config(config)
            if self.errors:
                logger.info(f"Scan form rejected: {sorted(self.errors)}")
                return None
            if config.show_advanced:
                self.step = ScanStep.CONFIRM
                return None
            return self._start()

    def back(self) -> None:
        with self._lock:
            if self.step is not ScanStep.CONFIRM:
                raise InvalidScanStepError(f"Cannot go back from step {self.step.value}")
            self.step = ScanStep.FORM

    def confirm(self) -> Future[ScanResult]:
        with self._lock:
            if self.step is ScanStep.SCANNING:
                raise ScanInProgressError("A scan is already running")
            if self.step is not ScanStep.CONFIRM:
                raise InvalidScanStepError(f"Nothing to confirm in step {self.step.value}")
            return self._start()

    def reset(self) -> None:
        """Back to the form, keeping the entered values."""
        with self._lock:
            if self.step is ScanStep.SCANNING:
                raise ScanInProgressError("Cannot reset while a scan is running")
            self.step = ScanStep.FORM
            self.errors = {}
            self.summary = None
            self.result = None

    def _start(self) -> Future[ScanResult]:
        self.step = ScanStep.SCANNING
        self.summary = None
        self.result = None
        target = self.config.target_url.strip()
        logger.info(f"Starting scan '{self.config.scan_name}' against {target}")
        return self._executor.submit(self._run, target)

    def _run(self, target: str) -> ScanResult:
        completed = False
        try:
            result = self._simulator.run(target)
            self._store.add(result.vulnerability)
            completed = True
        finally:
            with self._lock:
                # a failed run returns to the form instead of staying in SCANNING
                self.result = result if completed else None
                self.summary = result.summary if completed else None
                self.step = ScanStep.COMPLETE if completed else ScanStep.FORM
        return result
