from __future__ import annotations

import random

import pytest

from sentinel_dashboard.core.domain.enums import HttpMethod, ScanProfile, ScanStep, Severity, VulnerabilityStatus
from sentinel_dashboard.core.domain.errors import InvalidScanStepError, ScanInProgressError
from sentinel_dashboard.core.services.scan_simulator import (
    FALLBACK_PATH,
    ScanSimulator,
    endpoint_path_from_url,
)
from sentinel_dashboard.core.services.scan_wizard import ScanConfig, ScanWizard, validate_scan_config
from sentinel_dashboard.core.services.store import VulnerabilityStore


class PendingExecutor:
    """Holds submitted work until run_all() so the scanning step is observable."""

    def __init__(self) -> None:
        self.pending = []

    def submit(self, fn, *args):
        from concurrent.futures import Future

        future = Future()
        self.pending.append((future, fn, args))
        return future

    def run_all(self) -> None:
        while self.pending:
            future, fn, args = self.pending.pop(0)
            future.set_result(fn(*args))


@pytest.mark.parametrize(
    "url, path",
    [
        ("https://api.example.com/v2/products/search", "/v2/products/search"),
        ("https://api.example.com", "/"),
        ("https://api.example.com/", "/"),
        ("https://api.example.com/a/b?q=1#frag", "/a/b"),
        ("", FALLBACK_PATH),
        ("   ", FALLBACK_PATH),
    ],
)
def test_endpoint_path_from_url(url, path):
    assert endpoint_path_from_url(url) == path


def test_simulator_reports_one_critical_sql_injection(clock):
    sim = ScanSimulator(clock, delay_seconds=3.0, rng=random.Random(0))
    start = clock.now()
    result = sim.run("https://api.example.com/v2/products/search")

    assert clock.sleeps == [3.0]
    v = result.vulnerability
    assert v.type == "SQL Injection"
    assert v.owasp_id == "API3:2023"
    assert v.severity is Severity.CRITICAL
    assert v.status is VulnerabilityStatus.NEW
    assert v.endpoint.method is HttpMethod.GET
    assert v.endpoint.path == "/v2/products/search"
    assert v.discovered_at > start
    assert len(v.status_history) == 1
    assert v.status_history[0].timestamp == v.discovered_at
    assert result.summary.vulnerabilities_found == 1
    assert result.summary.highest_severity is Severity.CRITICAL
    assert 10 <= result.summary.endpoints_scanned <= 59


def test_simulator_ids_are_unique(clock):
    sim = ScanSimulator(clock, delay_seconds=0)
    assert sim.run("https://x.test/a").vulnerability.id != sim.run("https://x.test/a").vulnerability.id


def test_validate_scan_config_messages():
    assert validate_scan_config(ScanConfig()) == {}
    errors = validate_scan_config(ScanConfig(scan_name=" ", target_url=""))
    assert errors == {"scan_name": "Scan name is required.", "target_url": "Target URL is required."}
    assert validate_scan_config(ScanConfig(target_url="not a url")) == {"target_url": "Please enter a valid URL."}
    errors = validate_scan_config(ScanConfig(profile=ScanProfile.AUTHENTICATED_DEEP_SCAN))
    assert errors == {"api_key": "API Key is required for authenticated scans."}
    assert validate_scan_config(ScanConfig(profile=ScanProfile.AUTHENTICATED_DEEP_SCAN, api_key="k-1234")) == {}


def test_masked_api_key():
    assert ScanConfig(api_key="secret-abcd").masked_api_key == "************abcd"
    assert ScanConfig().masked_api_key == ""


@pytest.fixture
def store(clock):
    return VulnerabilityStore(clock)


def test_wizard_invalid_form_stays_on_form(clock, store, executor):
    wizard = ScanWizard(ScanSimulator(clock, 0), store, executor)
    assert wizard.submit(ScanConfig(target_url="nope")) is None
    assert wizard.step is ScanStep.FORM
    assert "target_url" in wizard.errors
    assert len(store) == 0


def test_wizard_basic_scan_adds_record(clock, store, executor):
    wizard = ScanWizard(ScanSimulator(clock, 0), store, executor)
    future = wizard.submit(ScanConfig())
    result = future.result()
    assert wizard.step is ScanStep.COMPLETE
    assert wizard.summary == result.summary
    assert store.snapshot()[0] is result.vulnerability


def test_wizard_advanced_requires_confirmation(clock, store, executor):
    wizard = ScanWizard(ScanSimulator(clock, 0), store, executor)
    assert wizard.submit(ScanConfig(show_advanced=True)) is None
    assert wizard.step is ScanStep.CONFIRM
    wizard.back()
    assert wizard.step is ScanStep.FORM
    wizard.submit(ScanConfig(show_advanced=True))
    wizard.confirm().result()
    assert wizard.step is ScanStep.COMPLETE
    assert len(store) == 1


def test_wizard_rejects_concurrent_scan(clock, store):
    pending = PendingExecutor()
    wizard = ScanWizard(ScanSimulator(clock, 0), store, pending)
    wizard.submit(ScanConfig())
    assert wizard.is_scanning
    with pytest.raises(ScanInProgressError):
        wizard.submit(ScanConfig())
    with pytest.raises(ScanInProgressError):
        wizard.reset()
    pending.run_all()
    assert wizard.step is ScanStep.COMPLETE
    assert len(store) == 1


def test_wizard_reset_keeps_values(clock, store, executor):
    wizard = ScanWizard(ScanSimulator(clock, 0), store, executor)
    config = ScanConfig(scan_name="Nightly")
    wizard.submit(config).result()
    with pytest.raises(InvalidScanStepError):
        wizard.submit(config)
    wizard.reset()
    assert wizard.step is ScanStep.FORM
    assert wizard.config.scan_name == "Nightly"
    assert wizard.result is None
    with pytest.raises(InvalidScanStepError):
        wizard.confirm()


def test_wizard_completes_when_a_store_listener_fails(clock, store, executor):
    def broken(snapshot):
        raise RuntimeError("listener failed")

    store.subscribe(broken)
    wizard = ScanWizard(ScanSimulator(clock, 0), store, executor)
    result = wizard.submit(ScanConfig()).result()

    assert wizard.step is ScanStep.COMPLETE
    assert store.snapshot()[0] is result.vulnerability
    wizard.reset()
    assert wizard.step is ScanStep.FORM


class _FailingSimulator:
    def run(self, target_url):
        raise RuntimeError("scanner crashed")


def test_wizard_leaves_scanning_when_the_run_fails(store, executor):
    wizard = ScanWizard(_FailingSimulator(), store, executor)
    future = wizard.submit(ScanConfig())

    assert isinstance(future.exception(), RuntimeError)
    assert wizard.step is ScanStep.FORM
    assert wizard.result is None
    assert len(store) == 0
