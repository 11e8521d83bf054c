from __future__ import annotations

import random
import time

import pytest

from sentinel_dashboard.core.domain.enums import Severity, VulnerabilityStatus
from sentinel_dashboard.core.ports.clock_port import SystemClock
from sentinel_dashboard.core.services.dashboard import RECENT_LIMIT, summarize
from sentinel_dashboard.core.services.traffic import LATENCY_RANGE_MS, RPS_RANGE, TrafficMonitor


def test_window_is_prefilled_and_bounded(clock):
    monitor = TrafficMonitor(clock, interval_seconds=2.0, window=5, rng=random.Random(0))
    samples = monitor.samples()
    assert len(samples) == 5
    assert samples[-1].time == clock.now()
    assert [s.time for s in samples] == sorted(s.time for s in samples)

    for _ in range(7):
        clock.advance(2.0)
        monitor.tick()
    assert len(monitor.samples()) == 5
    assert monitor.current().time == clock.now()


def test_sample_ranges(clock):
    monitor = TrafficMonitor(clock, window=50, rng=random.Random(1))
    for s in monitor.samples():
        assert RPS_RANGE[0] <= s.rps <= RPS_RANGE[1]
        assert LATENCY_RANGE_MS[0] <= s.latency_ms <= LATENCY_RANGE_MS[1]


def test_invalid_window(clock):
    with pytest.raises(ValueError):
        TrafficMonitor(clock, window=0)


def test_start_stop_background_sampling():
    monitor = TrafficMonitor(SystemClock(), interval_seconds=0.01, window=3)
    first = monitor.current()
    with monitor:
        assert monitor.running
        deadline = time.monotonic() + 2.0
        while monitor.current() is first and time.monotonic() < deadline:
            time.sleep(0.01)
    assert not monitor.running
    assert monitor.current() is not first
    assert len(monitor.samples()) == 3


def test_summarize(sample_vulnerabilities):
    summary = summarize(sample_vulnerabilities)
    assert summary.total == 5
    assert summary.by_severity == ((Severity.CRITICAL, 2), (Severity.HIGH, 1), (Severity.LOW, 2))
    assert dict(summary.by_status) == {
        VulnerabilityStatus.NEW: 3,
        VulnerabilityStatus.ACKNOWLEDGED: 1,
        VulnerabilityStatus.FIXED: 1,
    }
    assert summary.critical_and_high == 3
    assert len(summary.recent) == RECENT_LIMIT
    assert summary.recent[0].id == "v-5"


def test_summarize_empty():
    summary = summarize([])
    assert summary.total == 0
    assert summary.by_severity == ()
    assert summary.recent == ()
