from __future__ import annotations

import pytest

from sentinel_dashboard.core.domain.enums import Severity, SortKey, VulnerabilityStatus
from sentinel_dashboard.core.services.query import (
    VulnerabilityQuery,
    apply_query,
    describe_empty_state,
    matches_text,
    sort_vulnerabilities,
)


def _ids(items):
    return [v.id for v in items]


def test_default_query_returns_all_newest_first(sample_vulnerabilities):
    result = apply_query(sample_vulnerabilities, VulnerabilityQuery())
    assert _ids(result) == ["v-5", "v-4", "v-3", "v-2", "v-1"]


def test_severity_filter_high_only(sample_vulnerabilities):
    result = apply_query(sample_vulnerabilities, VulnerabilityQuery(severity=Severity.HIGH))
    assert _ids(result) == ["v-3"]


def test_status_filter(sample_vulnerabilities):
    result = apply_query(sample_vulnerabilities, VulnerabilityQuery(status=VulnerabilityStatus.NEW))
    assert set(_ids(result)) == {"v-1", "v-2", "v-5"}
    assert all(v.status is VulnerabilityStatus.NEW for v in result)


def test_filters_combine(sample_vulnerabilities):
    q = VulnerabilityQuery(severity=Severity.CRITICAL, status=VulnerabilityStatus.FIXED)
    assert _ids(apply_query(sample_vulnerabilities, q)) == ["v-4"]


def test_result_is_subset_and_input_untouched(sample_vulnerabilities):
    before = list(sample_vulnerabilities)
    result = apply_query(sample_vulnerabilities, VulnerabilityQuery(text="api", sort=SortKey.SEVERITY_ASC))
    assert set(_ids(result)) <= set(_ids(before))
    assert sample_vulnerabilities == before


@pytest.mark.parametrize(
    "text, expected",
    [
        ("sql", ["v-1"]),
        ("SQL INJECTION", ["v-1"]),
        ("api2", ["v-3"]),
        ("/webhooks", ["v-4"]),
        ("hardening", ["v-5", "v-4", "v-3", "v-2", "v-1"]),
        ("   ", ["v-5", "v-4", "v-3", "v-2", "v-1"]),
        ("no-such-thing", []),
    ],
)
def test_text_search(sample_vulnerabilities, text, expected):
    assert _ids(apply_query(sample_vulnerabilities, VulnerabilityQuery(text=text))) == expected


def test_text_search_ignores_assignee_and_details(sample_vulnerabilities):
    v = sample_vulnerabilities[0]
    assert not matches_text(v, "charlie")
    assert not matches_text(v, "details for")


def test_sort_discovered_asc(sample_vulnerabilities):
    result = sort_vulnerabilities(sample_vulnerabilities, SortKey.DISCOVERED_ASC)
    assert _ids(result) == ["v-1", "v-2", "v-3", "v-4", "v-5"]


def test_sort_by_severity_uses_rank_not_label(sample_vulnerabilities):
    desc = sort_vulnerabilities(sample_vulnerabilities, SortKey.SEVERITY_DESC)
    assert [v.severity for v in desc] == [
        Severity.CRITICAL, Severity.CRITICAL, Severity.HIGH, Severity.LOW, Severity.LOW,
    ]
    asc = sort_vulnerabilities(sample_vulnerabilities, SortKey.SEVERITY_ASC)
    assert asc[0].severity is Severity.LOW
    assert asc[-1].severity is Severity.CRITICAL


def test_assignee_sort_puts_unassigned_last_both_directions(sample_vulnerabilities):
    asc = sort_vulnerabilities(sample_vulnerabilities, SortKey.ASSIGNEE_ASC)
    assert [v.assignee for v in asc] == ["alice", "Bob", "Charlie", None, None]
    desc = sort_vulnerabilities(sample_vulnerabilities, SortKey.ASSIGNEE_DESC)
    assert [v.assignee for v in desc] == ["Charlie", "Bob", "alice", None, None]


def test_empty_collection():
    for key in SortKey:
        assert apply_query([], VulnerabilityQuery(sort=key, text="x")) == ()


def test_expression_filter(sample_vulnerabilities):
    q = VulnerabilityQuery(expression="severity == 'Low' and not has_assignee")
    assert _ids(apply_query(sample_vulnerabilities, q)) == ["v-5", "v-2"]
    q = VulnerabilityQuery(expression="severity_rank >= 3", severity=Severity.CRITICAL)
    assert set(_ids(apply_query(sample_vulnerabilities, q))) == {"v-1", "v-4"}


def test_invalid_expression_raises(sample_vulnerabilities):
    with pytest.raises(ValueError, match="Filter evaluation error"):
        apply_query(sample_vulnerabilities, VulnerabilityQuery(expression="invalid syntax !"))


def test_describe_empty_state():
    assert describe_empty_state(10, 3) is None
    assert describe_empty_state(0, 0) == "No vulnerabilities found. Run a new scan to get started."
    assert describe_empty_state(10, 0) == "No vulnerabilities match the current filters."
