from __future__ import annotations

import pytest
from pydantic import ValidationError

from sentinel_dashboard.config.settings import AppConfig
from sentinel_dashboard.config.urls import get_generate_content_url


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("SENTINEL_GEMINI_API_KEY", "AIza-test")
    monkeypatch.setenv("SENTINEL_MOCK_SEED", "42")
    monkeypatch.setenv("SENTINEL_AI_REQUESTS_PER_SECOND", "0.5")
    cfg = AppConfig()
    assert cfg.gemini_api_key == "AIza-test"
    assert cfg.mock_seed == 42
    assert cfg.ai_requests_per_second == 0.5


def test_defaults(monkeypatch):
    for name in ("SENTINEL_SCAN_DELAY_SECONDS", "SENTINEL_MOCK_VULNERABILITY_COUNT", "SENTINEL_AI_REQUESTS_PER_SECOND"):
        monkeypatch.delenv(name, raising=False)
    cfg = AppConfig()
    assert cfg.scan_delay_seconds == 3.0
    assert cfg.mock_vulnerability_count == 50
    assert cfg.ai_requests_per_second is None


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        AppConfig(traffic_window=0)
    with pytest.raises(ValidationError):
        AppConfig(ai_timeout_seconds=0)
    with pytest.raises(ValidationError):
        AppConfig(unknown_option=True)


def test_generate_content_url():
    assert (
        get_generate_content_url("gemini-2.5-flash", "https://example.test/")
        == "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
    )
