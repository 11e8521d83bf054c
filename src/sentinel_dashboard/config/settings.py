from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .urls import DEFAULT_GEMINI_BASE_URL


class AppConfig(BaseSettings):
    """Application configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the SENTINEL_ prefix.
    For example:
        - SENTINEL_GEMINI_API_KEY=AIza...
        - SENTINEL_MOCK_SEED=42
        - SENTINEL_SCAN_DELAY_SECONDS=0.5
        - SENTINEL_AI_REQUESTS_PER_SECOND=1

    Alternatively, settings can be provided programmatically:
        client = SentinelClient(config=AppConfig(gemini_api_key="AIza..."))
    """

    model_config = SettingsConfigDict(
        env_prefix="SENTINEL_",
        case_sensitive=False,
        extra="forbid",
    )

    gemini_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Gemini generateContent API. AI lookups fail with a service error when unset.",
    )

    gemini_base_url: str = Field(
        default=DEFAULT_GEMINI_BASE_URL,
        description="Base URL of the Gemini REST API",
    )

    remediation_model: str = Field(default="gemini-2.5-pro", description="Model used for remediation advice")
    cve_search_model: str = Field(default="gemini-2.5-flash", description="Model used for related-CVE search")
    cve_detail_model: str = Field(default="gemini-2.5-pro", description="Model used for structured CVE details")

    ai_timeout_seconds: float = Field(default=60.0, gt=0, description="HTTP timeout for AI requests")

    ai_requests_per_second: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional pacing of outbound AI requests. None disables pacing.",
    )

    lookup_workers: int = Field(default=4, ge=1, description="Thread pool size for background lookups and scans")

    mock_vulnerability_count: int = Field(default=50, ge=0, description="Records generated at session start")
    mock_seed: Optional[int] = Field(default=None, description="Seed for reproducible mock data")

    scan_delay_seconds: float = Field(default=3.0, ge=0, description="Simulated scan duration")

    traffic_interval_seconds: float = Field(default=2.0, gt=0, description="Live traffic sampling interval")
    traffic_window: int = Field(default=30, ge=1, description="Number of traffic samples kept")
