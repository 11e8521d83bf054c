from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor

from dependency_injector import containers, providers

from ..config.settings import AppConfig
from ..core.ports.clock_port import ClockPort, SystemClock
from ..core.services.mock_data import generate_mock_vulnerabilities
from ..core.services.scan_simulator import ScanSimulator
from ..core.services.scan_wizard import ScanWizard
from ..core.services.store import VulnerabilityStore
from ..core.services.traffic import TrafficMonitor
from ..core.usecases.list_vulnerabilities import ListVulnerabilitiesUseCase
from ..core.usecases.update_vulnerability import AssignVulnerabilityUseCase, ChangeStatusUseCase
from ..infra.gemini_advisor import GeminiAdvisor
from ..infra.http_client import HttpClient
from ..infra.rate_limiter import SimpleRateLimiter

logger = logging.getLogger(__name__)


def build_store(clock: ClockPort, rng: random.Random, count: int) -> VulnerabilityStore:
	records = generate_mock_vulnerabilities(count, rng=rng, now=clock.now())
	logger.info(f"Generated {len(records)} mock vulnerabilities for this session")
	return VulnerabilityStore(clock, records)


def build_rate_limiter(rps, clock):
	if not rps:
		return None
	logger.debug(f"Pacing AI requests at {rps}/s")
	return SimpleRateLimiter(rps, clock=clock)


def executor_resource(max_workers):
	logger.debug(f"Starting lookup executor with {max_workers} workers")
	executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sentinel")
	try:
		yield executor
	finally:
		# in-flight lookups are allowed to finish; nothing cancels them
		executor.shutdown(wait=True)
		logger.debug("Lookup executor shut down")


def http_client_resource(timeout_seconds, rate_limiter):
	logger.debug(f"Initializing HTTP client (timeout={timeout_seconds}s)")
	client = HttpClient(timeout_seconds=timeout_seconds, rate_limiter=rate_limiter)
	try:
		yield client
	finally:
		logger.debug("Closing HTTP client")
		client.close()


class Container(containers.DeclarativeContainer):
	config = providers.Configuration(pydantic_settings=[AppConfig()])

	clock = providers.Singleton(SystemClock)
	rng = providers.Singleton(random.Random, config.mock_seed)

	store = providers.Singleton(
		build_store,
		clock=clock,
		rng=rng,
		count=config.mock_vulnerability_count,
	)

	executor = providers.Resource(executor_resource, max_workers=config.lookup_workers)

	rate_limiter = providers.Singleton(build_rate_limiter, rps=config.ai_requests_per_second, clock=clock)

	http_client = providers.Resource(
		http_client_resource,
		timeout_seconds=config.ai_timeout_seconds,
		rate_limiter=rate_limiter,
	)

	advisor = providers.Singleton(
		GeminiAdvisor,
		http_client=http_client,
		api_key=config.gemini_api_key,
		base_url=config.gemini_base_url,
		remediation_model=config.remediation_model,
		cve_search_model=config.cve_search_model,
		cve_detail_model=config.cve_detail_model,
	)

	scan_simulator = providers.Factory(
		ScanSimulator,
		clock=clock,
		delay_seconds=config.scan_delay_seconds,
		rng=rng,
	)

	scan_wizard = providers.Factory(ScanWizard, simulator=scan_simulator, store=store, executor=executor)

	traffic_monitor = providers.Factory(
		TrafficMonitor,
		clock=clock,
		interval_seconds=config.traffic_interval_seconds,
		window=config.traffic_window,
		rng=rng,
	)

	list_uc = providers.Factory(ListVulnerabilitiesUseCase, store=store)
	change_status_uc = providers.Factory(ChangeStatusUseCase, store=store)
	assign_uc = providers.Factory(AssignVulnerabilityUseCase, store=store)
