from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional, Sequence

import typer

from .api import SentinelClient
from ..config.settings import AppConfig
from ..core.domain.enums import ScanDepth, ScanProfile, ScanStep, Severity, SortKey, VulnerabilityStatus
from ..core.domain.errors import AdvisorUnavailableError, VulnerabilityNotFoundError
from ..core.domain.models import CveDetails, Vulnerability
from ..core.services.query import describe_empty_state
from ..core.services.scan_wizard import ScanConfig
from ..shared.display import severity_style, status_style


app = typer.Typer(add_completion=False, help="Sentinel API security dashboard")


class LogLevel(str, Enum):
    OFF = "OFF"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


@app.callback()
def main(
    ctx: typer.Context,
    log_level: LogLevel = typer.Option(LogLevel.OFF, "--log-level", help="Log level for the sentinel_dashboard logger."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed the session's mock data for reproducible ids."),
) -> None:
    """Every invocation is a fresh session with newly generated mock data."""
    ctx.obj = {"seed": seed}
    if log_level is LogLevel.OFF:
        return

    package_name = __package__.split(".", 1)[0] if __package__ else "sentinel_dashboard"
    logger = logging.getLogger(package_name)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()  # stderr
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(getattr(logging, log_level.value))


@contextmanager
def provide_client(ctx: typer.Context) -> Iterator[SentinelClient]:
    seed = (ctx.obj or {}).get("seed")
    config = AppConfig(mock_seed=seed) if seed is not None else None
    with SentinelClient(config=config) as client:
        yield client


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


@app.command("list", help="List vulnerabilities: ID, severity, status, type, endpoint, assignee.")
def list_cmd(
    ctx: typer.Context,
    severity: Optional[Severity] = typer.Option(None, case_sensitive=False, help="Only this severity"),
    status: Optional[VulnerabilityStatus] = typer.Option(None, case_sensitive=False, help="Only this status (default: all)"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Text search over type, OWASP id, description, path"),
    sort: SortKey = typer.Option(SortKey.DISCOVERED_DESC, case_sensitive=False, help="Sort order"),
    filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Filter expression (e.g., 'severity_rank >= 3 and not has_assignee')"),
    limit: int = typer.Option(20, help="Limit number of results (default: 20)"),
    skip: int = typer.Option(0, help="Skip the first N results"),
) -> None:
    with provide_client(ctx) as client:
        try:
            vulns = client.list_vulnerabilities(
                severity=severity,
                status=status,
                text=search,
                sort=sort,
                filter_expr=filter,
                limit=limit,
                skip=skip,
            )
        except ValueError as e:
            _fail(f"Filter error: {e}")
        empty = describe_empty_state(len(client.vulnerabilities()), len(vulns))
        if empty:
            typer.echo(empty)
            return
        _print_list(vulns)


@app.command(help="Show one vulnerability with its status history.")
def show(ctx: typer.Context, id: str = typer.Argument(..., help="Vulnerability id (see `list`)")) -> None:
    with provide_client(ctx) as client:
        v = client.get(id)
        if v is None:
            _fail("Not found")
        _print_detail(v)


@app.command("status", help="Change a vulnerability's status and print the updated history.")
def status_cmd(
    ctx: typer.Context,
    id: str = typer.Argument(...),
    new_status: VulnerabilityStatus = typer.Argument(..., case_sensitive=False, metavar="STATUS"),
) -> None:
    with provide_client(ctx) as client:
        try:
            v = client.change_status(id, new_status)
        except VulnerabilityNotFoundError as e:
            _fail(str(e))
        _print_detail(v)


@app.command(help="Assign a vulnerability to a team member (empty name clears).")
def assign(
    ctx: typer.Context,
    id: str = typer.Argument(...),
    name: str = typer.Argument("", help="Team member name"),
) -> None:
    with provide_client(ctx) as client:
        if name and name not in client.team_members:
            typer.echo(f"Note: {name} is not a known team member ({', '.join(client.team_members)})", err=True)
        try:
            v = client.assign(id, name)
        except VulnerabilityNotFoundError as e:
            _fail(str(e))
        typer.echo(f"{v.id}: assignee {v.assignee or '-'}")


@app.command(help="Run a simulated scan and print the finding it adds.")
def scan(
    ctx: typer.Context,
    target_url: str = typer.Argument("https://api.example.com/v2/products/search"),
    name: str = typer.Option("Weekly Production Scan", "--name"),
    profile: ScanProfile = typer.Option(ScanProfile.STANDARD_UNAUTHENTICATED, case_sensitive=False),
    api_key: str = typer.Option("", "--api-key", help="Required for the authenticated profile"),
    depth: ScanDepth = typer.Option(ScanDepth.NORMAL, case_sensitive=False),
    include_regex: str = typer.Option("", "--include"),
    exclude_regex: str = typer.Option("/api/v1/health", "--exclude"),
    min_severity: Severity = typer.Option(Severity.LOW, "--min-severity", case_sensitive=False),
    advanced: bool = typer.Option(False, "--advanced", help="Show the confirmation step before scanning"),
) -> None:
    config = ScanConfig(
        scan_name=name,
        target_url=target_url,
        show_advanced=advanced,
        profile=profile,
        api_key=api_key,
        depth=depth,
        include_regex=include_regex,
        exclude_regex=exclude_regex,
        min_severity=min_severity,
    )
    with provide_client(ctx) as client:
        wizard = client.new_scan()
        future = wizard.submit(config)
        if wizard.errors:
            for field, message in wizard.errors.items():
                typer.echo(f"{field}: {message}", err=True)
            raise typer.Exit(code=1)
        if wizard.step is ScanStep.CONFIRM:
            _print_scan_confirmation(config)
            future = wizard.confirm()
        typer.echo(f"Scanning {config.target_url}...")
        result = future.result()
        s = result.summary
        typer.echo("Scan finished successfully!")
        typer.echo(f"  Endpoints Scanned:         {s.endpoints_scanned}")
        typer.echo(f"  Vulnerabilities Found:     {s.vulnerabilities_found}")
        typer.echo(f"  Highest Severity Detected: {_styled_severity(s.highest_severity)}")
        typer.echo("")
        _print_detail(result.vulnerability)


@app.command(help="Ask the AI service for remediation advice on a vulnerability.")
def remediate(ctx: typer.Context, id: str = typer.Argument(...)) -> None:
    with provide_client(ctx) as client:
        try:
            session = client.detail(id)
        except VulnerabilityNotFoundError as e:
            _fail(str(e))
        session.request_remediation().result()
        if session.remediation.error:
            _fail(session.remediation.error)
        typer.echo(session.remediation.result)


@app.command(help="Search related CVEs for a vulnerability (summary, CVE ids, sources).")
def cves(ctx: typer.Context, id: str = typer.Argument(...)) -> None:
    with provide_client(ctx) as client:
        try:
            session = client.detail(id)
        except VulnerabilityNotFoundError as e:
            _fail(str(e))
        session.request_related_cves().result()
        if session.cves.error:
            _fail(session.cves.error)
        info = session.cves.result
        typer.echo(info.summary)
        if info.cve_ids:
            typer.echo("CVEs: " + ", ".join(info.cve_ids))
        if info.sources:
            typer.echo("Sources:")
            for src in info.sources:
                typer.echo(f"  - {src.title} ({src.uri})")


@app.command(help="Show structured details (CVSS, affected software, references) for a CVE id.")
def cve(ctx: typer.Context, cve_id: str = typer.Argument(..., help="e.g. CVE-2021-44228")) -> None:
    with provide_client(ctx) as client:
        try:
            details = client.lookup_cve(cve_id)
        except AdvisorUnavailableError:
            _fail(f"Failed to fetch details for {cve_id}.")
        _print_cve(details)


@app.command(help="Overview counts by severity and status plus the most recent findings.")
def dashboard(ctx: typer.Context) -> None:
    with provide_client(ctx) as client:
        summary = client.dashboard()
        typer.echo(f"Total vulnerabilities: {summary.total}")
        typer.echo(f"Critical & High:       {summary.critical_and_high}")
        typer.echo("By severity:")
        for sev, count in summary.by_severity:
            typer.echo(f"  {_styled_severity(sev):<10} {count:>4}")
        typer.echo("By status:")
        for st, count in summary.by_status:
            typer.echo(f"  {_styled_status(st):<12} {count:>4}")
        typer.echo("Recent:")
        _print_list(summary.recent)


@app.command(help="Print the live traffic window; --watch N follows N more samples.")
def traffic(
    ctx: typer.Context,
    last: int = typer.Option(10, help="Number of buffered samples to print"),
    watch: int = typer.Option(0, help="Follow this many new samples"),
) -> None:
    with provide_client(ctx) as client:
        monitor = client.traffic_monitor()
        typer.echo(f"{'Time':10} {'RPS':>5} {'Latency':>9}")
        for s in monitor.samples()[-last:] if last > 0 else ():
            typer.echo(f"{s.time:%H:%M:%S} {s.rps:>7} {s.latency_ms:>6} ms")
        if watch <= 0:
            return
        with monitor:
            seen = monitor.current()
            printed = 0
            while printed < watch:
                time.sleep(0.1)
                latest = monitor.current()
                if latest is not seen:
                    seen = latest
                    printed += 1
                    typer.echo(f"{latest.time:%H:%M:%S} {latest.rps:>7} {latest.latency_ms:>6} ms")


def _styled_severity(sev: Severity) -> str:
    style = severity_style(sev)
    return typer.style(style.label, fg=style.color)


def _styled_status(st: VulnerabilityStatus) -> str:
    style = status_style(st)
    return typer.style(style.label, fg=style.color)


def _print_list(vulns: Sequence[Vulnerability]) -> None:
    print(f"{'ID':24} {'Severity':9} {'Status':13} {'Type':36} {'Endpoint':42} {'Assignee':10}")
    for v in vulns:
        print(
            f"{v.id:24} {v.severity.value:9} {v.status.value:13} {v.type[:36]:36} "
            f"{str(v.endpoint)[:42]:42} {v.assignee or '-':10}"
        )


def _print_detail(v: Vulnerability) -> None:
    typer.echo(f"ID:          {v.id}")
    typer.echo(f"Type:        {v.type} ({v.owasp_id})")
    typer.echo(f"Severity:    {_styled_severity(v.severity)}")
    typer.echo(f"Status:      {_styled_status(v.status)}")
    typer.echo(f"Endpoint:    {v.endpoint}")
    typer.echo(f"Discovered:  {v.discovered_at.isoformat()}")
    typer.echo(f"Assignee:    {v.assignee or 'Unassigned'}")
    typer.echo(f"Description: {v.description}")
    typer.echo(f"Details:     {v.details}")
    typer.echo("History:")
    for change in v.status_history:
        typer.echo(f"  - {change.timestamp.isoformat()}  {change.status.value}")


def _print_scan_confirmation(config: ScanConfig) -> None:
    typer.echo("Please confirm the details for this advanced scan before proceeding.")
    typer.echo(f"  Target URL:    {config.target_url}")
    typer.echo(f"  Scan Profile:  {config.profile.value}")
    if config.api_key:
        typer.echo(f"  API Key:       {config.masked_api_key}")
    typer.echo(f"  Scan Depth:    {config.depth.value}")
    typer.echo(f"  Min. Severity: {config.min_severity.value}")
    if config.include_regex:
        typer.echo(f"  Include Regex: {config.include_regex}")
    if config.exclude_regex:
        typer.echo(f"  Exclude Regex: {config.exclude_regex}")


def _print_cve(d: CveDetails) -> None:
    typer.echo(f"{d.cve_id}")
    typer.echo(f"CVSS:     {d.cvss_score} ({_styled_severity(d.severity)})  {d.cvss_vector}")
    typer.echo(f"Affected: {d.affected}")
    typer.echo(f"Description: {d.description}")
    if d.references:
        typer.echo("References:")
        for url in d.references:
            typer.echo(f"  - {url}")


if __name__ == "__main__":  # pragma: no cover
    app()
