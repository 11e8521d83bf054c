from __future__ import annotations

from dataclasses import dataclass

from ..core.domain.enums import Severity, VulnerabilityStatus


@dataclass(frozen=True)
class DisplayStyle:
    label: str
    color: str  # terminal color name understood by typer.style


def severity_style(severity: Severity) -> DisplayStyle:
    color = {
        Severity.CRITICAL: "red",
        Severity.HIGH: "bright_red",
        Severity.MEDIUM: "yellow",
        Severity.LOW: "blue",
        Severity.INFO: "magenta",
    }[severity]
    return DisplayStyle(severity.value, color)


def status_style(status: VulnerabilityStatus) -> DisplayStyle:
    color = {
        VulnerabilityStatus.NEW: "blue",
        VulnerabilityStatus.ACKNOWLEDGED: "yellow",
        VulnerabilityStatus.FIXED: "green",
    }[status]
    return DisplayStyle(status.value, color)
