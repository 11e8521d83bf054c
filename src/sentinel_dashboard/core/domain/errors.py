from __future__ import annotations


class VulnerabilityNotFoundError(KeyError):
    def __init__(self, vulnerability_id: str) -> None:
        super().__init__(vulnerability_id)
        self.vulnerability_id = vulnerability_id

    def __str__(self) -> str:
        return f"Vulnerability not found: {self.vulnerability_id}"


class AdvisorUnavailableError(RuntimeError):
    """The external AI service could not produce an answer."""


class ScanInProgressError(RuntimeError):
    """A simulated scan is already outstanding for this wizard."""


class InvalidScanStepError(RuntimeError):
    """The wizard action is not allowed in the current step."""
