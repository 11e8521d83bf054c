from __future__ import annotations

from enum import Enum
from typing import Optional

from cvss import CVSS3


class Severity(Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFO = "Info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def from_score(cls, score: float) -> "Severity":
        if score >= 9.0:
            return cls.CRITICAL
        if score >= 7.0:
            return cls.HIGH
        if score >= 4.0:
            return cls.MEDIUM
        if score > 0.0:
            return cls.LOW
        return cls.INFO

    @classmethod
    def from_str(cls, value: str) -> Optional["Severity"]:
        """Parse a severity from a label, a numeric score or a CVSS v3 vector.

        - Labels (case-insensitive): critical, high, medium, moderate->MEDIUM, low, info
        - CVSS v3 vector (starts with "CVSS:"): base score computed via cvss and mapped
        - Numeric string: mapped by standard thresholds
        """
        s = value.strip()
        if not s:
            return None
        u = s.upper()
        label_map = {
            "CRITICAL": cls.CRITICAL,
            "HIGH": cls.HIGH,
            "MEDIUM": cls.MEDIUM,
            "MODERATE": cls.MEDIUM,
            "LOW": cls.LOW,
            "INFO": cls.INFO,
            "INFORMATIONAL": cls.INFO,
        }
        if u in label_map:
            return label_map[u]

        if u.startswith("CVSS:"):
            try:
                scores = CVSS3(s).scores()
            except Exception:
                return None
            return cls.from_score(float(scores[0]))

        try:
            return cls.from_score(float(s))
        except ValueError:
            return None


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}


class VulnerabilityStatus(Enum):
    NEW = "New"
    ACKNOWLEDGED = "Acknowledged"
    FIXED = "Fixed"

    @classmethod
    def from_str(cls, value: str) -> "VulnerabilityStatus":
        for status in cls:
            if status.value.lower() == value.strip().lower() or status.name == value.strip().upper():
                return status
        raise ValueError(f"Unknown status: {value!r}")


class HttpMethod(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class SortKey(Enum):
    DISCOVERED_DESC = "discovered_desc"
    DISCOVERED_ASC = "discovered_asc"
    SEVERITY_DESC = "severity_desc"
    SEVERITY_ASC = "severity_asc"
    ASSIGNEE_ASC = "assignee_asc"
    ASSIGNEE_DESC = "assignee_desc"


class ScanProfile(Enum):
    STANDARD_UNAUTHENTICATED = "Standard Unauthenticated"
    AUTHENTICATED_DEEP_SCAN = "Authenticated Deep Scan"


class ScanDepth(Enum):
    QUICK = "Quick"
    NORMAL = "Normal"
    DEEP = "Deep"


class ScanStep(Enum):
    FORM = "form"
    CONFIRM = "confirm"
    SCANNING = "scanning"
    COMPLETE = "complete"
