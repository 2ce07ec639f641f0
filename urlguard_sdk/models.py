"""Data models for URLGuard scan results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Provider(str, Enum):
    """External services that can take part in a scan.

    Declaration order is the order their checks appear in a result list.
    """

    VIRUSTOTAL = "VIRUSTOTAL"
    SAFE_BROWSING = "SAFE_BROWSING"
    URLSCAN = "URLSCAN"
    IPINFO = "IPINFO"


class CheckStatus(str, Enum):
    """Outcome of a single check.

    Attributes:
        PENDING: Not yet dispatched; never present in a finished scan.
        PASSED: The provider found nothing wrong.
        FAILED: Positive evidence of a threat, or an unparsable URL.
        WARNING: Inconclusive, e.g. provider unavailable or plain HTTP.
    """

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"


class RiskLevel(str, Enum):
    """Overall verdict derived from a scan's checks.

    Attributes:
        LOW: No failures and at most one warning.
        MEDIUM: No failures and two or more warnings.
        HIGH: At least one failed check.
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True, slots=True)
class EngineVerdict:
    """One detection engine's opinion inside a multi-engine scan.

    Attributes:
        result: Engine label, e.g. ``"clean site"`` or ``"phishing site"``.
        detected: ``True`` when the engine flagged the URL.
    """

    result: str
    detected: bool

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result, "detected": self.detected}


@dataclass(frozen=True, slots=True)
class EngineData:
    """Per-engine breakdown returned by a multi-engine malware scan.

    Attributes:
        scans: Mapping of engine name to :class:`EngineVerdict`.
        positives: Number of engines that flagged the URL.
        total: Number of engines that looked at the URL.
    """

    scans: dict[str, EngineVerdict] = field(default_factory=dict)
    positives: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "scans": {name: verdict.to_dict() for name, verdict in self.scans.items()},
            "positives": self.positives,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class SecurityCheck:
    """One normalized piece of evidence about a URL.

    Attributes:
        name: Human-readable check label, unique within one scan.
        status: Outcome of the check.
        description: One-line summary of what was measured.
        details: Optional longer explanation (match reason, error note).
        engines: Per-engine breakdown; only set by the malware scan.
    """

    name: str
    status: CheckStatus
    description: str
    details: str | None = None
    engines: EngineData | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "description": self.description,
        }
        if self.details is not None:
            data["details"] = self.details
        if self.engines is not None:
            data["engines"] = self.engines.to_dict()
        return data


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Outcome of one scan: the ordered checks and the derived risk.

    ``overall_risk`` is always recomputed from ``checks``.
    """

    url: str
    checks: tuple[SecurityCheck, ...]
    overall_risk: RiskLevel = field(init=False)

    def __post_init__(self) -> None:
        from urlguard_sdk.risk import aggregate

        object.__setattr__(self, "checks", tuple(self.checks))
        object.__setattr__(self, "overall_risk", aggregate(self.checks))

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [check.to_dict() for check in self.checks],
            "overallRisk": self.overall_risk.value,
        }
