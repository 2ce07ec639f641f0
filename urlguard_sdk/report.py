"""Downloadable scan reports and the advice attached to each risk level."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from urlguard_sdk.models import RiskLevel, ScanReport
from urlguard_sdk.risk import risk_score


@dataclass(frozen=True, slots=True)
class Precaution:
    """One piece of advice shown alongside a verdict.

    Attributes:
        title: Short imperative heading.
        description: One-sentence explanation of the step.
        critical: ``True`` for steps that must not be skipped.
    """

    title: str
    description: str
    critical: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "description": self.description, "critical": self.critical}


PRIORITIES: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "CRITICAL",
    RiskLevel.MEDIUM: "CAUTION",
    RiskLevel.LOW: "SAFE",
}

PRECAUTIONS: dict[RiskLevel, tuple[Precaution, ...]] = {
    RiskLevel.HIGH: (
        Precaution("DO NOT VISIT THE URL", "Immediately avoid accessing this URL under any circumstances", True),
        Precaution(
            "Disconnect from Network",
            "If you accidentally visited the URL, disconnect from the internet immediately",
            True,
        ),
        Precaution("Run Security Scan", "Perform a full system antivirus scan on your device"),
        Precaution("Report the Threat", "Report this malicious URL to your IT security team or relevant authorities"),
        Precaution("Monitor Accounts", "Monitor your accounts for suspicious activity and change passwords if necessary"),
    ),
    RiskLevel.MEDIUM: (
        Precaution(
            "Exercise Extreme Caution",
            "Proceed only if absolutely necessary and with proper security measures",
            True,
        ),
        Precaution("Use Incognito/Private Mode", "If you must visit, use incognito/private browsing mode"),
        Precaution("Verify URL Authenticity", "Double-check the URL through alternative trusted sources"),
        Precaution(
            "Use Updated Security Software",
            "Ensure your antivirus and browser security features are up to date",
        ),
        Precaution("Monitor for Suspicious Activity", "Watch for unusual behavior after visiting the site"),
    ),
    RiskLevel.LOW: (
        Precaution("URL Appears Safe", "Security analysis indicates this URL is likely safe to visit"),
        Precaution("Standard Security Practices", "Continue following standard web security practices"),
        Precaution(
            "Verify Before Entering Personal Data",
            "Always verify the authenticity before entering sensitive information",
        ),
        Precaution("Keep Software Updated", "Maintain updated browsers and security software"),
        Precaution("Stay Vigilant", "Remain alert for any suspicious behavior or requests"),
    ),
}


def precautions(risk: RiskLevel) -> dict[str, Any]:
    """Priority label and advisory steps for *risk*."""
    return {
        "priority": PRIORITIES[risk],
        "steps": [step.to_dict() for step in PRECAUTIONS[risk]],
    }


def report_filename(timestamp: datetime | None = None) -> str:
    ts = timestamp or datetime.now(timezone.utc)
    return f"qr-security-report-{ts.date().isoformat()}.json"


def build_report(
    report: ScanReport,
    source: str = "manual",
    timestamp: datetime | None = None,
) -> dict[str, Any]:
    """Plain-data report for a finished scan, ready for ``json.dumps``.

    Args:
        report: The scan to describe.
        source: Where the URL came from (``"camera"``, ``"upload"``, ``"manual"``).
        timestamp: Report time; defaults to now (UTC).
    """
    ts = timestamp or datetime.now(timezone.utc)
    return {
        "timestamp": ts.isoformat(),
        "qrCodeUrl": report.url,
        "scanSource": source,
        "securityChecks": [check.to_dict() for check in report.checks],
        "overallRisk": report.overall_risk.value,
        "riskScore": risk_score(report.checks),
        "precautions": precautions(report.overall_risk),
    }
