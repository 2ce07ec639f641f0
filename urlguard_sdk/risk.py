"""Reduce a list of checks to a single verdict."""

from __future__ import annotations

from typing import Iterable

from urlguard_sdk.models import CheckStatus, RiskLevel, SecurityCheck

# A lone warning (plain HTTP, one provider down) never raises the verdict.
MEDIUM_WARNING_THRESHOLD = 2

FAILED_PENALTY = 40
WARNING_PENALTY = 20


def _count(checks: Iterable[SecurityCheck]) -> tuple[int, int]:
    failed = warnings = 0
    for check in checks:
        if check.status is CheckStatus.FAILED:
            failed += 1
        elif check.status is CheckStatus.WARNING:
            warnings += 1
    return failed, warnings


def aggregate(checks: Iterable[SecurityCheck]) -> RiskLevel:
    """Return the overall risk for *checks*.

    ``HIGH`` if any check failed, otherwise ``MEDIUM`` with two or more
    warnings, otherwise ``LOW``.
    """
    failed, warnings = _count(checks)
    if failed >= 1:
        return RiskLevel.HIGH
    if warnings >= MEDIUM_WARNING_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def risk_score(checks: Iterable[SecurityCheck]) -> int:
    """Return a 0-100 safety score; 100 means nothing was flagged.

    An empty check list scores 0 since nothing was verified.
    """
    checks = list(checks)
    if not checks:
        return 0
    failed, warnings = _count(checks)
    return max(0, 100 - failed * FAILED_PENALTY - warnings * WARNING_PENALTY)
