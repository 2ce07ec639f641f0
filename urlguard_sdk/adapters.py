"""Provider adapters: request shapes and response normalization.

Each adapter knows how to phrase one provider's API call and how to turn
the provider's JSON answer into a :class:`SecurityCheck`. Sending the
request is left to the dispatchers so that the synchronous (``requests``)
and asynchronous (``httpx``) transports share one normalizer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, quote_plus, urlsplit

from urlguard_sdk.exceptions import ProviderError, ProviderResponseError
from urlguard_sdk.models import (
    CheckStatus,
    EngineData,
    EngineVerdict,
    Provider,
    SecurityCheck,
)

logger = logging.getLogger(__name__)

UNAVAILABLE = "Service temporarily unavailable"
NO_THREATS = "No threats detected"


@dataclass(frozen=True)
class ProviderRequest:
    """A transport-neutral description of one HTTP call."""

    method: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    json: dict[str, Any] | None = None


class ProviderAdapter(ABC):
    """Base class for one third-party provider.

    Subclasses set the class attributes and implement
    :meth:`build_request` and :meth:`parse`.

    Args:
        base_url: Override the provider endpoint (tests, proxies).
    """

    provider: Provider
    name: str = ""
    failure_description: str = ""
    default_base_url: str = ""

    def __init__(self, base_url: str | None = None) -> None:
        self.base_url = (base_url or self.default_base_url).rstrip("/")

    @abstractmethod
    def build_request(self, url: str, secret: str) -> ProviderRequest:
        """Describe the call to make for *url*."""

    @abstractmethod
    def parse(self, data: Any) -> SecurityCheck:
        """Normalize a decoded JSON body into a check.

        Raises:
            ProviderResponseError: If the body does not have the expected shape.
        """

    def failure(self, exc: BaseException | None = None, secret: str | None = None) -> SecurityCheck:
        """The standard result for a provider that could not be consulted.

        *secret* is masked in the log line; transport errors often echo the
        request URL, which carries the API key for most providers.
        """
        if exc is not None:
            message = str(exc)
            if secret:
                # Longest form first so a raw key never leaves half of an encoded one.
                for form in sorted({secret, quote(secret, safe=""), quote_plus(secret)}, key=len, reverse=True):
                    message = message.replace(form, "***")
            logger.warning("%s failed: %s: %s", self.name, type(exc).__name__, message)
        return SecurityCheck(
            name=self.name,
            status=CheckStatus.WARNING,
            description=self.failure_description,
            details=UNAVAILABLE,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r})"


def _require_object(data: Any, provider: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ProviderResponseError(f"{provider} returned {type(data).__name__}, expected an object")
    return data


def _int_field(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProviderResponseError(f"{key!r} is not an integer: {value!r}")
    return value


class VirusTotalAdapter(ProviderAdapter):
    """Multi-engine URL reputation lookup (VirusTotal v2 ``url/report``)."""

    provider = Provider.VIRUSTOTAL
    name = "VirusTotal Scan"
    failure_description = "Failed to check with VirusTotal"
    default_base_url = "https://www.virustotal.com/vtapi/v2"

    def build_request(self, url: str, secret: str) -> ProviderRequest:
        return ProviderRequest(
            method="GET",
            url=f"{self.base_url}/url/report",
            params={"apikey": secret, "resource": url},
        )

    def parse(self, data: Any) -> SecurityCheck:
        data = _require_object(data, "VirusTotal")
        if data.get("response_code") != 1:
            return SecurityCheck(
                name=self.name,
                status=CheckStatus.WARNING,
                description="URL not found in database",
                details="This URL has not been previously scanned",
            )

        engines = self._parse_engines(data)
        if engines.positives > 0:
            status = CheckStatus.FAILED
            details = f"{engines.positives} engines detected threats"
        else:
            status = CheckStatus.PASSED
            details = NO_THREATS
        return SecurityCheck(
            name=self.name,
            status=status,
            description=f"Scanned by {engines.total} engines",
            details=details,
            engines=engines,
        )

    @staticmethod
    def _parse_engines(data: dict[str, Any]) -> EngineData:
        raw_scans = data.get("scans") or {}
        if not isinstance(raw_scans, dict):
            raise ProviderResponseError("'scans' is not an object")

        scans: dict[str, EngineVerdict] = {}
        for engine, verdict in raw_scans.items():
            if not isinstance(verdict, dict):
                continue
            result = verdict.get("result")
            scans[str(engine)] = EngineVerdict(
                result="" if result is None else str(result),
                detected=bool(verdict.get("detected", False)),
            )

        return EngineData(
            scans=scans,
            positives=_int_field(data, "positives", 0),
            total=_int_field(data, "total", len(scans)),
        )


class SafeBrowsingAdapter(ProviderAdapter):
    """Binary threat-list lookup (Google Safe Browsing v4 ``threatMatches:find``)."""

    provider = Provider.SAFE_BROWSING
    name = "Google Safe Browsing"
    failure_description = "Failed to check with Google Safe Browsing"
    default_base_url = "https://safebrowsing.googleapis.com/v4"

    CLIENT_ID = "qr-shield"
    CLIENT_VERSION = "1.0.0"
    THREAT_TYPES = (
        "MALWARE",
        "SOCIAL_ENGINEERING",
        "UNWANTED_SOFTWARE",
        "POTENTIALLY_HARMFUL_APPLICATION",
    )

    def build_request(self, url: str, secret: str) -> ProviderRequest:
        return ProviderRequest(
            method="POST",
            url=f"{self.base_url}/threatMatches:find",
            params={"key": secret},
            headers={"Content-Type": "application/json"},
            json={
                "client": {"clientId": self.CLIENT_ID, "clientVersion": self.CLIENT_VERSION},
                "threatInfo": {
                    "threatTypes": list(self.THREAT_TYPES),
                    "platformTypes": ["ANY_PLATFORM"],
                    "threatEntryTypes": ["URL"],
                    "threatEntries": [{"url": url}],
                },
            },
        )

    def parse(self, data: Any) -> SecurityCheck:
        data = _require_object(data, "Safe Browsing")
        matches = data.get("matches") or []
        if not isinstance(matches, list):
            raise ProviderResponseError("'matches' is not a list")

        if matches:
            first = matches[0] if isinstance(matches[0], dict) else {}
            return SecurityCheck(
                name=self.name,
                status=CheckStatus.FAILED,
                description="Google's threat detection service",
                details=f"Detected: {first.get('threatType', 'UNKNOWN')}",
            )
        return SecurityCheck(
            name=self.name,
            status=CheckStatus.PASSED,
            description="Google's threat detection service",
            details=NO_THREATS,
        )


class URLScanAdapter(ProviderAdapter):
    """Deep-analysis submission (urlscan.io ``scan``).

    Only the submission is awaited; the returned check is a receipt for
    the scan, not its findings.
    """

    provider = Provider.URLSCAN
    name = "URLScan.io Analysis"
    failure_description = "Failed to initiate URLScan.io analysis"
    default_base_url = "https://urlscan.io/api/v1"

    RECEIPT_LENGTH = 8

    def build_request(self, url: str, secret: str) -> ProviderRequest:
        return ProviderRequest(
            method="POST",
            url=f"{self.base_url}/scan/",
            headers={"API-Key": secret, "Content-Type": "application/json"},
            json={"url": url, "visibility": "private"},
        )

    def parse(self, data: Any) -> SecurityCheck:
        data = _require_object(data, "URLScan.io")
        uuid = data.get("uuid")
        if not isinstance(uuid, str) or not uuid:
            raise ProviderResponseError("submission response has no uuid")
        return SecurityCheck(
            name=self.name,
            status=CheckStatus.PASSED,
            description="Deep URL and website analysis",
            details=f"Scan initiated - UUID: {uuid[: self.RECEIPT_LENGTH]}...",
        )


class IPInfoAdapter(ProviderAdapter):
    """Hostname geolocation lookup (ipinfo.io). Informational only."""

    provider = Provider.IPINFO
    name = "IP Geolocation Check"
    failure_description = "Failed to get IP information"
    default_base_url = "https://ipinfo.io"

    def build_request(self, url: str, secret: str) -> ProviderRequest:
        try:
            hostname = urlsplit(url).hostname
        except ValueError as exc:
            raise ProviderError(f"cannot parse URL: {exc}") from exc
        if not hostname:
            raise ProviderError("URL has no hostname")
        return ProviderRequest(
            method="GET",
            url=f"{self.base_url}/{hostname}",
            params={"token": secret},
        )

    def parse(self, data: Any) -> SecurityCheck:
        data = _require_object(data, "IPInfo")
        city = data.get("city") or "Unknown"
        country = data.get("country") or "Unknown"
        org = data.get("org") or "Unknown"
        return SecurityCheck(
            name=self.name,
            status=CheckStatus.PASSED,
            description="IP address and location analysis",
            details=f"Location: {city}, {country} | ISP: {org}",
        )


def default_adapters() -> list[ProviderAdapter]:
    """One adapter per :class:`Provider`, in declaration order."""
    return [VirusTotalAdapter(), SafeBrowsingAdapter(), URLScanAdapter(), IPInfoAdapter()]


# ----------------------------------------------------------------------
# Local checks
# ----------------------------------------------------------------------


# Schemes whose URLs must carry a host to parse at all.
HOST_REQUIRED_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})

# Code points no host may contain.
FORBIDDEN_HOST_CHARS = frozenset("\x00\t\n\r #/:<>?@[\\]^|\x7f")


def is_valid_url(url: str) -> bool:
    """``True`` when *url* parses as an absolute URL.

    Non-hierarchical payloads common in QR codes (``mailto:``, ``tel:``,
    ``WIFI:``) are valid. Web schemes need a host, and a host must be free
    of forbidden characters and carry a sane port.
    """
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parts = urlsplit(url.strip())
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if not parts.scheme:
        return False

    host = parts.hostname or ""
    if not host:
        return parts.scheme.lower() not in HOST_REQUIRED_SCHEMES
    if parts.netloc.rpartition("@")[2].startswith("["):
        # IPv6 literal; urlsplit already rejected unbalanced brackets.
        return True
    return not any(ch in FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 for ch in host)


def check_url_scheme(url: str) -> SecurityCheck:
    """Validate *url* locally and report whether it uses HTTPS.

    An unparsable URL yields a single failed ``URL Validation`` check and
    the HTTPS check is skipped. Plain HTTP is a warning, not a failure.
    """
    if not is_valid_url(url):
        return SecurityCheck(
            name="URL Validation",
            status=CheckStatus.FAILED,
            description="Invalid URL format",
            details="invalid URL format",
        )

    if urlsplit(url.strip()).scheme.lower() == "https":
        return SecurityCheck(
            name="SSL/TLS Security",
            status=CheckStatus.PASSED,
            description="Secure connection validation",
            details="Site uses HTTPS encryption",
        )
    return SecurityCheck(
        name="SSL/TLS Security",
        status=CheckStatus.WARNING,
        description="Secure connection validation",
        details="Site does not use HTTPS - data may be insecure",
    )
