"""Tests for request building and response normalization in urlguard_sdk.adapters."""

from __future__ import annotations

import pytest

from urlguard_sdk.adapters import (
    UNAVAILABLE,
    IPInfoAdapter,
    SafeBrowsingAdapter,
    URLScanAdapter,
    VirusTotalAdapter,
    check_url_scheme,
    default_adapters,
    is_valid_url,
)
from urlguard_sdk.exceptions import ProviderError, ProviderResponseError
from urlguard_sdk.models import CheckStatus, Provider

URL = "https://example.com/login?next=/home"


class TestDefaults:
    def test_declaration_order(self):
        assert [a.provider for a in default_adapters()] == list(Provider)

    def test_base_url_override(self):
        adapter = VirusTotalAdapter(base_url="http://proxy.local/vt/")
        assert adapter.build_request(URL, "k").url == "http://proxy.local/vt/url/report"

    def test_failure_result(self):
        check = URLScanAdapter().failure(ProviderError("boom"))
        assert check.status is CheckStatus.WARNING
        assert check.details == UNAVAILABLE
        assert check.name == "URLScan.io Analysis"


# ------------------------------------------------------------------ #
# VirusTotal
# ------------------------------------------------------------------ #


class TestVirusTotal:
    def test_request(self):
        req = VirusTotalAdapter().build_request(URL, "vt-key")
        assert req.method == "GET"
        assert req.url == "https://www.virustotal.com/vtapi/v2/url/report"
        assert req.params == {"apikey": "vt-key", "resource": URL}

    def test_clean(self, vt_clean: dict):
        check = VirusTotalAdapter().parse(vt_clean)
        assert check.status is CheckStatus.PASSED
        assert check.description == "Scanned by 2 engines"
        assert check.details == "No threats detected"
        assert check.engines is not None
        assert check.engines.scans["Sophos"].result == "clean site"

    def test_detected(self, vt_detected: dict):
        check = VirusTotalAdapter().parse(vt_detected)
        assert check.status is CheckStatus.FAILED
        assert "3" in check.details
        assert "detected" in check.details
        assert "70" in check.description
        assert check.engines.positives == 3
        assert check.engines.total == 70
        assert check.engines.scans["ESET"].detected is True

    def test_not_found(self, vt_not_found: dict):
        check = VirusTotalAdapter().parse(vt_not_found)
        assert check.status is CheckStatus.WARNING
        assert check.description == "URL not found in database"
        assert check.engines is None

    def test_queued_counts_as_not_found(self):
        check = VirusTotalAdapter().parse({"response_code": -2})
        assert check.status is CheckStatus.WARNING

    def test_null_engine_result(self):
        data = {"response_code": 1, "positives": 0, "total": 1, "scans": {"X": {"detected": False, "result": None}}}
        check = VirusTotalAdapter().parse(data)
        assert check.engines.scans["X"].result == ""

    def test_total_defaults_to_engine_count(self, vt_clean: dict):
        del vt_clean["total"]
        check = VirusTotalAdapter().parse(vt_clean)
        assert check.engines.total == 2

    def test_bad_positives(self, vt_clean: dict):
        vt_clean["positives"] = "many"
        with pytest.raises(ProviderResponseError):
            VirusTotalAdapter().parse(vt_clean)

    def test_not_an_object(self):
        with pytest.raises(ProviderResponseError):
            VirusTotalAdapter().parse([1, 2])


# ------------------------------------------------------------------ #
# Safe Browsing
# ------------------------------------------------------------------ #


class TestSafeBrowsing:
    def test_request(self):
        req = SafeBrowsingAdapter().build_request(URL, "gsb-key")
        assert req.method == "POST"
        assert req.params == {"key": "gsb-key"}
        assert req.json["client"] == {"clientId": "qr-shield", "clientVersion": "1.0.0"}
        info = req.json["threatInfo"]
        assert set(info["threatTypes"]) == {
            "MALWARE",
            "SOCIAL_ENGINEERING",
            "UNWANTED_SOFTWARE",
            "POTENTIALLY_HARMFUL_APPLICATION",
        }
        assert info["platformTypes"] == ["ANY_PLATFORM"]
        assert info["threatEntryTypes"] == ["URL"]
        assert info["threatEntries"] == [{"url": URL}]

    def test_no_match(self):
        check = SafeBrowsingAdapter().parse({})
        assert check.status is CheckStatus.PASSED
        assert check.details == "No threats detected"

    def test_match(self):
        data = {
            "matches": [
                {"threatType": "SOCIAL_ENGINEERING", "platformType": "ANY_PLATFORM"},
                {"threatType": "MALWARE", "platformType": "ANY_PLATFORM"},
            ]
        }
        check = SafeBrowsingAdapter().parse(data)
        assert check.status is CheckStatus.FAILED
        assert check.details == "Detected: SOCIAL_ENGINEERING"

    def test_matches_not_a_list(self):
        with pytest.raises(ProviderResponseError):
            SafeBrowsingAdapter().parse({"matches": "yes"})


# ------------------------------------------------------------------ #
# URLScan
# ------------------------------------------------------------------ #


class TestURLScan:
    def test_request(self):
        req = URLScanAdapter().build_request(URL, "us-key")
        assert req.url == "https://urlscan.io/api/v1/scan/"
        assert req.headers["API-Key"] == "us-key"
        assert req.json == {"url": URL, "visibility": "private"}
        assert req.params == {}

    def test_receipt(self):
        check = URLScanAdapter().parse({"uuid": "0e39a7bd-1f4e-4c83-8d02-2ab35c8d6d5a", "result": "..."})
        assert check.status is CheckStatus.PASSED
        assert check.details == "Scan initiated - UUID: 0e39a7bd..."

    def test_missing_uuid(self):
        with pytest.raises(ProviderResponseError):
            URLScanAdapter().parse({"message": "Submission successful"})


# ------------------------------------------------------------------ #
# IPInfo
# ------------------------------------------------------------------ #


class TestIPInfo:
    def test_request_uses_hostname(self):
        req = IPInfoAdapter().build_request("https://Example.com:8443/path", "tok")
        assert req.url == "https://ipinfo.io/example.com"
        assert req.params == {"token": "tok"}

    def test_request_without_hostname(self):
        with pytest.raises(ProviderError):
            IPInfoAdapter().build_request("not a url", "tok")

    def test_full(self, ipinfo_body: dict):
        check = IPInfoAdapter().parse(ipinfo_body)
        assert check.status is CheckStatus.PASSED
        assert check.details == "Location: Norwell, US | ISP: AS15133 Edgecast Inc."

    def test_missing_fields(self):
        check = IPInfoAdapter().parse({"ip": "10.0.0.1", "bogon": True, "city": ""})
        assert check.status is CheckStatus.PASSED
        assert check.details == "Location: Unknown, Unknown | ISP: Unknown"


# ------------------------------------------------------------------ #
# Local URL validation
# ------------------------------------------------------------------ #


class TestURLScheme:
    def test_https(self):
        check = check_url_scheme("https://example.com")
        assert check.name == "SSL/TLS Security"
        assert check.status is CheckStatus.PASSED

    def test_http(self):
        check = check_url_scheme("http://example.com")
        assert check.status is CheckStatus.WARNING

    def test_uppercase_scheme(self):
        assert check_url_scheme("HTTPS://example.com").status is CheckStatus.PASSED

    @pytest.mark.parametrize(
        "url",
        [
            "not a url",
            "",
            "example.com",
            "http://",
            "http://host:99999",
            "http://[::1",
            "http://exa mple.com",
            "https://exa<mple.com/",
            "http://exa|mple.com",
        ],
    )
    def test_invalid(self, url: str):
        check = check_url_scheme(url)
        assert check.name == "URL Validation"
        assert check.status is CheckStatus.FAILED
        assert check.details == "invalid URL format"

    def test_other_scheme_is_insecure(self):
        assert check_url_scheme("ftp://files.example.com").status is CheckStatus.WARNING

    def test_is_valid_url_non_string(self):
        assert is_valid_url(None) is False  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "url",
        [
            "mailto:someone@example.com",
            "tel:+15551234567",
            "WIFI:S:home;T:WPA;P:pw;;",
            "http://[::1]:8080/admin",
            "http://user name@example.com/",
        ],
    )
    def test_parsable_but_not_https(self, url: str):
        check = check_url_scheme(url)
        assert check.name == "SSL/TLS Security"
        assert check.status is CheckStatus.WARNING
