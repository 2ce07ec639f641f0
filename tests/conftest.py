"""Shared test fixtures."""

from __future__ import annotations

import pytest

from urlguard_sdk.credentials import CredentialSet
from urlguard_sdk.models import Provider


@pytest.fixture()
def all_credentials() -> CredentialSet:
    return CredentialSet(
        {
            Provider.VIRUSTOTAL: "vt-key",
            Provider.SAFE_BROWSING: "gsb-key",
            Provider.URLSCAN: "us-key",
            Provider.IPINFO: "ip-key",
        }
    )


@pytest.fixture()
def vt_clean() -> dict:
    return {
        "response_code": 1,
        "positives": 0,
        "total": 2,
        "scans": {
            "Sophos": {"detected": False, "result": "clean site"},
            "Fortinet": {"detected": False, "result": "unrated site"},
        },
    }


@pytest.fixture()
def vt_detected() -> dict:
    scans = {f"Engine{i}": {"detected": False, "result": "clean site"} for i in range(67)}
    scans.update(
        {
            "Kaspersky": {"detected": True, "result": "phishing site"},
            "ESET": {"detected": True, "result": "malware site"},
            "BitDefender": {"detected": True, "result": "malicious site"},
        }
    )
    return {"response_code": 1, "positives": 3, "total": 70, "scans": scans}


@pytest.fixture()
def vt_not_found() -> dict:
    return {"response_code": 0, "verbose_msg": "Resource does not exist in the dataset"}


@pytest.fixture()
def ipinfo_body() -> dict:
    return {"ip": "93.184.216.34", "city": "Norwell", "country": "US", "org": "AS15133 Edgecast Inc."}
