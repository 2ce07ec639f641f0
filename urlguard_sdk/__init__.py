"""URLGuard SDK — multi-provider URL reputation checks with one risk verdict."""

import logging

from urlguard_sdk.adapters import (
    IPInfoAdapter,
    ProviderAdapter,
    SafeBrowsingAdapter,
    URLScanAdapter,
    VirusTotalAdapter,
    check_url_scheme,
)
from urlguard_sdk.credentials import CredentialSet
from urlguard_sdk.dispatcher import ScanDispatcher
from urlguard_sdk.exceptions import (
    InvalidRequestError,
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
    UrlGuardError,
)
from urlguard_sdk.models import (
    CheckStatus,
    EngineData,
    EngineVerdict,
    Provider,
    RiskLevel,
    ScanReport,
    SecurityCheck,
)
from urlguard_sdk.risk import aggregate, risk_score

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ScanDispatcher",
    "AsyncScanDispatcher",
    "CredentialSet",
    "ProviderAdapter",
    "VirusTotalAdapter",
    "SafeBrowsingAdapter",
    "URLScanAdapter",
    "IPInfoAdapter",
    "check_url_scheme",
    "aggregate",
    "risk_score",
    "Provider",
    "CheckStatus",
    "RiskLevel",
    "EngineVerdict",
    "EngineData",
    "SecurityCheck",
    "ScanReport",
    "UrlGuardError",
    "InvalidRequestError",
    "ProviderError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "ProviderHTTPError",
    "ProviderResponseError",
]


def __getattr__(name: str) -> object:
    """Lazy-import the async dispatcher so ``httpx`` is optional at import time."""
    if name == "AsyncScanDispatcher":
        from urlguard_sdk.async_dispatcher import AsyncScanDispatcher

        return AsyncScanDispatcher
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
