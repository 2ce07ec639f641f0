"""Exception hierarchy for the URLGuard SDK."""

from __future__ import annotations


class UrlGuardError(Exception):
    """Base exception for all URLGuard SDK errors."""


class InvalidRequestError(UrlGuardError):
    """Raised when a scan request envelope cannot be understood.

    This is the only error that escapes a scan; everything a provider does
    wrong is folded into the check list instead.
    """


class ProviderError(UrlGuardError):
    """Base class for failures talking to a third-party provider."""


class ProviderConnectionError(ProviderError):
    """Raised when a provider cannot be reached (DNS, refused, reset)."""


class ProviderTimeoutError(ProviderError):
    """Raised when a provider does not answer within the configured timeout."""


class ProviderHTTPError(ProviderError):
    """Raised when a provider answers with a non-2xx status code."""

    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


class ProviderResponseError(ProviderError):
    """Raised when a provider answers 2xx but the body is not usable."""
