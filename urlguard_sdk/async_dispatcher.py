"""Asynchronous scan dispatcher (requires ``httpx``)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Sequence

import httpx

from urlguard_sdk.adapters import (
    ProviderAdapter,
    ProviderRequest,
    check_url_scheme,
    default_adapters,
)
from urlguard_sdk.credentials import CredentialSet, as_credential_set
from urlguard_sdk.dispatcher import DEFAULT_TIMEOUT
from urlguard_sdk.exceptions import (
    InvalidRequestError,
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from urlguard_sdk.models import ScanReport, SecurityCheck

logger = logging.getLogger(__name__)


class AsyncScanDispatcher:
    """Asynchronous counterpart of :class:`~urlguard_sdk.ScanDispatcher`.

    Requires the ``httpx`` package (install with ``pip install urlguard-sdk[async]``).

    Args:
        timeout: Per-provider time limit in seconds.
        client: Optional pre-configured :class:`httpx.AsyncClient` shared by
            all adapter calls. When *None* every call gets its own client.
        adapters: Provider adapters to consult, in result order.

    Example::

        dispatcher = AsyncScanDispatcher(timeout=20)
        report = await dispatcher.scan("https://example.com", credentials)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        adapters: Sequence[ProviderAdapter] | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client
        self._adapters = list(default_adapters() if adapters is None else adapters)

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    async def scan(
        self,
        url: str,
        credentials: CredentialSet | Mapping[Any, Any] | None = None,
    ) -> ScanReport:
        """Run every active provider against *url* concurrently.

        Raises:
            InvalidRequestError: If *url* is not a string or *credentials*
                is not a mapping. Provider problems never raise.
        """
        if not isinstance(url, str):
            raise InvalidRequestError("url must be a string")
        creds = as_credential_set(credentials)
        active = [a for a in self._adapters if creds.is_active(a.provider)]
        logger.info("Scanning URL with %d provider(s): %s", len(active), [a.name for a in active])

        # gather() preserves argument order, not completion order.
        checks = list(
            await asyncio.gather(
                *(self.check(a, url, creds.secret(a.provider) or "") for a in active)
            )
        )
        checks.append(check_url_scheme(url))

        report = ScanReport(url=url, checks=tuple(checks))
        logger.info(
            "Scan completed: %d result(s), overall risk %s",
            len(report.checks),
            report.overall_risk.value,
        )
        return report

    async def check(self, adapter: ProviderAdapter, url: str, secret: str) -> SecurityCheck:
        """Consult one provider. Never raises; failures become a warning check."""
        try:
            request = adapter.build_request(url, secret)
            data = await asyncio.wait_for(self._send(request), timeout=self._timeout)
            return adapter.parse(data)
        except asyncio.TimeoutError:
            return adapter.failure(ProviderTimeoutError(f"no answer within {self._timeout}s"))
        except Exception as exc:
            # Provider errors and unexpected bugs alike end up as a warning check.
            return adapter.failure(exc, secret)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _send(self, request: ProviderRequest) -> Any:
        if self._client is not None:
            return await self._request(self._client, request)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._request(client, request)

    async def _request(self, client: httpx.AsyncClient, request: ProviderRequest) -> Any:
        try:
            resp = await client.request(
                request.method,
                request.url,
                params=request.params or None,
                headers=request.headers or None,
                json=request.json,
                timeout=self._timeout,
            )
        except httpx.ConnectError as exc:
            raise ProviderConnectionError(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(str(exc)) from exc

        self._raise_for_status(resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderResponseError(f"invalid JSON body: {exc}") from exc

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.is_success:
            return
        raise ProviderHTTPError(resp.status_code, f"HTTP {resp.status_code}: {resp.text[:200]}")
