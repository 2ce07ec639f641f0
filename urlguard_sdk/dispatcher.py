"""Synchronous scan dispatcher built on ``requests``."""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Mapping, Sequence

import requests

from urlguard_sdk.adapters import (
    ProviderAdapter,
    ProviderRequest,
    check_url_scheme,
    default_adapters,
)
from urlguard_sdk.credentials import CredentialSet, as_credential_set
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

DEFAULT_TIMEOUT = 30.0


class ScanDispatcher:
    """Fan a URL out to every configured provider and collect the verdicts.

    Args:
        timeout: Per-provider time limit in seconds.
        session: Optional :class:`requests.Session` shared by all adapter
            calls. When *None* every call gets its own session.
        adapters: Provider adapters to consult, in result order. Defaults to
            one adapter per provider.
        max_workers: Thread pool size; defaults to one thread per active
            provider.

    Example::

        dispatcher = ScanDispatcher(timeout=20)
        report = dispatcher.scan("https://example.com", {"VIRUSTOTAL_API_KEY": "..."})
        print(report.overall_risk)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        adapters: Sequence[ProviderAdapter] | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session
        self._adapters = list(default_adapters() if adapters is None else adapters)
        self._max_workers = max_workers

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    def scan(
        self,
        url: str,
        credentials: CredentialSet | Mapping[Any, Any] | None = None,
    ) -> ScanReport:
        """Run every active provider against *url* concurrently.

        Results come back in adapter order followed by the local URL
        check, whatever order the providers answered in.

        Raises:
            InvalidRequestError: If *url* is not a string or *credentials*
                is not a mapping. Provider problems never raise.
        """
        if not isinstance(url, str):
            raise InvalidRequestError("url must be a string")
        creds = as_credential_set(credentials)
        active = [a for a in self._adapters if creds.is_active(a.provider)]
        logger.info("Scanning URL with %d provider(s): %s", len(active), [a.name for a in active])

        checks = self._run_all(active, url, creds)
        checks.append(check_url_scheme(url))

        report = ScanReport(url=url, checks=tuple(checks))
        logger.info(
            "Scan completed: %d result(s), overall risk %s",
            len(report.checks),
            report.overall_risk.value,
        )
        return report

    def check(self, adapter: ProviderAdapter, url: str, secret: str) -> SecurityCheck:
        """Consult one provider. Never raises; failures become a warning check."""
        try:
            request = adapter.build_request(url, secret)
            return adapter.parse(self._send(request))
        except Exception as exc:
            # Provider errors and unexpected bugs alike end up as a warning check.
            return adapter.failure(exc, secret)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_all(
        self,
        adapters: list[ProviderAdapter],
        url: str,
        creds: CredentialSet,
    ) -> list[SecurityCheck]:
        if not adapters:
            return []

        workers = min(self._max_workers or len(adapters), len(adapters))
        started: dict[int, float] = {}

        def run(index: int, adapter: ProviderAdapter) -> SecurityCheck:
            started[index] = time.monotonic()
            return self.check(adapter, url, creds.secret(adapter.provider) or "")

        # Queued adapters wait for a free worker, so the batch gets one
        # timeout per round of workers on top of each adapter's own bound.
        batch_deadline = time.monotonic() + self._timeout * math.ceil(len(adapters) / workers)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="urlguard")
        try:
            futures = [executor.submit(run, i, adapter) for i, adapter in enumerate(adapters)]
            expired = self._join(futures, started, batch_deadline)
        finally:
            # Do not block on providers that are still hanging past the deadline.
            executor.shutdown(wait=False, cancel_futures=True)

        checks: list[SecurityCheck] = []
        for index, (adapter, future) in enumerate(zip(adapters, futures)):
            if index not in expired and future.done() and not future.cancelled():
                checks.append(future.result())
            else:
                checks.append(
                    adapter.failure(ProviderTimeoutError(f"no answer within {self._timeout}s"))
                )
        return checks

    def _join(
        self,
        futures: list[Future[SecurityCheck]],
        started: dict[int, float],
        batch_deadline: float,
    ) -> set[int]:
        """Wait for *futures*; return the indexes that overran their own timeout.

        An adapter's clock starts when a worker picks it up, not when it is
        queued.
        """
        expired: set[int] = set()
        pending = set(range(len(futures)))
        while pending:
            now = time.monotonic()
            for index in list(pending):
                if futures[index].done():
                    pending.discard(index)
                elif index in started and now - started[index] >= self._timeout:
                    expired.add(index)
                    pending.discard(index)
            if not pending or now >= batch_deadline:
                break

            wake = min([started[i] + self._timeout for i in pending if i in started] + [batch_deadline])
            wait(
                [futures[i] for i in pending],
                timeout=max(0.0, wake - now),
                return_when=FIRST_COMPLETED,
            )
        return expired

    def _send(self, request: ProviderRequest) -> Any:
        if self._session is not None:
            return self._request(self._session, request)
        with requests.Session() as session:
            return self._request(session, request)

    def _request(self, session: requests.Session, request: ProviderRequest) -> Any:
        try:
            resp = session.request(
                request.method,
                request.url,
                params=request.params or None,
                headers=request.headers or None,
                json=request.json,
                timeout=self._timeout,
            )
        except requests.ConnectionError as exc:
            raise ProviderConnectionError(str(exc)) from exc
        except requests.Timeout as exc:
            raise ProviderTimeoutError(str(exc)) from exc
        except requests.RequestException as exc:
            raise ProviderError(str(exc)) from exc

        self._raise_for_status(resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderResponseError(f"invalid JSON body: {exc}") from exc

    @staticmethod
    def _raise_for_status(resp: requests.Response) -> None:
        if 200 <= resp.status_code < 300:
            return
        raise ProviderHTTPError(resp.status_code, f"HTTP {resp.status_code}: {resp.text[:200]}")
