"""Request/response envelope for exposing a dispatcher as an RPC endpoint.

Request::

    {"url": "https://example.com", "apiKeys": {"VIRUSTOTAL_API_KEY": "..."}}

Response::

    {"results": [...], "overallRisk": "LOW"}      # HTTP 200
    {"error": "..."}                             # HTTP 500
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Union

from urlguard_sdk.credentials import CredentialSet, as_credential_set
from urlguard_sdk.dispatcher import ScanDispatcher
from urlguard_sdk.exceptions import InvalidRequestError

if TYPE_CHECKING:
    from urlguard_sdk.async_dispatcher import AsyncScanDispatcher

logger = logging.getLogger(__name__)

OK = 200
SERVER_FAULT = 500

Body = Union[bytes, str, dict]


def parse_scan_request(body: Body) -> tuple[str, CredentialSet]:
    """Decode and validate a scan request envelope.

    Raises:
        InvalidRequestError: If the body is not a JSON object with a string
            ``url`` and an object (or absent) ``apiKeys``.
    """
    if isinstance(body, (bytes, str)):
        try:
            payload: Any = json.loads(body)
        except (ValueError, UnicodeDecodeError) as exc:
            raise InvalidRequestError(f"Request body is not valid JSON: {exc}") from exc
    else:
        payload = body

    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    url = payload.get("url")
    if not isinstance(url, str):
        raise InvalidRequestError("'url' must be a string")
    return url, as_credential_set(payload.get("apiKeys"))


def _error(exc: Exception) -> tuple[int, dict[str, Any]]:
    if isinstance(exc, InvalidRequestError):
        logger.warning("Rejected scan request: %s", exc)
        return SERVER_FAULT, {"error": str(exc)}
    logger.exception("Security scan error")
    return SERVER_FAULT, {"error": "Internal server error"}


def handle_scan_request(
    body: Body,
    dispatcher: ScanDispatcher | None = None,
) -> tuple[int, dict[str, Any]]:
    """Run one scan from a raw request body; returns ``(status, payload)``."""
    try:
        url, creds = parse_scan_request(body)
        report = (dispatcher or ScanDispatcher()).scan(url, creds)
    except Exception as exc:
        return _error(exc)
    return OK, report.to_dict()


async def handle_scan_request_async(
    body: Body,
    dispatcher: AsyncScanDispatcher | None = None,
) -> tuple[int, dict[str, Any]]:
    """Async variant of :func:`handle_scan_request`."""
    try:
        url, creds = parse_scan_request(body)
        if dispatcher is None:
            from urlguard_sdk.async_dispatcher import AsyncScanDispatcher

            dispatcher = AsyncScanDispatcher()
        report = await dispatcher.scan(url, creds)
    except Exception as exc:
        return _error(exc)
    return OK, report.to_dict()
