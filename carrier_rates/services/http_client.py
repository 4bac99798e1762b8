"""
Async HTTP transport used by the OAuth client and the carrier clients.

Every call carries a timeout. Transport failures are converted into typed
ServiceErrors here so nothing above this layer sees an httpx exception.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from carrier_rates.core.exceptions import NetworkError, RequestTimeoutError
from carrier_rates.core.logging_config import redact_headers

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000


@dataclass(frozen=True)
class HttpResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body_text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """
    Thin wrapper over httpx.AsyncClient returning HttpResponse records.

    Non-2xx statuses are returned, not raised; callers classify them.
    """

    def __init__(self, default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            default_timeout_ms: Timeout applied when a call does not pass its own
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.default_timeout_ms = default_timeout_ms
        self._transport = transport

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> HttpResponse:
        """
        Make an HTTP request

        Returns:
            HttpResponse: status, lower-cased headers and body text

        Raises:
            RequestTimeoutError: If the call exceeds its timeout
            NetworkError: For any other transport failure
        """
        timeout_ms = timeout_ms if timeout_ms is not None else self.default_timeout_ms
        start = time.monotonic()

        logger.debug(f"Making {method} request to {url}")
        logger.debug(f"Headers: {redact_headers(headers)}")

        try:
            async with httpx.AsyncClient(timeout=timeout_ms / 1000, transport=self._transport) as client:
                # httpx timeouts are per phase; wait_for bounds the whole call
                response = await asyncio.wait_for(
                    client.request(method, url, headers=headers, content=content),
                    timeout_ms / 1000,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"Timeout after {timeout_ms}ms: {method} {url}")
            raise RequestTimeoutError(
                f"Request timeout after {timeout_ms}ms",
                details={"url": url},
                cause=e,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Network error: {method} {url}: {str(e)}")
            raise NetworkError(
                "Network error while making HTTP request",
                details={"url": url},
                cause=e,
            ) from e

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"HTTP {method} {url} -> {response.status_code} ({duration_ms}ms)")

        return HttpResponse(
            status=response.status_code,
            headers={name.lower(): value for name, value in response.headers.items()},
            body_text=response.text,
        )
