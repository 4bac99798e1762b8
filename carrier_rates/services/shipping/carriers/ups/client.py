"""
UPS Rating API transport.

Sends one rate request, handling the UPS token contract: a 401/403 drops the
cached token and the call is repeated once with a fresh one. Every other
non-2xx status is classified into a ServiceError.
"""

import json
import logging
from typing import Any, Dict, Optional

from carrier_rates.core.enums import ErrorCode
from carrier_rates.core.exceptions import AuthError, CarrierError, RateLimitError, ServiceError
from carrier_rates.services.auth.token_manager import ClientCredentialsAuthProvider
from carrier_rates.services.http_client import HttpClient, HttpResponse

from .types import UPS_CARRIER_NAME, UPS_RATING_PATH

logger = logging.getLogger(__name__)

AUTH_REJECTED_STATUSES = (401, 403)
TRANSACTION_SOURCE = "carrier-rates"


def classify_status(status: int, body_text: str, carrier: str) -> Optional[ServiceError]:
    """
    Map a rating response status to the error it represents.

    Returns None for 2xx. 401/403 are classified as AUTH_TOKEN_INVALID, which
    is only correct once the token-refresh retry has been spent.
    """
    details = {"status": status, "body": body_text}

    if 200 <= status < 300:
        return None
    if status in AUTH_REJECTED_STATUSES:
        return AuthError(
            ErrorCode.AUTH_TOKEN_INVALID,
            "Authentication token invalid or expired",
            carrier,
            details=details,
        )
    if status == 429:
        return RateLimitError("Rate limit exceeded. Please retry after some time.", carrier, details=details)
    if status >= 500:
        return CarrierError(
            ErrorCode.API_ERROR,
            f"Carrier service unavailable (HTTP {status})",
            carrier,
            retryable=True,
            details=details,
        )
    return CarrierError(
        ErrorCode.API_ERROR,
        f"{carrier} API request failed (HTTP {status})",
        carrier,
        retryable=False,
        details=details,
    )


class UpsRateClient:
    """
    Sends UPS rate requests with a Bearer token from the auth provider.
    """

    def __init__(
        self,
        http_client: HttpClient,
        auth_provider: ClientCredentialsAuthProvider,
        base_url: str,
        timeout_ms: Optional[int] = None,
    ):
        self.http_client = http_client
        self.auth_provider = auth_provider
        self.base_url = base_url.rstrip("/")
        self.timeout_ms = timeout_ms

    @property
    def rating_url(self) -> str:
        return f"{self.base_url}{UPS_RATING_PATH}"

    async def _get_headers(self, request_id: str) -> Dict[str, str]:
        authorization = await self.auth_provider.get_authorization_header()
        return {
            "Authorization": authorization,
            "Content-Type": "application/json",
            "transId": request_id,
            "transactionSrc": TRANSACTION_SOURCE,
        }

    async def _post(self, body: str, request_id: str) -> HttpResponse:
        headers = await self._get_headers(request_id)
        return await self.http_client.request(
            "POST",
            self.rating_url,
            headers=headers,
            content=body,
            timeout_ms=self.timeout_ms,
        )

    async def send(self, request: Dict[str, Any], request_id: str) -> HttpResponse:
        """
        Send a UPS rate request

        Args:
            request: UPS Rating API request body
            request_id: Correlation id sent as `transId`

        Returns:
            HttpResponse: The 2xx response

        Raises:
            ServiceError: Classified from the status, or from the transport
        """
        body = json.dumps(request)
        response = await self._post(body, request_id)

        if response.status in AUTH_REJECTED_STATUSES:
            logger.warning(
                f"[{UPS_CARRIER_NAME}] token rejected with HTTP {response.status} "
                f"for request {request_id}, refreshing and retrying once"
            )
            self.auth_provider.invalidate()
            response = await self._post(body, request_id)

        error = classify_status(response.status, response.body_text, UPS_CARRIER_NAME)
        if error is not None:
            logger.error(f"[{UPS_CARRIER_NAME}] rate request {request_id} failed: {error.message}")
            raise error
        return response
