"""
UPS Carrier

Composition root for a UPS rate call: mapper -> resilient client -> mapper.
All failures leave as ServiceErrors tagged with the UPS carrier name.
"""

import json
import logging
import random
import string
import time
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from carrier_rates.core.enums import ErrorCode, ServiceLevel
from carrier_rates.core.exceptions import SYSTEM_CARRIER, CarrierError, ServiceError, UnknownError
from carrier_rates.schemas.rates import RateRequest, RateResponse, validate_rate_request
from carrier_rates.services.shipping.base import BaseCarrier, CarrierClient

from .mapper import UpsRateMapper
from .types import UPS_CARRIER_NAME, UpsRateResponse

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def create_request_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class UpsRateCarrier(BaseCarrier):
    """UPS rating carrier."""

    carrier_name = UPS_CARRIER_NAME

    def __init__(self, client: CarrierClient, mapper: UpsRateMapper):
        """
        Args:
            client: Transport client, normally wrapped by retry and circuit breaker
            mapper: Request / response mapper
        """
        self.client = client
        self.mapper = mapper

    def supports_service_level(self, service_level: ServiceLevel) -> bool:
        return self.mapper.supports_service_level(service_level)

    async def get_rates(self, request: Union[RateRequest, Mapping[str, Any]]) -> RateResponse:
        request_id = create_request_id()
        try:
            validated = validate_rate_request(request)
            ups_request = self.mapper.to_wire_request(validated)

            logger.info(f"[{self.carrier_name}] requesting rates (request {request_id})")
            response = await self.client.send(ups_request, request_id)

            parsed = self._parse_response(response.body_text)
            result = self.mapper.from_wire_response(parsed, request_id)
            logger.info(f"[{self.carrier_name}] received {len(result.quotes)} quotes (request {request_id})")
            return result
        except Exception as e:
            error = self._with_carrier_context(e)
            logger.error(
                f"[{self.carrier_name}] get_rates failed (request {request_id}): "
                f"{error.code.value} {error.message}"
            )
            if error is e:
                raise
            raise error from e

    def _parse_response(self, body_text: str) -> UpsRateResponse:
        try:
            payload = json.loads(body_text)
        except ValueError as e:
            raise CarrierError(
                ErrorCode.MALFORMED_RESPONSE,
                "UPS response is not valid JSON",
                self.carrier_name,
                details={"body": body_text[:500]},
                cause=e,
            ) from e

        try:
            return UpsRateResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise CarrierError(
                ErrorCode.MALFORMED_RESPONSE,
                "UPS response failed validation",
                self.carrier_name,
                details={"issues": e.errors(include_url=False)},
                cause=e,
            ) from e

    def _with_carrier_context(self, error: Exception) -> ServiceError:
        """Tag untagged ServiceErrors with this carrier; wrap anything else"""
        if isinstance(error, ServiceError):
            if error.carrier == SYSTEM_CARRIER:
                error.carrier = self.carrier_name
            return error
        return UnknownError(
            "Unexpected error while fetching rates",
            self.carrier_name,
            details={"error": repr(error)},
            cause=error,
        )
