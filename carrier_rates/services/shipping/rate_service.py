"""
Rate Service

Validates a rate request once and fans it out to every registered carrier
that can quote it. Each carrier's outcome is reported separately, so one
carrier failing never hides another carrier's quotes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from carrier_rates.core.exceptions import ConfigError, ServiceError, UnknownError, ValidationError
from carrier_rates.schemas.rates import RateRequest, RateResponse, validate_rate_request

from .base import BaseCarrier
from .cache import InMemoryRateCache

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_MS = 30000


@dataclass(frozen=True)
class CarrierRateResult:
    carrier: str
    response: Optional[RateResponse] = None
    error: Optional[ServiceError] = None

    def to_dict(self):
        result = {"carrier": self.carrier}
        if self.response is not None:
            result["response"] = self.response.model_dump(mode="json", by_alias=True)
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


def build_rate_cache_key(request: RateRequest) -> str:
    def address_key(address):
        return [address.country, address.state, address.postal_code, address.city, "|".join(address.street)]

    packages = "|".join(f"{p.weight}x{p.length}x{p.width}x{p.height}" for p in request.packages)
    service_level = request.service_level.value if request.service_level is not None else ""
    return "::".join(
        address_key(request.origin) + address_key(request.destination) + [packages, service_level]
    )


class RateService:

    def __init__(
        self,
        registry,
        cache: Optional[InMemoryRateCache] = None,
        cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS,
    ):
        """
        Args:
            registry: CarrierRegistry holding at least one carrier
            cache: Optional rate cache
            cache_ttl_ms: How long cached responses stay valid

        Raises:
            ConfigError: If no carriers are registered
        """
        if not registry.list_carriers():
            raise ConfigError("At least one carrier must be registered")
        self.registry = registry
        self.cache = cache
        self.cache_ttl_ms = cache_ttl_ms

    def list_carriers(self) -> List[BaseCarrier]:
        return self.registry.list_carriers()

    async def get_rates(self, request: Union[RateRequest, Mapping[str, Any]]) -> List[RateResponse]:
        """
        Get rates from every eligible carrier

        Returns:
            List[RateResponse]: One response per carrier that succeeded

        Raises:
            ValidationError: If the request is invalid
            ServiceError: The first carrier's error when no carrier succeeded
        """
        validated = validate_rate_request(request)

        cache_key = build_rate_cache_key(validated) if self.cache is not None else None
        if cache_key is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Returning cached rate responses")
                return cached

        results = await self._get_rates_detailed(validated)
        responses = [r.response for r in results if r.response is not None]

        if not responses:
            first_error = next((r.error for r in results if r.error is not None), None)
            raise first_error or UnknownError("All carriers failed to return rates")

        if cache_key is not None:
            self.cache.set(cache_key, responses, self.cache_ttl_ms)
        return responses

    async def get_rates_detailed(self, request: Union[RateRequest, Mapping[str, Any]]) -> List[CarrierRateResult]:
        """Per-carrier results, successes and failures alike"""
        validated = validate_rate_request(request)
        return await self._get_rates_detailed(validated)

    async def get_rates_from_carrier(self, name: str, request: Union[RateRequest, Mapping[str, Any]]) -> RateResponse:
        """
        Get rates from one named carrier

        Raises:
            ValidationError: If the request is invalid or the carrier is unknown
        """
        validated = validate_rate_request(request)
        carrier = self.registry.get_carrier(name)
        if carrier is None:
            raise ValidationError(f"Carrier not found: {name}")
        return await carrier.get_rates(validated)

    def _select_eligible_carriers(self, request: RateRequest) -> List[BaseCarrier]:
        carriers = self.registry.list_carriers()
        if request.service_level is None:
            return carriers
        return [c for c in carriers if c.supports_service_level(request.service_level)]

    async def _get_rates_detailed(self, request: RateRequest) -> List[CarrierRateResult]:
        carriers = self._select_eligible_carriers(request)
        if not carriers:
            level = getattr(request.service_level, "value", request.service_level)
            raise ValidationError(f"No carriers support the requested service level: {level}")

        logger.info(f"Requesting rates from {len(carriers)} carrier(s): {[c.get_name() for c in carriers]}")
        return list(await asyncio.gather(*(self._get_rates_safe(c, request) for c in carriers)))

    async def _get_rates_safe(self, carrier: BaseCarrier, request: RateRequest) -> CarrierRateResult:
        carrier_name = carrier.get_name()
        try:
            response = await carrier.get_rates(request)
            return CarrierRateResult(carrier=carrier_name, response=response)
        except ServiceError as e:
            logger.error(f"[{carrier_name}] get_rates failed: {e.to_dict()}")
            return CarrierRateResult(carrier=carrier_name, error=e)
        except Exception as e:
            error = UnknownError("Unexpected error while fetching rates", carrier_name, cause=e)
            logger.exception(f"[{carrier_name}] get_rates raised an untyped error")
            return CarrierRateResult(carrier=carrier_name, error=error)
