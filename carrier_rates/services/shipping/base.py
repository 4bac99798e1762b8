"""
Base Carrier Interface

Every carrier integration exposes the same small surface so the rate service
can fan a request out without knowing which carriers are registered:
- a name
- get_rates
- optionally, which service levels it can quote
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Protocol, Union

from carrier_rates.core.enums import ServiceLevel
from carrier_rates.schemas.rates import RateRequest, RateResponse
from carrier_rates.services.http_client import HttpResponse


class CarrierClient(Protocol):
    """Transport-level call to a carrier's rating endpoint"""

    async def send(self, request: Any, request_id: str) -> HttpResponse:
        ...


class BaseCarrier(ABC):
    """Base class for all shipping carriers"""

    carrier_name = "Generic Carrier"

    def get_name(self) -> str:
        return self.carrier_name

    def supports_service_level(self, service_level: ServiceLevel) -> bool:
        """Carriers that quote every level need not override this"""
        return True

    @abstractmethod
    async def get_rates(self, request: Union[RateRequest, Mapping[str, Any]]) -> RateResponse:
        """Get shipping rates

        Args:
            request: Carrier-agnostic rate request

        Returns:
            RateResponse: Normalized quotes

        Raises:
            ServiceError: For every failure, after retries are exhausted
        """
