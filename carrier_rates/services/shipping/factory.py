"""
Carrier registry and rate client factory.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from carrier_rates.core.config import Settings, get_settings
from carrier_rates.core.exceptions import ConfigError, ValidationError

from .base import BaseCarrier
from .cache import InMemoryRateCache
from .rate_service import DEFAULT_CACHE_TTL_MS, RateService

logger = logging.getLogger(__name__)


class CarrierRegistry:
    """Carriers by name, matched case-insensitively"""

    def __init__(self):
        self._carriers: Dict[str, BaseCarrier] = {}

    def register_carrier(self, carrier: BaseCarrier):
        """
        Raises:
            ConfigError: If the name is empty or already registered
        """
        name = carrier.get_name().strip()
        if not name:
            raise ConfigError("Carrier name must be non-empty")
        key = name.lower()
        if key in self._carriers:
            raise ConfigError(f"Carrier already registered: {name}")
        self._carriers[key] = carrier
        logger.info(f"Registered carrier: {name}")

    def list_carriers(self) -> List[BaseCarrier]:
        return list(self._carriers.values())

    def get_carrier(self, name: str) -> Optional[BaseCarrier]:
        return self._carriers.get(name.strip().lower())


def get_carrier(registry: CarrierRegistry, carrier_name: str) -> BaseCarrier:
    """
    Look up a registered carrier by name

    Raises:
        ValidationError: If the carrier is not registered
    """
    carrier = registry.get_carrier(carrier_name)
    if carrier is None:
        raise ValidationError(f"Carrier '{carrier_name}' is not supported")
    return carrier


@dataclass
class RatesClient:
    registry: CarrierRegistry
    service: RateService


def create_rates_client(
    settings: Optional[Settings] = None,
    register_carriers: Optional[Callable[[CarrierRegistry], Optional[InMemoryRateCache]]] = None,
    cache: Optional[InMemoryRateCache] = None,
    cache_ttl_ms: Optional[int] = None,
    **ups_options,
) -> RatesClient:
    """
    Build a registry and rate service ready to use

    Args:
        settings: Settings to build from (defaults to get_settings())
        register_carriers: Hook that registers carriers instead of the default UPS
            registration; may return a rate cache
        cache: Rate cache to use, overriding one returned by registration
        cache_ttl_ms: Cache TTL override
        **ups_options: Passed to register_ups_carrier

    Returns:
        RatesClient: registry and service
    """
    from .carriers.ups.register import register_ups_carrier

    settings = settings or get_settings()
    registry = CarrierRegistry()

    if register_carriers is not None:
        registered_cache = register_carriers(registry)
    else:
        registered_cache = register_ups_carrier(registry, settings=settings, **ups_options)

    if cache_ttl_ms is None:
        cache_ttl_ms = settings.RATE_CACHE_TTL_MS if settings else DEFAULT_CACHE_TTL_MS

    service = RateService(registry, cache=cache if cache is not None else registered_cache, cache_ttl_ms=cache_ttl_ms)
    return RatesClient(registry=registry, service=service)
