# tests/unit/services/shipping/test_carrier_factory.py
import pytest

from carrier_rates.core.exceptions import ConfigError, ValidationError
from carrier_rates.services.resilience.circuit_breaker import CircuitBreakerCarrierClient
from carrier_rates.services.resilience.retry import RetryingCarrierClient
from carrier_rates.services.shipping.base import BaseCarrier
from carrier_rates.services.shipping.cache import InMemoryRateCache
from carrier_rates.services.shipping.carriers.ups.client import UpsRateClient
from carrier_rates.services.shipping.carriers.ups.carrier import UpsRateCarrier
from carrier_rates.services.shipping.carriers.ups.register import build_ups_carrier, register_ups_carrier
from carrier_rates.services.shipping.factory import (
    CarrierRegistry,
    RatesClient,
    create_rates_client,
    get_carrier,
)


class NamedCarrier(BaseCarrier):
    def __init__(self, name):
        self.carrier_name = name

    async def get_rates(self, request):
        raise NotImplementedError

"""
1. Carrier Registry Tests
"""

def test_register_and_lookup_case_insensitive():
    registry = CarrierRegistry()
    ups = NamedCarrier("UPS")
    registry.register_carrier(ups)

    assert registry.get_carrier("ups") is ups
    assert registry.get_carrier(" UPS ") is ups
    assert registry.get_carrier("fedex") is None
    assert registry.list_carriers() == [ups]


def test_register_rejects_duplicates_and_blank_names():
    registry = CarrierRegistry()
    registry.register_carrier(NamedCarrier("UPS"))

    with pytest.raises(ConfigError):
        registry.register_carrier(NamedCarrier("ups"))
    with pytest.raises(ConfigError):
        registry.register_carrier(NamedCarrier("   "))


def test_get_carrier_raises_for_unknown_name():
    registry = CarrierRegistry()
    registry.register_carrier(NamedCarrier("UPS"))

    assert get_carrier(registry, "UPS").get_name() == "UPS"
    with pytest.raises(ValidationError) as exc_info:
        get_carrier(registry, "dhl")

    assert "dhl" in exc_info.value.message

"""
2. UPS Registration Tests
"""

def test_build_ups_carrier_composes_retry_around_breaker(settings):
    carrier = build_ups_carrier(settings)

    assert isinstance(carrier, UpsRateCarrier)
    assert isinstance(carrier.client, RetryingCarrierClient)
    assert isinstance(carrier.client.inner, CircuitBreakerCarrierClient)
    assert isinstance(carrier.client.inner.inner, UpsRateClient)
    assert carrier.client.policy.max_attempts == settings.RETRY_MAX_ATTEMPTS
    assert carrier.client.inner.breaker.failure_threshold == settings.CIRCUIT_FAILURE_THRESHOLD


def test_build_ups_carrier_without_resilience(settings):
    carrier = build_ups_carrier(settings, enable_retry=False, enable_circuit_breaker=False)

    assert isinstance(carrier.client, UpsRateClient)


def test_build_ups_carrier_requires_credentials(settings):
    settings.UPS_CLIENT_SECRET = ""

    with pytest.raises(ConfigError) as exc_info:
        build_ups_carrier(settings)

    assert "UPS_CLIENT_SECRET" in exc_info.value.message


def test_register_ups_carrier_returns_cache_when_enabled(settings):
    registry = CarrierRegistry()

    assert register_ups_carrier(registry, settings) is None
    assert registry.get_carrier("ups") is not None

    cache = register_ups_carrier(CarrierRegistry(), settings, enable_rate_cache=True)
    assert isinstance(cache, InMemoryRateCache)
    assert cache.max_entries == settings.RATE_CACHE_MAX_ENTRIES

"""
3. Rates Client Factory Tests
"""

def test_create_rates_client_registers_ups(settings):
    client = create_rates_client(settings)

    assert isinstance(client, RatesClient)
    assert [c.get_name() for c in client.registry.list_carriers()] == ["UPS"]
    assert client.service.cache is None


def test_create_rates_client_with_custom_registration(settings):
    cache = InMemoryRateCache()

    def register(registry):
        registry.register_carrier(NamedCarrier("Regional"))
        return cache

    client = create_rates_client(settings, register_carriers=register, cache_ttl_ms=5000)

    assert [c.get_name() for c in client.registry.list_carriers()] == ["Regional"]
    assert client.service.cache is cache
    assert client.service.cache_ttl_ms == 5000


def test_create_rates_client_without_credentials_fails(settings):
    settings.UPS_CLIENT_ID = ""

    with pytest.raises(ConfigError):
        create_rates_client(settings)
