# tests/unit/services/shipping/test_rate_service.py
import copy
from unittest.mock import AsyncMock

import pytest

from carrier_rates.core.enums import ErrorCode, ServiceLevel
from carrier_rates.core.exceptions import (
    CarrierError,
    ConfigError,
    NetworkError,
    UnknownError,
    ValidationError,
)
from carrier_rates.schemas.rates import RateQuote, RateResponse, validate_rate_request
from carrier_rates.services.shipping.base import BaseCarrier
from carrier_rates.services.shipping.cache import InMemoryRateCache
from carrier_rates.services.shipping.factory import CarrierRegistry
from carrier_rates.services.shipping.rate_service import RateService, build_rate_cache_key


class FakeCarrier(BaseCarrier):
    """Carrier returning canned results"""

    def __init__(self, name, result=None, error=None, service_levels=None):
        self.carrier_name = name
        self.service_levels = service_levels
        self.get_rates = AsyncMock(side_effect=error, return_value=result)

    def supports_service_level(self, service_level):
        return self.service_levels is None or service_level in self.service_levels

    async def get_rates(self, request):
        raise NotImplementedError


def make_response(carrier, cost=10.0):
    quote = RateQuote(
        service_level=ServiceLevel.GROUND,
        service_name=f"{carrier} Ground",
        total_cost=cost,
        currency="USD",
        carrier=carrier,
    )
    return RateResponse(quotes=[quote], request_id=f"req_{carrier}")


def make_service(*carriers, **kwargs):
    registry = CarrierRegistry()
    for carrier in carriers:
        registry.register_carrier(carrier)
    return RateService(registry, **kwargs)

"""
1. Construction Tests
"""

def test_requires_at_least_one_carrier():
    with pytest.raises(ConfigError):
        RateService(CarrierRegistry())

"""
2. Fan-out Tests
"""

@pytest.mark.asyncio
async def test_get_rates_collects_every_success(valid_request):
    ups = FakeCarrier("UPS", result=make_response("UPS"))
    fedex = FakeCarrier("FedEx", result=make_response("FedEx"))
    service = make_service(ups, fedex)

    responses = await service.get_rates(valid_request)

    assert [r.request_id for r in responses] == ["req_UPS", "req_FedEx"]
    passed = ups.get_rates.await_args.args[0]
    assert passed.origin.postal_code == "30301"
    assert fedex.get_rates.await_args.args[0] is passed


@pytest.mark.asyncio
async def test_get_rates_skips_failed_carriers(valid_request):
    ups = FakeCarrier("UPS", error=NetworkError("down", "UPS"))
    fedex = FakeCarrier("FedEx", result=make_response("FedEx"))

    responses = await make_service(ups, fedex).get_rates(valid_request)

    assert [r.request_id for r in responses] == ["req_FedEx"]


@pytest.mark.asyncio
async def test_get_rates_raises_first_error_when_all_fail(valid_request):
    first = CarrierError(ErrorCode.API_ERROR, "bad", "UPS")
    ups = FakeCarrier("UPS", error=first)
    fedex = FakeCarrier("FedEx", error=NetworkError("down", "FedEx"))

    with pytest.raises(CarrierError) as exc_info:
        await make_service(ups, fedex).get_rates(valid_request)

    assert exc_info.value is first


@pytest.mark.asyncio
async def test_untyped_carrier_errors_become_unknown(valid_request):
    ups = FakeCarrier("UPS", error=RuntimeError("boom"))

    results = await make_service(ups).get_rates_detailed(valid_request)

    error = results[0].error
    assert isinstance(error, UnknownError)
    assert error.carrier == "UPS"
    assert isinstance(error.cause, RuntimeError)


@pytest.mark.asyncio
async def test_invalid_request_fails_before_any_carrier_call(valid_request):
    ups = FakeCarrier("UPS", result=make_response("UPS"))
    data = copy.deepcopy(valid_request)
    data["packages"] = []

    with pytest.raises(ValidationError):
        await make_service(ups).get_rates(data)

    ups.get_rates.assert_not_awaited()

"""
3. Detailed Results Tests
"""

@pytest.mark.asyncio
async def test_get_rates_detailed_reports_each_carrier(valid_request):
    ups = FakeCarrier("UPS", error=NetworkError("down", "UPS"))
    fedex = FakeCarrier("FedEx", result=make_response("FedEx"))

    results = await make_service(ups, fedex).get_rates_detailed(valid_request)

    assert [r.carrier for r in results] == ["UPS", "FedEx"]
    assert results[0].response is None
    assert results[0].error.code == ErrorCode.NETWORK_ERROR
    assert results[1].error is None
    assert results[1].response.request_id == "req_FedEx"

    as_dict = results[0].to_dict()
    assert as_dict["carrier"] == "UPS"
    assert as_dict["error"]["code"] == "NETWORK_ERROR"
    assert "response" not in as_dict

"""
4. Service Level Eligibility Tests
"""

@pytest.mark.asyncio
async def test_only_eligible_carriers_are_called(valid_request):
    ups = FakeCarrier("UPS", result=make_response("UPS"), service_levels={ServiceLevel.NEXT_DAY_AIR})
    regional = FakeCarrier("Regional", result=make_response("Regional"), service_levels={ServiceLevel.GROUND})

    responses = await make_service(ups, regional).get_rates({**valid_request, "serviceLevel": "nextDayAir"})

    assert [r.request_id for r in responses] == ["req_UPS"]
    regional.get_rates.assert_not_awaited()


@pytest.mark.asyncio
async def test_no_eligible_carrier_is_validation_error(valid_request):
    regional = FakeCarrier("Regional", result=make_response("Regional"), service_levels={ServiceLevel.GROUND})

    with pytest.raises(ValidationError) as exc_info:
        await make_service(regional).get_rates({**valid_request, "serviceLevel": "nextDayAir"})

    assert "nextDayAir" in exc_info.value.message
    regional.get_rates.assert_not_awaited()

"""
5. Single Carrier Tests
"""

@pytest.mark.asyncio
async def test_get_rates_from_carrier_is_case_insensitive(valid_request):
    ups = FakeCarrier("UPS", result=make_response("UPS"))
    fedex = FakeCarrier("FedEx", result=make_response("FedEx"))

    response = await make_service(ups, fedex).get_rates_from_carrier("ups", valid_request)

    assert response.request_id == "req_UPS"
    fedex.get_rates.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_rates_from_unknown_carrier(valid_request):
    with pytest.raises(ValidationError) as exc_info:
        await make_service(FakeCarrier("UPS")).get_rates_from_carrier("DHL", valid_request)

    assert exc_info.value.message == "Carrier not found: DHL"

"""
6. Caching Tests
"""

@pytest.mark.asyncio
async def test_successful_responses_are_cached(valid_request):
    ups = FakeCarrier("UPS", result=make_response("UPS"))
    service = make_service(ups, cache=InMemoryRateCache(), cache_ttl_ms=60000)

    first = await service.get_rates(valid_request)
    second = await service.get_rates(valid_request)

    assert first == second
    ups.get_rates.assert_awaited_once()


@pytest.mark.asyncio
async def test_failures_are_not_cached(valid_request):
    ups = FakeCarrier("UPS", error=NetworkError("down", "UPS"))
    cache = InMemoryRateCache()
    service = make_service(ups, cache=cache)

    with pytest.raises(NetworkError):
        await service.get_rates(valid_request)

    assert len(cache) == 0


def test_cache_key_depends_on_request_contents(valid_request):
    base = build_rate_cache_key(validate_rate_request(valid_request))
    same = build_rate_cache_key(validate_rate_request(copy.deepcopy(valid_request)))
    heavier = copy.deepcopy(valid_request)
    heavier["packages"][0]["weight"] = 6
    ground = {**valid_request, "serviceLevel": "ground"}

    assert base == same
    assert build_rate_cache_key(validate_rate_request(heavier)) != base
    assert build_rate_cache_key(validate_rate_request(ground)) != base


@pytest.mark.asyncio
async def test_mutating_returned_list_does_not_change_cache(valid_request):
    ups = FakeCarrier("UPS", result=make_response("UPS"))
    service = make_service(ups, cache=InMemoryRateCache())

    first = await service.get_rates(valid_request)
    first.clear()
    second = await service.get_rates(valid_request)

    assert [r.request_id for r in second] == ["req_UPS"]
    ups.get_rates.assert_awaited_once()
