# tests/unit/cli/test_get_rates_cli.py
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from carrier_rates.cli import get_rates as cli_module
from carrier_rates.cli.get_rates import get_rates
from carrier_rates.core.enums import ServiceLevel
from carrier_rates.core.exceptions import ConfigError, NetworkError
from carrier_rates.schemas.rates import RateQuote, RateResponse
from carrier_rates.services.shipping.rate_service import CarrierRateResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def rates_client(mocker):
    quote = RateQuote(
        service_level=ServiceLevel.GROUND,
        service_name="UPS Ground",
        total_cost=15.5,
        currency="USD",
        estimated_days=3,
        carrier="UPS",
    )
    client = MagicMock()
    client.service.get_rates_detailed = AsyncMock(return_value=[
        CarrierRateResult(carrier="UPS", response=RateResponse(quotes=[quote], request_id="req_1")),
    ])
    mocker.patch.object(cli_module, "create_rates_client", return_value=client)
    return client

"""
1. Input Tests
"""

def test_request_option_prints_results(runner, rates_client, valid_request):
    result = runner.invoke(get_rates, ["--request", json.dumps(valid_request)])

    assert result.exit_code == 0, result.output
    output = json.loads(result.stdout)
    quote = output["results"][0]["response"]["quotes"][0]
    assert output["results"][0]["carrier"] == "UPS"
    assert quote["serviceLevel"] == "ground"
    assert quote["totalCost"] == 15.5
    assert rates_client.service.get_rates_detailed.await_args.args[0] == valid_request


def test_request_from_file(runner, rates_client, valid_request, tmp_path):
    request_file = tmp_path / "request.json"
    request_file.write_text(json.dumps(valid_request))

    result = runner.invoke(get_rates, ["--file", str(request_file)])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["results"][0]["carrier"] == "UPS"


def test_request_from_stdin(runner, rates_client, valid_request):
    result = runner.invoke(get_rates, [], input=json.dumps(valid_request))

    assert result.exit_code == 0, result.output
    rates_client.service.get_rates_detailed.assert_awaited_once()


def test_missing_input_is_usage_error(runner, rates_client):
    result = runner.invoke(get_rates, [], input="")

    assert result.exit_code == 2
    assert "Usage" in result.output
    rates_client.service.get_rates_detailed.assert_not_awaited()

"""
2. Error Output Tests
"""

def test_invalid_json_prints_validation_error(runner, rates_client):
    result = runner.invoke(get_rates, ["--request", "{not json"])

    assert result.exit_code == 1
    error = json.loads(result.stderr)["error"]
    assert error["code"] == "VALIDATION_ERROR"


def test_service_error_prints_error_json(runner, rates_client, valid_request):
    rates_client.service.get_rates_detailed.side_effect = NetworkError("down", "UPS")

    result = runner.invoke(get_rates, ["--request", json.dumps(valid_request)])

    assert result.exit_code == 1
    error = json.loads(result.stderr)["error"]
    assert error == {
        "name": "NetworkError",
        "code": "NETWORK_ERROR",
        "carrier": "UPS",
        "retryable": True,
        "message": "down",
        "details": None,
    }


def test_configuration_error_exits_nonzero(runner, mocker, valid_request):
    mocker.patch.object(cli_module, "create_rates_client", side_effect=ConfigError("Missing required UPS credentials"))

    result = runner.invoke(get_rates, ["--request", json.dumps(valid_request)])

    assert result.exit_code == 1
    assert json.loads(result.stderr)["error"]["code"] == "CONFIG_ERROR"


def test_invalid_environment_prints_config_error(runner, monkeypatch, valid_request):
    monkeypatch.setenv("UPS_TIMEOUT_MS", "abc")

    result = runner.invoke(get_rates, ["--request", json.dumps(valid_request)])

    assert result.exit_code == 1
    error = json.loads(result.stderr)["error"]
    assert error["code"] == "CONFIG_ERROR"
    assert "UPS_TIMEOUT_MS" in error["message"]
