# carrier_rates/cli/get_rates.py
import asyncio
import json
import logging
import sys

import click

from carrier_rates.core.config import get_settings
from carrier_rates.core.exceptions import ServiceError, ValidationError
from carrier_rates.core.logging_config import configure_logging
from carrier_rates.services.shipping.factory import create_rates_client
from carrier_rates.services.shipping.rate_service import CarrierRateResult

logger = logging.getLogger(__name__)


@click.command(name="carrier-rates")
@click.option('--request', 'request_json', help='Rate request as a JSON string')
@click.option('--file', 'request_file', type=click.File('r'), help='Path to a JSON rate request')
@click.option('--carrier', help='Only quote this carrier')
@click.option('--log-level', help='Override LOG_LEVEL')
def get_rates(request_json, request_file, carrier, log_level):
    """Fetch shipping rate quotes for a rate request"""
    raw = _read_request(request_json, request_file)
    if not raw or not raw.strip():
        raise click.UsageError("Provide a rate request with --request, --file, or on stdin")

    try:
        configure_logging(log_level or get_settings().LOG_LEVEL)
        payload = _parse_request(raw)
        results = asyncio.run(run_get_rates(payload, carrier))
    except ServiceError as e:
        logger.debug(f"Rate request failed: {e}")
        click.echo(json.dumps({"error": e.to_dict()}, default=str), err=True)
        sys.exit(1)

    click.echo(json.dumps({"results": [r.to_dict() for r in results]}, indent=2, default=str))


def _read_request(request_json, request_file):
    if request_json:
        return request_json
    if request_file is not None:
        return request_file.read()
    stdin = click.get_text_stream('stdin')
    if stdin.isatty():
        return None
    return stdin.read()


def _parse_request(raw):
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Rate request is not valid JSON: {e.msg}", cause=e) from e


async def run_get_rates(payload, carrier=None):
    """Build the rates client from settings and quote the request"""
    client = create_rates_client()

    if carrier:
        response = await client.service.get_rates_from_carrier(carrier, payload)
        return [CarrierRateResult(carrier=client.registry.get_carrier(carrier).get_name(), response=response)]

    return await client.service.get_rates_detailed(payload)


if __name__ == "__main__":
    get_rates()
