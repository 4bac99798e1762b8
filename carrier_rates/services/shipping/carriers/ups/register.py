"""
Wires the UPS pipeline together and registers it:

    UpsRateCarrier
      -> RetryingCarrierClient
        -> CircuitBreakerCarrierClient
          -> UpsRateClient (401 refresh-and-retry-once)
            -> HttpClient
"""

import logging
from typing import Optional

from carrier_rates.core.config import Settings, get_settings
from carrier_rates.core.exceptions import ConfigError
from carrier_rates.services.auth.oauth import OAuthClient
from carrier_rates.services.auth.token_manager import ClientCredentialsAuthProvider
from carrier_rates.services.http_client import HttpClient
from carrier_rates.services.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerCarrierClient
from carrier_rates.services.resilience.retry import (
    ExponentialBackoffRetryPolicy,
    RetryingCarrierClient,
    RetryPolicy,
)
from carrier_rates.services.shipping.cache import InMemoryRateCache

from .carrier import UpsRateCarrier
from .client import UpsRateClient
from .mapper import UpsRateMapper
from .types import UPS_CARRIER_NAME

logger = logging.getLogger(__name__)


def build_ups_carrier(
    settings: Optional[Settings] = None,
    http_client: Optional[HttpClient] = None,
    retry_policy: Optional[RetryPolicy] = None,
    circuit_breaker: Optional[CircuitBreaker] = None,
    enable_retry: Optional[bool] = None,
    enable_circuit_breaker: Optional[bool] = None,
) -> UpsRateCarrier:
    """
    Build a fully wired UPS carrier

    Raises:
        ConfigError: If the UPS credentials are missing
    """
    settings = settings or get_settings()
    if not settings.UPS_CLIENT_ID or not settings.UPS_CLIENT_SECRET:
        raise ConfigError(
            "Missing required UPS credentials. Set UPS_CLIENT_ID and UPS_CLIENT_SECRET."
        )

    http_client = http_client or HttpClient(default_timeout_ms=settings.UPS_TIMEOUT_MS)

    oauth_client = OAuthClient(
        http_client,
        auth_url=settings.UPS_AUTH_URL,
        client_id=settings.UPS_CLIENT_ID,
        client_secret=settings.UPS_CLIENT_SECRET,
        timeout_ms=settings.UPS_TIMEOUT_MS,
    )
    auth_provider = ClientCredentialsAuthProvider(oauth_client)
    client = UpsRateClient(http_client, auth_provider, settings.UPS_BASE_URL, settings.UPS_TIMEOUT_MS)

    if enable_circuit_breaker is None:
        enable_circuit_breaker = settings.CIRCUIT_BREAKER_ENABLED
    if enable_circuit_breaker:
        breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.CIRCUIT_FAILURE_THRESHOLD,
            open_duration_ms=settings.CIRCUIT_OPEN_DURATION_MS,
        )
        client = CircuitBreakerCarrierClient(UPS_CARRIER_NAME, breaker, client)

    if enable_retry is None:
        enable_retry = settings.RETRY_ENABLED
    if enable_retry:
        policy = retry_policy or ExponentialBackoffRetryPolicy(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay_ms=settings.RETRY_BASE_DELAY_MS,
            max_delay_ms=settings.RETRY_MAX_DELAY_MS,
            jitter_ratio=settings.RETRY_JITTER_RATIO,
        )
        client = RetryingCarrierClient(UPS_CARRIER_NAME, policy, client)

    mapper = UpsRateMapper(account_number=settings.UPS_ACCOUNT_NUMBER)
    logger.debug(
        f"Built UPS carrier (retry={enable_retry}, circuit_breaker={enable_circuit_breaker}, "
        f"base_url={settings.UPS_BASE_URL})"
    )
    return UpsRateCarrier(client, mapper)


def register_ups_carrier(
    registry,
    settings: Optional[Settings] = None,
    enable_rate_cache: Optional[bool] = None,
    rate_cache: Optional[InMemoryRateCache] = None,
    **options,
) -> Optional[InMemoryRateCache]:
    """
    Register UPS in the given CarrierRegistry

    Args:
        registry: CarrierRegistry to add the carrier to
        settings: Settings to build from (defaults to get_settings())
        enable_rate_cache: Create a rate cache for the rate service
        rate_cache: Cache to return instead of creating one
        **options: Passed through to build_ups_carrier

    Returns:
        The rate cache when caching is enabled, else None
    """
    settings = settings or get_settings()
    registry.register_carrier(build_ups_carrier(settings=settings, **options))

    if enable_rate_cache is None:
        enable_rate_cache = settings.RATE_CACHE_ENABLED
    if not enable_rate_cache:
        return None
    if rate_cache is not None:
        return rate_cache
    return InMemoryRateCache(max_entries=settings.RATE_CACHE_MAX_ENTRIES)
