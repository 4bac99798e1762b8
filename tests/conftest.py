# tests/conftest.py
import pytest

from carrier_rates.core.config import Settings, clear_settings_cache
from tests.mocks import AUTH_URL, BASE_URL, StubHttpClient


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        UPS_CLIENT_ID="test-client-id",
        UPS_CLIENT_SECRET="test-client-secret",
        UPS_BASE_URL=BASE_URL,
        UPS_AUTH_URL=AUTH_URL,
        UPS_ACCOUNT_NUMBER="",
        UPS_TIMEOUT_MS=5000,
        RETRY_ENABLED=True,
        RETRY_MAX_ATTEMPTS=3,
        RETRY_BASE_DELAY_MS=1,
        RETRY_MAX_DELAY_MS=2,
        RETRY_JITTER_RATIO=0,
        CIRCUIT_BREAKER_ENABLED=True,
        CIRCUIT_FAILURE_THRESHOLD=5,
        CIRCUIT_OPEN_DURATION_MS=30000,
        RATE_CACHE_ENABLED=False,
    )


@pytest.fixture(autouse=True)
def reset_settings_cache():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def stub_http():
    return StubHttpClient()


@pytest.fixture
def valid_request():
    """A rate request as a caller would send it (camelCase keys)"""
    return {
        "origin": {
            "street": ["123 Main St"],
            "city": "Atlanta",
            "state": "GA",
            "postalCode": "30301",
            "country": "US",
        },
        "destination": {
            "street": ["456 Oak Ave", "Suite 200"],
            "city": "Beverly Hills",
            "state": "CA",
            "postalCode": "90210",
            "country": "US",
        },
        "packages": [
            {"weight": 5, "length": 10, "width": 8, "height": 6},
        ],
    }
