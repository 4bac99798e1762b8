# carrier_rates/core/config.py

import os
from functools import lru_cache

from pydantic import ConfigDict, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .exceptions import ConfigError


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # UPS OAuth / Rating API
    UPS_CLIENT_ID: str = ""
    UPS_CLIENT_SECRET: str = ""
    UPS_BASE_URL: str = "https://onlinetools.ups.com"
    UPS_AUTH_URL: str = "https://onlinetools.ups.com/security/v1/oauth/token"
    UPS_ACCOUNT_NUMBER: str = ""
    UPS_TIMEOUT_MS: int = 30000

    # Retry policy
    RETRY_ENABLED: bool = True
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY_MS: int = 200
    RETRY_MAX_DELAY_MS: int = 2000
    RETRY_JITTER_RATIO: float = 0.2

    # Circuit breaker
    CIRCUIT_BREAKER_ENABLED: bool = True
    CIRCUIT_FAILURE_THRESHOLD: int = 5
    CIRCUIT_OPEN_DURATION_MS: int = 30000

    # Rate cache
    RATE_CACHE_ENABLED: bool = False
    RATE_CACHE_TTL_MS: int = 30000
    RATE_CACHE_MAX_ENTRIES: int = 500

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )


def load_settings(**overrides) -> Settings:
    """Build settings, converting pydantic errors into ConfigError"""
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigError(f"Invalid configuration: {fields}", details={"errors": e.errors()}, cause=e) from e


@lru_cache()
def get_settings() -> Settings:
    """Cached settings to avoid loading .env file for every request"""
    return load_settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
