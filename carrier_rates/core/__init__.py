"""
Core module exports.
"""
from .enums import (
    CircuitState,
    ErrorCode,
    ServiceLevel
)

from .exceptions import (
    SYSTEM_CARRIER,
    AuthError,
    CarrierError,
    CircuitOpenError,
    ConfigError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServiceError,
    UnknownError,
    ValidationError
)
