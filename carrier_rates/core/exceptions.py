# carrier_rates/core/exceptions.py
"""
Error taxonomy for the rate pipeline.

Every error that leaves a carrier is a ServiceError. Each subclass fixes the
error code and, where the taxonomy says so, whether it is retryable.
"""
from typing import Any, Dict, Optional

from .enums import ErrorCode

SYSTEM_CARRIER = "SYSTEM"


class ServiceError(Exception):
    """Base exception for all carrier-facing errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        carrier: Optional[str] = None,
        retryable: bool = False,
        details: Any = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.carrier = carrier or SYSTEM_CARRIER
        self.retryable = retryable
        self.details = details
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self).__name__,
            "code": self.code.value,
            "carrier": self.carrier,
            "retryable": self.retryable,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value}, carrier={self.carrier!r}, message={self.message!r})"


class ValidationError(ServiceError):
    """Raised when a rate request fails validation, always before any I/O."""

    def __init__(self, message: str, details: Any = None, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, SYSTEM_CARRIER, False, details, cause)


class AuthError(ServiceError):
    """Raised when a token cannot be acquired or is rejected by the carrier."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        carrier: Optional[str] = None,
        details: Any = None,
        cause: Optional[BaseException] = None,
    ):
        if code not in (ErrorCode.AUTH_FAILED, ErrorCode.AUTH_TOKEN_INVALID):
            raise ValueError(f"AuthError cannot carry code {code}")
        super().__init__(message, code, carrier, False, details, cause)


class NetworkError(ServiceError):
    """Raised when the transport fails before a response arrives."""

    def __init__(self, message: str, carrier: Optional[str] = None, details: Any = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.NETWORK_ERROR, carrier, True, details, cause)


class RequestTimeoutError(ServiceError):
    """Raised when an HTTP call exceeds its per-call timeout."""

    def __init__(self, message: str, carrier: Optional[str] = None, details: Any = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.TIMEOUT, carrier, True, details, cause)


class RateLimitError(ServiceError):
    """Raised on HTTP 429 from the carrier."""

    def __init__(self, message: str, carrier: Optional[str] = None, details: Any = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.RATE_LIMIT_EXCEEDED, carrier, True, details, cause)


class CarrierError(ServiceError):
    """Raised when the carrier answers but the answer is an error or unusable."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        carrier: str,
        retryable: bool = False,
        details: Any = None,
        cause: Optional[BaseException] = None,
    ):
        if code not in (ErrorCode.API_ERROR, ErrorCode.MALFORMED_RESPONSE):
            raise ValueError(f"CarrierError cannot carry code {code}")
        super().__init__(message, code, carrier, retryable, details, cause)


class CircuitOpenError(ServiceError):
    """Raised without calling the carrier while its circuit breaker is open."""

    def __init__(self, message: str, carrier: str, details: Any = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.CIRCUIT_OPEN, carrier, True, details, cause)


class ConfigError(ServiceError):
    """Raised for missing or invalid configuration."""

    def __init__(self, message: str, details: Any = None, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.CONFIG_ERROR, SYSTEM_CARRIER, False, details, cause)


class UnknownError(ServiceError):
    """Wraps any exception that was not already a ServiceError."""

    def __init__(self, message: str, carrier: Optional[str] = None, details: Any = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message, ErrorCode.UNKNOWN_ERROR, carrier, False, details, cause)
