# carrier_rates/core/enums.py
from enum import Enum


class ErrorCode(str, Enum):
    """Unified error taxonomy shared by every carrier integration"""
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    API_ERROR = "API_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"
    CONFIG_ERROR = "CONFIG_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ServiceLevel(str, Enum):
    """Carrier-agnostic service levels a caller can ask for"""
    GROUND = "ground"
    NEXT_DAY_AIR = "nextDayAir"
    SECOND_DAY_AIR = "secondDayAir"
    THREE_DAY_SELECT = "threeDaySelect"
    NEXT_DAY_AIR_EARLY = "nextDayAirEarly"
    SECOND_DAY_AIR_AM = "secondDayAirAM"
    WORLDWIDE_EXPRESS = "worldwideExpress"
    WORLDWIDE_EXPRESS_PLUS = "worldwideExpressPlus"
    WORLDWIDE_EXPEDITED = "worldwideExpedited"
    STANDARD = "standard"
    EXPRESS = "express"


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"
