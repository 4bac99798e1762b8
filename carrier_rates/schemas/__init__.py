from .rates import (
    Address,
    Package,
    RateQuote,
    RateRequest,
    RateResponse,
    validate_rate_request
)
