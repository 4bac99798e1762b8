from .circuit_breaker import CircuitBreaker, CircuitBreakerCarrierClient
from .retry import (
    ExponentialBackoffRetryPolicy,
    RetryAttempt,
    RetryingCarrierClient,
    RetryPolicy,
    with_retry
)
