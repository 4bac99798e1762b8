"""
Retry with exponential backoff and jitter.

`with_retry` is the generic executor; `RetryingCarrierClient` applies it to a
carrier client's `send`.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

from carrier_rates.core.exceptions import ServiceError
from carrier_rates.services.http_client import HttpResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy(Protocol):
    max_attempts: int

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        ...

    def get_delay_ms(self, attempt: int) -> int:
        ...


@dataclass(frozen=True)
class RetryAttempt:
    """Passed to the retry observer before each backoff sleep"""
    attempt: int
    delay_ms: int
    error: BaseException


class ExponentialBackoffRetryPolicy:
    """
    Retries retryable ServiceErrors with capped exponential backoff.

    The delay before attempt n is min(base * 2^(n-1), max), spread uniformly
    across +/- jitter_ratio of itself.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_ms: int = 200,
        max_delay_ms: int = 2000,
        jitter_ratio: float = 0.2,
        rng: Optional[Callable[[], float]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0 <= jitter_ratio <= 1:
            raise ValueError("jitter_ratio must be between 0 and 1")
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.jitter_ratio = jitter_ratio
        self._rng = rng or random.random

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        if attempt >= self.max_attempts:
            return False
        return isinstance(error, ServiceError) and error.retryable

    def get_delay_ms(self, attempt: int) -> int:
        capped = min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)
        jitter = capped * self.jitter_ratio
        low = capped - jitter
        high = capped + jitter
        return max(0, int(low + self._rng() * (high - low)))


async def with_retry(
    operation: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    on_retry: Optional[Callable[[RetryAttempt], Any]] = None,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> T:
    """
    Run `operation(attempt)` until it succeeds or the policy gives up.

    The last error is re-raised as-is, never wrapped.
    """
    sleep = sleep or asyncio.sleep
    attempt = 1
    while True:
        try:
            return await operation(attempt)
        except Exception as e:
            if not policy.should_retry(e, attempt):
                raise
            attempt += 1
            delay_ms = policy.get_delay_ms(attempt)
            if on_retry is not None:
                on_retry(RetryAttempt(attempt=attempt, delay_ms=delay_ms, error=e))
            await sleep(delay_ms / 1000)


class RetryingCarrierClient:
    """CarrierClient decorator running every send through the retry policy"""

    def __init__(self, carrier_name: str, policy: RetryPolicy, inner, sleep=None):
        self.carrier_name = carrier_name
        self.policy = policy
        self.inner = inner
        self._sleep = sleep

    async def send(self, request: Any, request_id: str) -> HttpResponse:
        def log_retry(info: RetryAttempt):
            code = info.error.code.value if isinstance(info.error, ServiceError) else type(info.error).__name__
            logger.warning(
                f"[{self.carrier_name}] retrying carrier request {request_id}: "
                f"attempt {info.attempt}/{self.policy.max_attempts} in {info.delay_ms}ms after {code}"
            )

        return await with_retry(
            lambda attempt: self.inner.send(request, request_id),
            self.policy,
            on_retry=log_retry,
            sleep=self._sleep,
        )
