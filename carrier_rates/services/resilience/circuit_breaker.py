"""
Per-carrier circuit breaker.

closed -> open after `failure_threshold` consecutive failures; open fails
fast until `open_duration_ms` has elapsed, checked when a call arrives; the
first call after that runs half-open and either closes the circuit or
reopens it.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from carrier_rates.core.enums import CircuitState
from carrier_rates.core.exceptions import CircuitOpenError
from carrier_rates.services.http_client import HttpResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now_ms() -> float:
    return time.monotonic() * 1000


class CircuitBreaker:

    def __init__(
        self,
        failure_threshold: int = 5,
        open_duration_ms: int = 30000,
        now: Optional[Callable[[], float]] = None,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.failure_threshold = failure_threshold
        self.open_duration_ms = open_duration_ms
        self._now = now or _now_ms
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at_ms = 0.0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    async def execute(self, carrier: str, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run `operation` unless the circuit is open

        Raises:
            CircuitOpenError: While open, without calling `operation`
        """
        if self._state == CircuitState.OPEN:
            elapsed = self._now() - self._opened_at_ms
            if elapsed < self.open_duration_ms:
                raise CircuitOpenError(
                    "Circuit breaker is open",
                    carrier,
                    details={"open_duration_ms": self.open_duration_ms, "elapsed_ms": int(elapsed)},
                )
            self._state = CircuitState.HALF_OPEN
            logger.info(f"[{carrier}] circuit half-open after {int(elapsed)}ms, allowing trial call")

        try:
            result = await operation()
        except Exception:
            self._on_failure(carrier)
            raise
        self._on_success(carrier)
        return result

    def _on_success(self, carrier: str):
        if self._state != CircuitState.CLOSED:
            logger.info(f"[{carrier}] circuit closed")
        self._consecutive_failures = 0
        self._state = CircuitState.CLOSED

    def _on_failure(self, carrier: str):
        self._consecutive_failures += 1
        if self._state == CircuitState.HALF_OPEN or self._consecutive_failures >= self.failure_threshold:
            self._trip(carrier)

    def _trip(self, carrier: str):
        self._state = CircuitState.OPEN
        self._opened_at_ms = self._now()
        logger.warning(
            f"[{carrier}] circuit opened after {self._consecutive_failures} consecutive failures "
            f"for {self.open_duration_ms}ms"
        )


class CircuitBreakerCarrierClient:
    """CarrierClient decorator guarding `send` with a shared CircuitBreaker"""

    def __init__(self, carrier_name: str, breaker: CircuitBreaker, inner):
        self.carrier_name = carrier_name
        self.breaker = breaker
        self.inner = inner

    async def send(self, request: Any, request_id: str) -> HttpResponse:
        return await self.breaker.execute(self.carrier_name, lambda: self.inner.send(request, request_id))
