"""
In-memory TTL cache for rate responses, keyed by request contents.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional

from carrier_rates.schemas.rates import RateResponse


def _now_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class _Entry:
    value: List[RateResponse]
    expires_at_ms: float


class InMemoryRateCache:

    def __init__(self, max_entries: int = 500, now: Optional[Callable[[], float]] = None):
        self.max_entries = max_entries
        self._now = now or _now_ms
        self._store: "OrderedDict[str, _Entry]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Optional[List[RateResponse]]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._now() >= entry.expires_at_ms:
            del self._store[key]
            return None
        return list(entry.value)

    def set(self, key: str, value: List[RateResponse], ttl_ms: int):
        if key not in self._store and len(self._store) >= self.max_entries:
            # evict oldest insertion
            self._store.popitem(last=False)
        self._store[key] = _Entry(value=list(value), expires_at_ms=self._now() + ttl_ms)
