"""
Memoization cache for strategy analytics results.

ResultCache is an explicit, injectable LRU cache with an optional
time-to-live. Keys are built from value hashes of the inputs, so two
equal strategies share an entry regardless of object identity. Every
cached computation is pure, so concurrent callers racing to fill the
same key simply store the same value twice.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, TypeVar

from options_analytics.utils.constants import DEFAULT_CACHE_SIZE, DEFAULT_CACHE_TTL
from options_analytics.utils.types import MarketParameters, RuleSet, Strategy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0


def greeks_key(strategy: Strategy, market: MarketParameters) -> tuple:
    return (
        "greeks",
        strategy.fingerprint(),
        float(market.volatility_pct),
        float(market.days_to_expiry),
        float(market.interest_rate),
    )


def payoff_key(strategy: Strategy, steps: int, refine: bool) -> tuple:
    # Expiration payoff does not depend on volatility or time
    return ("payoff", strategy.fingerprint(), int(steps), bool(refine))


def signal_key(rule_set: RuleSet, symbol: str, snapshot_version: int) -> tuple:
    return ("signal", rule_set.fingerprint(), symbol, int(snapshot_version))


class ResultCache:
    """
    LRU cache with per-entry expiry.

    Args:
        maxsize: Maximum number of entries; least recently used entries
            are evicted first
        ttl: Seconds an entry stays valid, or None for no expiry
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        maxsize: int = DEFAULT_CACHE_SIZE,
        ttl: Optional[float] = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self.maxsize = maxsize
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Hashable, tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()
        self.stats = CacheStats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get(self, key: Hashable, default: Any = None) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.misses += 1
                return default
            stored_at, value = entry
            if self.ttl is not None and now - stored_at > self.ttl:
                del self._entries[key]
                self.stats.misses += 1
                return default
            self._entries.move_to_end(key)
            self.stats.hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        with self._lock:
            self._entries[key] = (now, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry %s", evicted[:2] if isinstance(evicted, tuple) else evicted)

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        """Return the cached value for key, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache hit for %s", key[0] if isinstance(key, tuple) else key)
            return value
        # Computed outside the lock
        value = compute()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
