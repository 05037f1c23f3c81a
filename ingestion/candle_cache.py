"""
In-memory candle cache owned by the price history loader.
TTL and clock are injected; entries are dropped explicitly or on expiry.
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from analysis.models import PriceSeries

logger = logging.getLogger(__name__)


DEFAULT_TTL_SECONDS = 900

CacheKey = Tuple[str, str]


class CandleCache:
    """
    Price series keyed by (ticker, period).

    Args:
        ttl_seconds: How long an entry stays fresh
        clock: Zero-argument callable returning seconds (monotonic)
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, PriceSeries]] = {}

    @staticmethod
    def _normalize_key(key: CacheKey) -> CacheKey:
        ticker, period = key
        return ticker.upper(), period

    def get(self, key: CacheKey) -> Optional[PriceSeries]:
        """Return the cached series, or None when absent or expired."""
        key = self._normalize_key(key)
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, series = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            logger.debug(f"Candle cache entry expired: {key}")
            del self._entries[key]
            return None

        return series

    def put(self, key: CacheKey, series: PriceSeries) -> None:
        self._entries[self._normalize_key(key)] = (self._clock(), series)

    def invalidate(self, ticker: str) -> int:
        """
        Drop every entry for a ticker.

        Returns:
            Number of entries dropped
        """
        ticker = ticker.upper()
        stale = [key for key in self._entries if key[0] == ticker]
        for key in stale:
            del self._entries[key]

        if stale:
            logger.debug(f"Invalidated {len(stale)} candle cache entries for {ticker}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key) is not None
