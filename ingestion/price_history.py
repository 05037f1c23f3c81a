"""
Price history loader - provider -> normalizer -> validator -> cache.
The risk engine never fetches; callers load a PriceSeries here first.
"""

import logging
import os
from datetime import date, timedelta
from typing import Callable, Optional

from dotenv import load_dotenv

from analysis.models import PriceSeries
from ingestion.candle_cache import CandleCache, DEFAULT_TTL_SECONDS
from ingestion.providers.yfinance_adapter import fetch_prices_window
from ingestion.transforms.normalizers import normalize_prices, rows_to_price_series
from ingestion.transforms.validators import validate_price_series

load_dotenv()

logger = logging.getLogger(__name__)


DEFAULT_LOOKBACK_YEARS = 10
DAYS_PER_YEAR = 365.25


class PriceHistoryError(Exception):
    """Raised when no usable price history can be loaded."""
    pass


def default_lookback_years() -> int:
    return int(os.getenv('RISK_PANEL_LOOKBACK_YEARS', str(DEFAULT_LOOKBACK_YEARS)))


def build_default_cache() -> CandleCache:
    """Candle cache with TTL from CANDLE_CACHE_TTL_S."""
    ttl = float(os.getenv('CANDLE_CACHE_TTL_S', str(DEFAULT_TTL_SECONDS)))
    return CandleCache(ttl_seconds=ttl)


def history_window(years: int, today: Optional[date] = None) -> tuple:
    """
    Compute the [start, end] fetch window for a lookback in years.

    Returns:
        (start, end) dates, end inclusive
    """
    if years <= 0:
        raise PriceHistoryError(f"years must be positive, got {years}")

    end = today or date.today()
    start = end - timedelta(days=int(years * DAYS_PER_YEAR))
    return start, end


def load_price_series(
    ticker: str,
    years: int = DEFAULT_LOOKBACK_YEARS,
    *,
    cache: Optional[CandleCache] = None,
    fetcher: Callable = fetch_prices_window,
    today: Optional[date] = None
) -> PriceSeries:
    """
    Load a validated daily PriceSeries for a ticker.

    Args:
        ticker: Stock ticker symbol
        years: Lookback in years
        cache: Optional candle cache consulted before fetching
        fetcher: Callable(ticker, start, end) returning raw provider rows
        today: End of the window (defaults to today)

    Returns:
        PriceSeries ordered oldest first

    Raises:
        PriceHistoryError: If the provider returns no usable rows
        YFinanceError: If the fetch itself fails
        ValidationError: If the normalized series is malformed
    """
    ticker = ticker.upper()
    key = (ticker, f"{years}y")

    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            logger.info(f"Serving {ticker} ({years}y) from candle cache: {len(cached)} sessions")
            return cached

    start, end = history_window(years, today)
    logger.info(f"Fetching {ticker} prices {start} to {end}")

    raw_rows = fetcher(ticker, start, end)
    if not raw_rows:
        raise PriceHistoryError(f"No price data returned for {ticker}")

    rows = normalize_prices(raw_rows)
    if not rows:
        raise PriceHistoryError(f"No usable price rows for {ticker}")

    dropped = len(raw_rows) - len(rows)
    if dropped:
        logger.warning(f"Dropped {dropped} malformed or duplicate rows for {ticker}")

    series = rows_to_price_series(rows, ticker=ticker)
    validate_price_series(series)

    if cache is not None:
        cache.put(key, series)

    return series
