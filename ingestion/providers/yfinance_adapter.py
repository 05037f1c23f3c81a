"""
yfinance adapter - fetch daily price history from Yahoo Finance.
Network IO allowed here, but minimal business logic.
"""

import logging
import os
import yfinance as yf
import pandas as pd
from datetime import date, timedelta
from typing import Dict, Any, List

logger = logging.getLogger(__name__)


# Long enough for the correction clock to see several cycles
MAX_HISTORY_DAYS = 366 * 25


class YFinanceError(Exception):
    """Raised when yfinance operations fail."""
    pass


def fetch_prices_window(ticker: str, start: date, end: date) -> List[Dict[str, Any]]:
    """
    Fetch daily price data for a ticker within date window.
    Returns raw data in provider format - no normalization.

    Args:
        ticker: Stock ticker symbol (e.g., 'AAPL')
        start: Start date (inclusive)
        end: End date (inclusive)

    Returns:
        List of raw price dictionaries in yfinance format

    Raises:
        YFinanceError: If fetch fails or validation fails
    """
    _validate_date_range(start, end)
    _validate_ticker(ticker)

    timeout = int(os.getenv('REQUESTS_TIMEOUT_S', '30'))

    try:
        # yfinance uses exclusive end dates, so add 1 day
        yf_end = end + timedelta(days=1)

        data = yf.download(
            ticker,
            start=start.isoformat(),
            end=yf_end.isoformat(),
            interval='1d',
            auto_adjust=False,
            progress=False,
            timeout=timeout
        )
    except Exception as e:
        logger.error(f"yfinance download failed for {ticker}: {e}")
        raise YFinanceError(f"Failed to fetch prices for {ticker}: {str(e)}") from e

    if data is None or len(data) == 0:
        logger.info(f"No price rows returned for {ticker} ({start} to {end})")
        return []

    # Flatten multi-level columns (yfinance adds a ticker level)
    if isinstance(data.columns, pd.MultiIndex):
        data.columns = data.columns.get_level_values(0)

    # Keep yfinance field names - normalization happens later
    rows = []
    for date_idx, row in data.iterrows():
        row_dict = {'Date': date_idx.strftime('%Y-%m-%d')}

        for field in ['Open', 'High', 'Low', 'Close', 'Adj Close', 'Volume']:
            if field in data.columns and pd.notna(row[field]):
                row_dict[field] = float(row[field]) if field != 'Volume' else int(row[field])

        rows.append(row_dict)

    logger.info(f"Fetched {len(rows)} price rows for {ticker}")
    return rows


def _validate_date_range(start: date, end: date) -> None:
    """
    Validate date range parameters.

    Raises:
        YFinanceError: If validation fails
    """
    if start > end:
        raise YFinanceError(f"start date ({start}) must be <= end date ({end})")

    today = date.today()
    if start > today or end > today:
        raise YFinanceError("Future dates not allowed for historical data")

    if (end - start).days > MAX_HISTORY_DAYS:
        raise YFinanceError(f"Date range too long (max {MAX_HISTORY_DAYS} days)")


def _validate_ticker(ticker: str) -> None:
    """
    Basic ticker validation.

    Raises:
        YFinanceError: If ticker is invalid
    """
    if not ticker or not isinstance(ticker, str):
        raise YFinanceError("Ticker must be non-empty string")

    if len(ticker) > 10:
        raise YFinanceError("Ticker too long (max 10 characters)")

    # Alphanumeric plus common ticker chars (BRK-B, ^GSPC, EURUSD=X)
    allowed_chars = set('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-^=')
    if not set(ticker.upper()).issubset(allowed_chars):
        raise YFinanceError(f"Ticker contains invalid characters: {ticker}")
