"""
Normalizers for transforming provider data to a PriceSeries.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

import logging
import math
import pandas as pd
from datetime import date, datetime
from typing import Dict, Any, List, Optional

from analysis.models import PriceSeries
from ingestion.transforms.validators import ValidationError, validate_price_row

logger = logging.getLogger(__name__)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _number(value: Any, default: float) -> float:
    """Float value, or default when missing, zero or NaN."""
    if value is None:
        return default
    value = float(value)
    if math.isnan(value) or value == 0:
        return default
    return value


def normalize_prices(raw_rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Transform provider-native price rows to canonical shape.

    Minimal normalization:
    - Date strings to date objects
    - Field name mapping (provider uses capitalised names)
    - Missing open/high/low/volume default to 0 / close
    - Rows without a close are dropped
    - Deduplication by date (keep last to handle corrections), sorted ascending

    Args:
        raw_rows: List of provider-specific price dictionaries

    Returns:
        List of canonical price dictionaries
    """
    if not raw_rows:
        return []

    seen_dates = {}

    for raw in raw_rows:
        if raw.get('Close') is None:
            logger.warning(f"Dropping price row without close: {raw.get('Date')}")
            continue

        try:
            row_date = _parse_date(raw.get('Date', ''))
            close = float(raw['Close'])
            canonical = {
                'date': row_date,
                'open': _number(raw.get('Open'), 0.0),
                'high': _number(raw.get('High'), close),
                'low': _number(raw.get('Low'), close),
                'close': close,
                'volume': int(_number(raw.get('Volume'), 0)),
            }
            validate_price_row(canonical)
        except (ValueError, TypeError) as e:
            # ValidationError is a ValueError
            logger.warning(f"Dropping malformed price row {raw.get('Date')}: {e}")
            continue

        # Later rows for the same date replace earlier ones
        seen_dates[row_date] = canonical

    return [seen_dates[d] for d in sorted(seen_dates)]


def rows_to_price_series(rows: List[Dict[str, Any]], ticker: Optional[str] = None) -> PriceSeries:
    """
    Build a PriceSeries from canonical rows (as returned by normalize_prices).
    """
    return PriceSeries(
        closes=[row['close'] for row in rows],
        opens=[row['open'] for row in rows],
        highs=[row['high'] for row in rows],
        lows=[row['low'] for row in rows],
        volumes=[row['volume'] for row in rows],
        dates=[row['date'] for row in rows],
        ticker=ticker,
    )


def frame_to_price_series(price_df: pd.DataFrame, ticker: Optional[str] = None) -> PriceSeries:
    """
    Convert an OHLCV DataFrame to a PriceSeries.

    Column names are matched case-insensitively. A DatetimeIndex is used as
    the date column when no `date` column exists. Missing open/volume
    columns become zeros; missing high/low fall back to close. Rows without
    a close are dropped and the result is sorted by date.

    Args:
        price_df: DataFrame with at least date and close
        ticker: Optional label carried onto the series

    Returns:
        PriceSeries

    Raises:
        ValidationError: If the frame has no close or date information, or a
            date cannot be parsed
    """
    df = price_df.copy()

    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    df.columns = [str(c).strip().lower() for c in df.columns]

    if 'date' not in df.columns:
        if isinstance(df.index, pd.DatetimeIndex):
            df = df.reset_index()
            df = df.rename(columns={df.columns[0]: 'date'})
        else:
            raise ValidationError("Price frame needs a date column or a DatetimeIndex")

    if 'close' not in df.columns:
        raise ValidationError("Price frame needs a close column")

    df = df.dropna(subset=['close']).copy()
    try:
        df['date'] = pd.to_datetime(df['date']).dt.date
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Unparseable date column: {e}") from e
    df = df.sort_values('date').reset_index(drop=True)

    for column in ['open', 'volume']:
        if column not in df.columns:
            df[column] = 0.0
        df[column] = df[column].fillna(0.0)

    for column in ['high', 'low']:
        if column not in df.columns:
            df[column] = df['close']
        df[column] = df[column].fillna(df['close'])

    return PriceSeries(
        closes=df['close'].astype(float).tolist(),
        opens=df['open'].astype(float).tolist(),
        highs=df['high'].astype(float).tolist(),
        lows=df['low'].astype(float).tolist(),
        volumes=df['volume'].astype(float).tolist(),
        dates=df['date'].tolist(),
        ticker=ticker,
    )
