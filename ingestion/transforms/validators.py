"""
Core validators for incoming price series.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import date
from typing import Dict, Any

from analysis.models import PriceSeries


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_price_row(row: Dict[str, Any]) -> None:
    """
    Validate a canonical price row.

    Opens and volumes may be zero: a provider that omits them disables only
    the indicators that depend on them.

    Args:
        row: Dictionary with date, open, high, low, close, volume

    Raises:
        ValidationError: If validation fails
    """
    required_keys = {'date', 'open', 'high', 'low', 'close', 'volume'}

    missing = required_keys - set(row.keys())
    if missing:
        raise ValidationError(f"Missing required keys: {sorted(missing)}")

    if not isinstance(row['date'], date):
        raise ValidationError(f"date must be date, got {type(row['date'])}")

    for field in ['open', 'high', 'low', 'close', 'volume']:
        value = row[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{field} must be numeric, got {type(value)}")

        if not math.isfinite(value):
            raise ValidationError(f"{field} must be finite, got {value}")

        if value < 0:
            raise ValidationError(f"{field} must be non-negative, got {value}")

    if row['close'] <= 0:
        raise ValidationError(f"close must be positive, got {row['close']}")


def validate_price_series(series: PriceSeries) -> None:
    """
    Validate a PriceSeries before it reaches the engine.

    Checks:
    - all six sequences have identical length
    - dates strictly increasing
    - closes positive and finite
    - volumes non-negative

    Args:
        series: Series to validate

    Raises:
        ValidationError: If validation fails
    """
    lengths = {
        'closes': len(series.closes),
        'opens': len(series.opens),
        'highs': len(series.highs),
        'lows': len(series.lows),
        'volumes': len(series.volumes),
        'dates': len(series.dates),
    }
    if len(set(lengths.values())) > 1:
        raise ValidationError(f"Series lengths must match, got {lengths}")

    for i in range(1, len(series.dates)):
        if series.dates[i] <= series.dates[i - 1]:
            raise ValidationError(
                f"Dates must be strictly increasing: {series.dates[i - 1]} then {series.dates[i]}"
            )

    for i, close in enumerate(series.closes):
        if close is None or not math.isfinite(close) or close <= 0:
            raise ValidationError(f"close must be positive and finite, got {close} on {series.dates[i]}")

    for i, volume in enumerate(series.volumes):
        if volume is not None and volume < 0:
            raise ValidationError(f"volume must be non-negative, got {volume} on {series.dates[i]}")
