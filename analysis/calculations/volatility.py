"""
Volatility calculation utilities.
Pure functions for realized volatility and its rolling history.
"""

import math
import numpy as np
from typing import Sequence

from analysis.calculations.statistics import std_dev


class VolatilityError(Exception):
    """Raised when volatility calculation fails."""
    pass


def realized_vol(
    returns: Sequence[float],
    window: int = 20,
    annualize: int = 252
) -> float:
    """
    Annualized realized volatility of the most recent `window` returns.

    Formula: sigma = std(returns, ddof=1) x sqrt(annualize) x 100

    Args:
        returns: Daily simple returns in chronological order
        window: Number of trailing returns to use
        annualize: Annualization factor (252 for daily to annual)

    Returns:
        Annualized volatility in percent (25.0 = 25%)

    Raises:
        VolatilityError: If insufficient data or invalid values
    """
    if window <= 1:
        raise VolatilityError("Window must be > 1 for standard deviation")

    if len(returns) < window:
        raise VolatilityError(f"Insufficient data: need {window} returns, have {len(returns)}")

    recent = np.asarray(returns[len(returns) - window:], dtype=float)
    if not np.all(np.isfinite(recent)):
        raise VolatilityError("Non-finite values not allowed in returns")

    return std_dev(recent) * math.sqrt(annualize) * 100


def rolling_volatility(
    returns: Sequence[float],
    window: int = 20,
    annualize: int = 252
) -> np.ndarray:
    """
    Annualized volatility of every historical `window`-return block.

    Block k covers returns[k - window:k] for window <= k < len(returns),
    so the block ending on the latest return is not part of the history.

    Args:
        returns: Daily simple returns in chronological order
        window: Rolling window size
        annualize: Annualization factor

    Returns:
        Array of annualized volatilities in percent

    Raises:
        VolatilityError: If insufficient data
    """
    if window <= 1:
        raise VolatilityError("Window must be > 1 for standard deviation")

    if len(returns) < window:
        raise VolatilityError(f"Insufficient data: need {window} returns, have {len(returns)}")

    arr = np.asarray(returns, dtype=float)
    scale = math.sqrt(annualize) * 100

    rolling_vols = []
    for end in range(window, len(arr)):
        rolling_vols.append(std_dev(arr[end - window:end]) * scale)

    return np.array(rolling_vols, dtype=float)
