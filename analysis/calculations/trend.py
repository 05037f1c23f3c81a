"""
Moving-average trend utilities.
Pure functions for distance-from-trend history and sessions below trend.
"""

import math
import numpy as np
from typing import Sequence


class TrendError(Exception):
    """Raised when a trend calculation fails."""
    pass


def ma_distance_history(closes: Sequence[float], period: int = 200) -> np.ndarray:
    """
    Percent distance of each close from the average of the `period` closes before it.

    Formula: d_i = (P_i - mean(P_{i-period} .. P_{i-1})) / mean(...) x 100
    for period <= i < len(closes)

    Raises:
        TrendError: If fewer than period + 1 closes
    """
    if len(closes) < period + 1:
        raise TrendError(f"Insufficient data: need {period + 1} prices, have {len(closes)}")

    prices = np.asarray(closes, dtype=float)
    distances = []
    for i in range(period, len(prices)):
        base = math.fsum(prices[i - period:i]) / period
        distances.append((prices[i] - base) / base * 100)

    return np.array(distances, dtype=float)


def sessions_below_average(closes: Sequence[float], period: int = 200) -> int:
    """
    Consecutive most-recent sessions closing below the average of the prior `period` closes.

    Walks back from the last session and stops at the first session that
    closed at or above its trailing average, or at index `period`. With
    exactly `period` closes there is nothing to compare and the count is 0.

    Raises:
        TrendError: If fewer than `period` closes
    """
    if len(closes) < period:
        raise TrendError(f"Insufficient data: need {period} prices, have {len(closes)}")

    prices = np.asarray(closes, dtype=float)

    count = 0
    for i in range(len(prices) - 1, period - 1, -1):
        if prices[i] < math.fsum(prices[i - period:i]) / period:
            count += 1
        else:
            break

    return count
