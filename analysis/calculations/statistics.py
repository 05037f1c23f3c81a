"""
Statistics kernel for the risk panel.
Pure functions: daily returns, moving average, percentile rank,
sample standard deviation and a simple-average RSI.

None of these raise on short input; each one falls back to the
neutral value documented in its docstring.
"""

import math
import numpy as np
from typing import Optional, Sequence


def daily_returns(closes: Sequence[float]) -> np.ndarray:
    """
    Calculate simple day-over-day returns.

    Formula: r_i = (P_i - P_{i-1}) / P_{i-1}

    Args:
        closes: Closing prices in chronological order

    Returns:
        Numpy array of returns (length = len(closes) - 1, empty for < 2 prices)
    """
    prices = np.asarray(closes, dtype=float)
    if prices.size < 2:
        return np.array([], dtype=float)

    return np.diff(prices) / prices[:-1]


def moving_average(values: Sequence[float], period: int) -> Optional[float]:
    """
    Arithmetic mean of the last `period` values.

    Args:
        values: Values in chronological order
        period: Number of trailing values to average

    Returns:
        The mean, or None when fewer than `period` values are available
    """
    if period <= 0 or len(values) < period:
        return None

    window = values[len(values) - period:]
    return math.fsum(window) / period


def percentile_rank(value: float, history: Sequence[float]) -> float:
    """
    Percent of `history` strictly below `value`.

    Returns 50 for an empty history so a missing baseline never reads
    as an extreme.

    Args:
        value: Value to rank
        history: Comparison set

    Returns:
        Rank in [0, 100]
    """
    hist = np.asarray(history, dtype=float)
    if hist.size == 0:
        return 50.0

    below = np.count_nonzero(hist < value)
    return float(below) / hist.size * 100


def std_dev(values: Sequence[float]) -> float:
    """
    Sample standard deviation (ddof=1).

    Returns:
        Standard deviation, 0 when fewer than 2 values
    """
    arr = np.asarray(values, dtype=float)
    if arr.size < 2:
        return 0.0

    return float(np.std(arr, ddof=1))


def calculate_rsi(closes: Sequence[float], period: int = 14) -> Optional[float]:
    """
    Relative Strength Index over the trailing `period` sessions.

    Uses simple averages of the last `period` gains and losses (no
    Wilder smoothing across the full history).

    Formula: RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Args:
        closes: Closing prices in chronological order
        period: Lookback in sessions

    Returns:
        RSI in [0, 100], 100 when the average loss is zero,
        None with fewer than period + 1 closes
    """
    if len(closes) < period + 1:
        return None

    recent = np.asarray(closes[len(closes) - period - 1:], dtype=float)
    diffs = np.diff(recent)

    avg_gain = float(diffs[diffs > 0].sum()) / period
    avg_loss = float(-diffs[diffs < 0].sum()) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)
