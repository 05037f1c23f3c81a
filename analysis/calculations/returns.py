"""
Return-based window utilities.
Pure functions for crash-day clustering, overnight gaps and distribution days.
"""

import numpy as np
from typing import Optional, Sequence


class ReturnsError(Exception):
    """Raised when a return-based calculation fails."""
    pass


def crash_day_count(returns: Sequence[float], threshold: float = -0.02) -> int:
    """
    Count returns at or below `threshold`.

    Args:
        returns: Daily simple returns
        threshold: Crash cut-off as decimal (-0.02 = -2%)

    Returns:
        Number of crash days
    """
    arr = np.asarray(returns, dtype=float)
    return int(np.count_nonzero(arr <= threshold))


def rolling_crash_counts(
    returns: Sequence[float],
    window: int = 30,
    threshold: float = -0.02
) -> np.ndarray:
    """
    Crash-day count of every historical `window`-return block.

    Block k covers returns[k - window:k] for window <= k < len(returns).

    Raises:
        ReturnsError: If fewer than `window` returns
    """
    if len(returns) < window:
        raise ReturnsError(f"Insufficient data: need {window} returns, have {len(returns)}")

    crashes = (np.asarray(returns, dtype=float) <= threshold).astype(int)

    counts = []
    for end in range(window, len(crashes)):
        counts.append(int(crashes[end - window:end].sum()))

    return np.array(counts, dtype=int)


def _is_usable(value: Optional[float]) -> bool:
    return value is not None and value == value and value != 0


def overnight_gap(open_next: float, close_prev: float) -> float:
    """
    Absolute overnight gap as decimal.

    Formula: |open_{i+1} - close_i| / close_i
    """
    return abs((open_next - close_prev) / close_prev)


def average_gap(
    opens: Sequence[float],
    closes: Sequence[float],
    window: int = 20
) -> float:
    """
    Mean absolute overnight gap over the last `window` sessions.

    Uses the last window + 1 bars: each gap pairs a close with the
    following session's open.

    Raises:
        ReturnsError: If too few bars or any open/close in range is missing or zero
    """
    if len(closes) < window + 1 or len(opens) < window + 1:
        raise ReturnsError(f"Insufficient data: need {window + 1} sessions")

    recent_opens = opens[len(opens) - window - 1:]
    recent_closes = closes[len(closes) - window - 1:]

    if not all(_is_usable(o) for o in recent_opens):
        raise ReturnsError("Missing or zero opens in gap window")

    gaps = [overnight_gap(recent_opens[i + 1], recent_closes[i]) for i in range(window)]
    return float(np.mean(gaps))


def rolling_gap_averages(
    opens: Sequence[float],
    closes: Sequence[float],
    window: int = 20
) -> np.ndarray:
    """
    Mean absolute overnight gap of every historical `window`-gap block.

    Block k uses closes[k - window:k] against opens[k - window + 1:k + 1]
    for window + 1 <= k < len(closes). Blocks holding a missing or zero
    open/close are skipped. The latest block is included.

    Raises:
        ReturnsError: If opens and closes differ in length
    """
    if len(opens) != len(closes):
        raise ReturnsError("Opens and closes must have same length")

    averages = []
    for end in range(window + 1, len(closes)):
        gaps = []
        for j in range(end - window, end):
            if _is_usable(opens[j + 1]) and _is_usable(closes[j]):
                gaps.append(overnight_gap(opens[j + 1], closes[j]))
        if len(gaps) == window:
            averages.append(sum(gaps) / window)

    return np.array(averages, dtype=float)


def distribution_day_count(
    closes: Sequence[float],
    volumes: Sequence[float],
    window: int = 20
) -> int:
    """
    Count distribution days among the last `window` sessions.

    A distribution day closes below the prior session on volume above the
    average volume of the same `window` sessions.

    Raises:
        ReturnsError: If too few bars or any volume in range is missing or zero
    """
    if len(closes) < window + 1 or len(volumes) < window + 1:
        raise ReturnsError(f"Insufficient data: need {window + 1} sessions")

    recent_volumes = volumes[len(volumes) - window - 1:]
    if not all(_is_usable(v) for v in recent_volumes):
        raise ReturnsError("Missing or zero volumes in distribution window")

    recent_closes = closes[len(closes) - window - 1:]
    avg_volume = sum(recent_volumes[1:]) / window

    count = 0
    for i in range(1, window + 1):
        if recent_closes[i] < recent_closes[i - 1] and recent_volumes[i] > avg_volume:
            count += 1

    return count
