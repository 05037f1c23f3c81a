"""
Drawdown and correction tracking utilities.
Pure functions for trailing drawdown and multi-threshold correction history.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Dict, Optional, Sequence, Tuple


CORRECTION_THRESHOLDS = (0.10, 0.20, 0.30)


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


@dataclass(frozen=True)
class CorrectionHistory:
    """
    Result of a correction scan.

    Attributes:
        thresholds: Drawdown thresholds as decimals, ascending
        completions: Per threshold, indices where a correction resolved
            (a new high made after a drawdown of at least that threshold)
        in_correction: Per threshold, whether a correction was open at the last session
        peak: Highest close observed
        last_peak_idx: Most recent index whose close reached `peak`
        current_drawdown: (peak - last close) / peak
        active_threshold: Index into `thresholds` of the highest threshold the
            current drawdown exceeds, None when below the lowest
        correction_start_idx: Session on which the active threshold was first
            crossed, None when no correction is active
    """
    thresholds: Tuple[float, ...]
    completions: Tuple[Tuple[int, ...], ...]
    in_correction: Tuple[bool, ...]
    peak: float
    last_peak_idx: int
    current_drawdown: float
    active_threshold: Optional[int]
    correction_start_idx: Optional[int]

    def completed_count(self, threshold_idx: int) -> int:
        return len(self.completions[threshold_idx])

    def last_completion(self, threshold_idx: int) -> Optional[int]:
        done = self.completions[threshold_idx]
        return done[-1] if done else None


def track_corrections(
    closes: Sequence[float],
    thresholds: Sequence[float] = CORRECTION_THRESHOLDS
) -> CorrectionHistory:
    """
    Scan a close series for corrections at each threshold.

    Forward pass: a running peak is raised whenever a close reaches it,
    which completes every open correction. A correction opens when the
    drawdown from the running peak reaches its threshold.

    The current state is then taken from the last session that sat at the
    all-time peak. When a threshold is currently exceeded, the start day is
    found by walking forward from that peak with a local running peak;
    minor highs below the all-time peak move the reference without ending
    the correction.

    Args:
        closes: Closing prices in chronological order
        thresholds: Drawdown thresholds as decimals, ascending

    Returns:
        CorrectionHistory

    Raises:
        DrawdownError: If closes are empty or not positive
    """
    if len(closes) == 0:
        raise DrawdownError("Insufficient data: need at least 1 price")

    if any(c <= 0 for c in closes):
        raise DrawdownError("Zero or negative prices not allowed")

    thresholds = tuple(thresholds)
    completions: List[List[int]] = [[] for _ in thresholds]
    in_correction = [False] * len(thresholds)
    peak = closes[0]

    for i, close in enumerate(closes):
        if close >= peak:
            peak = close
            for t in range(len(thresholds)):
                if in_correction[t]:
                    completions[t].append(i)
                    in_correction[t] = False

        dd = (peak - close) / peak
        for t, threshold in enumerate(thresholds):
            if dd >= threshold and not in_correction[t]:
                in_correction[t] = True

    today = len(closes) - 1
    last_peak_idx = today
    for i in range(today, -1, -1):
        if closes[i] >= peak:
            last_peak_idx = i
            break

    current_dd = (peak - closes[today]) / peak

    active = None
    for t in range(len(thresholds) - 1, -1, -1):
        if current_dd >= thresholds[t]:
            active = t
            break

    start_idx = None
    if active is not None:
        run_peak = closes[last_peak_idx]
        for i in range(last_peak_idx + 1, today + 1):
            if closes[i] >= run_peak:
                run_peak = closes[i]
            if (run_peak - closes[i]) / run_peak >= thresholds[active]:
                start_idx = i
                break

    return CorrectionHistory(
        thresholds=thresholds,
        completions=tuple(tuple(c) for c in completions),
        in_correction=tuple(in_correction),
        peak=float(peak),
        last_peak_idx=last_peak_idx,
        current_drawdown=float(current_dd),
        active_threshold=active,
        correction_start_idx=start_idx,
    )


def median_spacing(indices: Sequence[int]) -> Optional[int]:
    """
    Median gap between consecutive indices.

    Even-length gap lists take the upper middle element.

    Returns:
        Median spacing in sessions, None with fewer than 2 indices
    """
    if len(indices) < 2:
        return None

    spacings = sorted(indices[i] - indices[i - 1] for i in range(1, len(indices)))
    return spacings[len(spacings) // 2]


def trailing_drawdown(
    closes: Sequence[float],
    window: int = 252
) -> Dict[str, float]:
    """
    Drawdown statistics over the trailing `window` sessions.

    Args:
        closes: Closing prices in chronological order
        window: Lookback in sessions (252 = one year)

    Returns:
        Dictionary with:
        - window_high: Highest close in the window
        - current_drawdown_pct: Last close vs window high as decimal (<= 0)
        - worst_drawdown_pct: Largest peak-to-trough decline inside the
          window as decimal (<= 0)

    Raises:
        DrawdownError: If insufficient data or invalid prices
    """
    if len(closes) < window:
        raise DrawdownError(f"Insufficient data: need {window} prices, have {len(closes)}")

    recent = np.asarray(closes[len(closes) - window:], dtype=float)

    if np.any(recent <= 0):
        raise DrawdownError("Zero or negative prices not allowed")

    window_high = float(recent.max())
    current = float(recent[-1])

    running_max = np.maximum.accumulate(recent)
    drawdowns = (running_max - recent) / running_max

    return {
        'window_high': window_high,
        'current_drawdown_pct': (current - window_high) / window_high,
        'worst_drawdown_pct': -float(drawdowns.max()),
    }
