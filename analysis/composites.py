"""
Composite scorers - Euphoria Meter and Risk Temperature.

Both blend finished indicator outputs into a 0-100 score. Any input whose
source indicator is unavailable falls back to a neutral default so the
composite degrades instead of disappearing.
"""

import logging
from typing import Optional, Sequence, Tuple

from analysis.models import IndicatorResult, Level
from analysis.calculations.statistics import calculate_rsi

logger = logging.getLogger(__name__)


NEUTRAL_PERCENTILE = 50.0
EUPHORIA_MIN_SESSIONS = 200

EUPHORIA_WEIGHTS = {
    'rsi': 0.40,
    'trend': 0.35,
    'volatility': 0.25,
}

TEMPERATURE_WEIGHTS = {
    'volatility': 0.20,
    'trend': 0.15,
    'euphoria': 0.20,
    'crash': 0.15,
    'trend_break': 0.15,
    'drawdown': 0.15,
}

TREND_BREAK_SCORES = {
    Level.HIGH: 85,
    Level.ELEVATED: 60,
    Level.LOW: 30,
}


def euphoria_score(
    rsi: float,
    trend_pctl: Optional[float] = None,
    vol_pctl: Optional[float] = None
) -> float:
    """
    Weighted heat score: 40% RSI(14), 35% trend percentile, 25% volatility percentile.

    Missing percentiles count as 50.
    """
    trend = NEUTRAL_PERCENTILE if trend_pctl is None else trend_pctl
    vol = NEUTRAL_PERCENTILE if vol_pctl is None else vol_pctl

    return (
        rsi * EUPHORIA_WEIGHTS['rsi']
        + trend * EUPHORIA_WEIGHTS['trend']
        + vol * EUPHORIA_WEIGHTS['volatility']
    )


def compute_euphoria_meter(
    closes: Sequence[float],
    vol_pctl: Optional[float] = None,
    trend_pctl: Optional[float] = None
) -> Optional[IndicatorResult]:
    """
    Euphoria Meter - momentum, trend extension and volatility in one score.

    Levels: score > 75 HIGH, > 55 ELEVATED, else LOW.

    Args:
        closes: Closing prices in chronological order
        vol_pctl: Volatility percentile (None -> 50)
        trend_pctl: Trend distance percentile (None -> 50)

    Returns:
        IndicatorResult with the score as its percentile, or None when the
        history is too short or RSI is unavailable
    """
    if len(closes) < EUPHORIA_MIN_SESSIONS:
        logger.debug(f"Euphoria meter unavailable: {len(closes)} sessions, need {EUPHORIA_MIN_SESSIONS}")
        return None

    rsi = calculate_rsi(closes)
    if rsi is None:
        logger.debug("Euphoria meter unavailable: RSI could not be calculated")
        return None

    trend = NEUTRAL_PERCENTILE if trend_pctl is None else trend_pctl
    vol = NEUTRAL_PERCENTILE if vol_pctl is None else vol_pctl
    score = euphoria_score(rsi, trend, vol)

    if score > 75:
        level = Level.HIGH
        explanation = f"RSI at {rsi:.0f}, trend at {trend:.0f}th percentile, historically stretched."
    elif score > 55:
        level = Level.ELEVATED
        explanation = f"Composite reads {score:.0f}/100, above-average momentum and extension."
    else:
        level = Level.LOW
        explanation = "Momentum, trend extension, and volatility are within calm ranges."

    return IndicatorResult(
        value=f"{score:.0f}",
        context=f"RSI {rsi:.0f} · trend {trend:.0f}p · vol {vol:.0f}p",
        level=level,
        explanation=explanation,
        detail=(
            "Composite heat score: 40% RSI(14), 35% trend overextension percentile, "
            "25% volatility percentile. Descriptive only, not predictive. Not financial advice."
        ),
        percentile=score,
        raw_value=score,
    )


def drawdown_score(dd_pct: float) -> int:
    """Sub-score for Risk Temperature: |dd| > 20% -> 80, > 10% -> 60, else 30."""
    abs_dd = abs(dd_pct)
    if abs_dd > 20:
        return 80
    elif abs_dd > 10:
        return 60
    else:
        return 30


def risk_temperature_score(
    vol_pctl: Optional[float] = None,
    trend_pctl: Optional[float] = None,
    euphoria: Optional[float] = None,
    crash_pctl: Optional[float] = None,
    dd_pct: Optional[float] = None,
    trend_level: Optional[Level] = None
) -> float:
    """
    Weighted blend of six risk inputs into a 0-100 score.

    Args:
        vol_pctl: Volatility percentile (None -> 50)
        trend_pctl: Trend distance percentile (None -> 50)
        euphoria: Euphoria score (None -> 50)
        crash_pctl: Crash cluster percentile (None -> 50)
        dd_pct: Current drawdown in percent, sign ignored (None -> 0)
        trend_level: Trend break level (None -> LOW)

    Returns:
        Score, a pure function of the six inputs
    """
    vol = NEUTRAL_PERCENTILE if vol_pctl is None else vol_pctl
    trend = NEUTRAL_PERCENTILE if trend_pctl is None else trend_pctl
    heat = NEUTRAL_PERCENTILE if euphoria is None else euphoria
    crash = NEUTRAL_PERCENTILE if crash_pctl is None else crash_pctl
    dd = 0.0 if dd_pct is None else dd_pct
    level = Level.LOW if trend_level is None else Level(trend_level)

    return (
        vol * TEMPERATURE_WEIGHTS['volatility']
        + trend * TEMPERATURE_WEIGHTS['trend']
        + heat * TEMPERATURE_WEIGHTS['euphoria']
        + crash * TEMPERATURE_WEIGHTS['crash']
        + TREND_BREAK_SCORES[level] * TEMPERATURE_WEIGHTS['trend_break']
        + drawdown_score(dd) * TEMPERATURE_WEIGHTS['drawdown']
    )


def classify_temperature(score: float) -> Tuple[str, Level]:
    """Label for a Risk Temperature score: > 70 High, > 45 Elevated, else Low."""
    if score > 70:
        return "High", Level.HIGH
    elif score > 45:
        return "Elevated", Level.ELEVATED
    else:
        return "Low", Level.LOW


def compute_risk_temperature(
    vol_pctl: Optional[float] = None,
    trend_pctl: Optional[float] = None,
    euphoria: Optional[float] = None,
    crash_pctl: Optional[float] = None,
    dd_pct: Optional[float] = None,
    trend_level: Optional[Level] = None
) -> IndicatorResult:
    """
    Risk Temperature - top-level composite of the panel.

    Always produces a result; see risk_temperature_score for the inputs
    and their defaults.
    """
    score = risk_temperature_score(vol_pctl, trend_pctl, euphoria, crash_pctl, dd_pct, trend_level)
    label, level = classify_temperature(score)

    if level == Level.LOW:
        explanation = "Most risk metrics are within normal historical ranges."
    elif level == Level.ELEVATED:
        explanation = "Several risk metrics are above their historical averages."
    else:
        explanation = "Multiple risk metrics are at historically elevated levels."

    return IndicatorResult(
        value=f"{score:.0f}",
        context=label,
        level=level,
        explanation=explanation,
        detail=(
            "Composite risk context score (0-100) from volatility, trend, euphoria, crash "
            "clustering, and drawdown metrics. Descriptive, not a prediction. Not financial advice."
        ),
        percentile=score,
        raw_value=score,
    )
