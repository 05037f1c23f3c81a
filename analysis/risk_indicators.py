"""
Risk indicators - one IndicatorResult per function.

Every function gates on its own minimum history and input validity and
returns None when it cannot produce a reading. Nothing here raises for
short or incomplete data; the panel simply omits that indicator.
"""

import logging
from typing import Optional, Sequence

from analysis.models import IndicatorResult, Level
from analysis.calculations.statistics import daily_returns, moving_average, percentile_rank
from analysis.calculations.volatility import realized_vol, rolling_volatility, VolatilityError
from analysis.calculations.returns import (
    crash_day_count,
    rolling_crash_counts,
    average_gap,
    rolling_gap_averages,
    distribution_day_count,
    ReturnsError
)
from analysis.calculations.drawdown import (
    track_corrections,
    median_spacing,
    trailing_drawdown,
    DrawdownError
)
from analysis.calculations.trend import ma_distance_history, sessions_below_average, TrendError
from reports.formatters import (
    MINUS,
    format_percent,
    format_signed_percent,
    format_decline,
    format_percentile,
    format_years,
    pluralize
)

logger = logging.getLogger(__name__)


# Minimum sessions per indicator
MIN_SESSIONS = 200
CORRECTION_MIN_SESSIONS = 365
TREND_DISTANCE_MIN_SESSIONS = 400
DRAWDOWN_MIN_SESSIONS = 252

VOL_WINDOW = 20
CRASH_WINDOW = 30
CRASH_THRESHOLD = -0.02
GAP_WINDOW = 20
DISTRIBUTION_WINDOW = 20

# Sessions since the last resolved 10% correction before the clock reads elevated
STALE_CORRECTION_SESSIONS = 500
DEATH_CROSS_WATCH_PCT = 2.0


def level_from_percentile(percentile: float, high_above: float, elevated_above: float) -> Level:
    """
    Map a percentile to a level with strict upper-tail cut-offs.

    Args:
        percentile: Rank in [0, 100]
        high_above: Percentile strictly above which the level is HIGH
        elevated_above: Percentile strictly above which the level is ELEVATED

    Returns:
        Level
    """
    if percentile > high_above:
        return Level.HIGH
    elif percentile > elevated_above:
        return Level.ELEVATED
    else:
        return Level.LOW


def _insufficient(name: str, have: int, need: int) -> None:
    logger.debug(f"{name} unavailable: {have} sessions, need {need}")


def compute_correction_clock(closes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Correction Clock - where the instrument sits in its correction cycle.

    In progress: the highest of 10/20/30% currently exceeded from the
    all-time peak, with days since that threshold was crossed. 20% and 30%
    read HIGH, 10% reads ELEVATED.

    Otherwise: distance from peak and how long ago the last 10%+ correction
    resolved. ELEVATED once that is 500+ sessions ago (or none on record),
    LOW before.
    """
    if len(closes) < CORRECTION_MIN_SESSIONS:
        _insufficient("Correction clock", len(closes), CORRECTION_MIN_SESSIONS)
        return None

    try:
        history = track_corrections(closes)
    except DrawdownError as e:
        logger.debug(f"Correction clock unavailable: {e}")
        return None

    today = len(closes) - 1
    years = format_years(len(closes))
    days_since_peak = today - history.last_peak_idx
    dd_pct = history.current_drawdown * 100

    if history.active_threshold is not None:
        active = history.active_threshold
        pct = round(history.thresholds[active] * 100)
        start = history.correction_start_idx if history.correction_start_idx is not None else today
        days_since_start = today - start

        level = Level.HIGH if active >= 1 else Level.ELEVATED

        return IndicatorResult(
            value=f"{pct}% IN PROGRESS",
            context=f"{format_decline(dd_pct)} from peak · {days_since_start}d since correction began",
            level=level,
            explanation=(
                f"Currently {format_decline(dd_pct)} from peak ({days_since_peak}d ago). "
                f"{pct}% threshold first crossed {days_since_start}d ago."
            ),
            detail=(
                f"Correction = peak-to-trough decline of at least {pct}%. Currently in progress, "
                f"no new high since peak. Based on {years} years of data. Descriptive only, not predictive."
            ),
            raw_value=-dd_pct,
        )

    last_resolved = history.last_completion(0)
    since_resolved = today - last_resolved if last_resolved is not None else None

    counts = ", ".join(
        f"{history.completed_count(t)}×{round(threshold * 100)}%"
        for t, threshold in enumerate(history.thresholds)
    )

    if since_resolved is None or since_resolved >= STALE_CORRECTION_SESSIONS:
        level = Level.ELEVATED
    else:
        level = Level.LOW

    at_peak = days_since_peak == 0
    peak_note = "At peak" if at_peak else f"{format_decline(dd_pct)} from peak ({days_since_peak}d ago)"

    if since_resolved is not None:
        resolved_note = f"Last 10%+ correction resolved {since_resolved}d ago"
        spacing = median_spacing(history.completions[0])
        spacing_note = f"{spacing}d median" if spacing is not None else "no median yet"
        context = f"{resolved_note} · {spacing_note}"
    else:
        resolved_note = "No 10%+ correction detected"
        context = f"No correction on record · {years}yr data"

    return IndicatorResult(
        value="At Peak" if at_peak else format_decline(dd_pct),
        context=context,
        level=level,
        explanation=f"{peak_note}. {resolved_note}. Historical: {counts} corrections in {years}yr.",
        detail=(
            "Correction = peak-to-trough decline of at least the threshold. Completed = new high "
            "made after the drawdown. If currently in a drawdown under 10%, the distance from peak "
            f"is shown. Based on {years} years of data. Descriptive only, not predictive."
        ),
        raw_value=-dd_pct,
    )


def compute_trend_distance(closes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Trend Distance - how far price is stretched from its 200- and 400-day averages.

    Level comes from the percentile of today's MA200 distance against every
    historical MA200 distance: >85 HIGH, >65 ELEVATED.
    """
    if len(closes) < TREND_DISTANCE_MIN_SESSIONS:
        _insufficient("Trend distance", len(closes), TREND_DISTANCE_MIN_SESSIONS)
        return None

    try:
        current = float(closes[-1])
        ma200 = moving_average(closes, 200)
        ma400 = moving_average(closes, 400)
        dist_200 = (current - ma200) / ma200 * 100
        dist_400 = (current - ma400) / ma400 * 100
        history = ma_distance_history(closes, 200)
    except (TrendError, ZeroDivisionError) as e:
        logger.debug(f"Trend distance unavailable: {e}")
        return None

    pctl = percentile_rank(dist_200, history)
    level = level_from_percentile(pctl, 85, 65)

    if level == Level.LOW:
        explanation = "Price within typical range of long-term trend."
    elif level == Level.ELEVATED:
        explanation = (
            f"Price {format_signed_percent(dist_200)} from MA200, more extended than "
            f"{pctl:.0f}% of historical readings."
        )
    else:
        explanation = (
            f"Price significantly extended above long-term trend at "
            f"{format_percentile(pctl)} percentile."
        )

    return IndicatorResult(
        value=format_signed_percent(dist_200),
        context=(
            f"vs MA200 ({format_percentile(pctl)} pctl) · "
            f"{format_signed_percent(dist_400)} vs MA400"
        ),
        level=level,
        explanation=explanation,
        detail=(
            f"Current price vs 200-day and 400-day moving averages. Percentile based on "
            f"{format_years(len(closes))} years. Higher = more extended. Not financial advice."
        ),
        percentile=pctl,
        raw_value=dist_200,
    )


def compute_trend_break(closes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Trend Break - price position against the 50/100/200-day averages.

    First match wins:
    1. MA50 below MA200 (death cross)          -> HIGH
    2. price below MA200                       -> HIGH
    3. price below MA100                       -> ELEVATED
    4. price below MA50                        -> ELEVATED
    5. MA50 above MA200 by less than 2%        -> ELEVATED (watch)
    6. otherwise                               -> LOW (healthy uptrend)
    """
    if len(closes) < MIN_SESSIONS:
        _insufficient("Trend break", len(closes), MIN_SESSIONS)
        return None

    try:
        current = float(closes[-1])
        ma50 = moving_average(closes, 50)
        ma100 = moving_average(closes, 100)
        ma200 = moving_average(closes, 200)
        days_below_200 = sessions_below_average(closes, 200)
        ma50_vs_200 = (ma50 - ma200) / ma200 * 100
    except (TrendError, ZeroDivisionError) as e:
        logger.debug(f"Trend break unavailable: {e}")
        return None

    death_cross = ma50 < ma200

    if death_cross:
        value = "Death Cross Active"
        context = f"MA50 {abs(ma50_vs_200):.1f}% below MA200"
        level = Level.HIGH
        explanation = "MA50 has crossed below MA200, a historically bearish trend signal."
    elif current < ma200:
        value = f"Below MA200 ({days_below_200}d)"
        context = f"Death cross watch: MA50 {format_signed_percent(ma50_vs_200)} vs MA200"
        level = Level.HIGH
        explanation = f"Price trading below MA200 for {pluralize(days_below_200, 'consecutive day')}."
    elif current < ma100:
        value = "Below MA100"
        context = f"Above MA200 · MA50 {format_signed_percent(ma50_vs_200)} vs MA200"
        level = Level.ELEVATED
        explanation = "Price has broken below a key moving average. Trend structure weakening."
    elif current < ma50:
        value = "Below MA50"
        context = "Above MA100 & MA200"
        level = Level.ELEVATED
        explanation = "Price has broken below a key moving average. Trend structure weakening."
    elif 0 < ma50_vs_200 < DEATH_CROSS_WATCH_PCT:
        value = "Death Cross Watch"
        context = f"MA50 only {format_signed_percent(ma50_vs_200)} above MA200"
        level = Level.ELEVATED
        explanation = "MA50 is closing in on MA200. Trend structure weakening."
    else:
        value = "Healthy Uptrend"
        context = f"Above all major MAs · MA50 {format_signed_percent(ma50_vs_200)} vs MA200"
        level = Level.LOW
        explanation = "Price above MA50, MA100, and MA200. No recent downside breaks."

    return IndicatorResult(
        value=value,
        context=context,
        level=level,
        explanation=explanation,
        detail=(
            "Price position relative to 50/100/200-day moving averages. "
            "Death cross = MA50 crosses below MA200. Not financial advice."
        ),
        raw_value=ma50_vs_200,
    )


def compute_volatility(closes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Volatility - 20-day realized volatility, annualized, ranked against every
    historical 20-day window: >80 HIGH, >60 ELEVATED.
    """
    if len(closes) < MIN_SESSIONS:
        _insufficient("Volatility", len(closes), MIN_SESSIONS)
        return None

    try:
        returns = daily_returns(closes)
        vol_20 = realized_vol(returns, window=VOL_WINDOW)
        history = rolling_volatility(returns, window=VOL_WINDOW)
    except VolatilityError as e:
        logger.debug(f"Volatility unavailable: {e}")
        return None

    pctl = percentile_rank(vol_20, history)
    level = level_from_percentile(pctl, 80, 60)

    if level == Level.LOW:
        explanation = "Recent price swings are within normal historical range."
    else:
        explanation = (
            f"Daily price swings at {format_percent(vol_20)} annualized, higher than "
            f"{pctl:.0f}% of historical periods."
        )

    return IndicatorResult(
        value=format_percent(vol_20),
        context=f"20D annualized ({format_percentile(pctl)} percentile)",
        level=level,
        explanation=explanation,
        detail=(
            f"20-day realized volatility, annualized (×√252). Percentile vs "
            f"{format_years(len(closes))} years of history. Not financial advice."
        ),
        percentile=pctl,
        raw_value=vol_20,
    )


def compute_crash_cluster(closes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Crash Cluster - sessions down 2% or more in the last 30, ranked against
    every historical 30-session window: >80 HIGH, >60 ELEVATED.
    """
    if len(closes) < MIN_SESSIONS:
        _insufficient("Crash cluster", len(closes), MIN_SESSIONS)
        return None

    try:
        returns = daily_returns(closes)
        crash_days = crash_day_count(returns[-CRASH_WINDOW:], CRASH_THRESHOLD)
        history = rolling_crash_counts(returns, window=CRASH_WINDOW, threshold=CRASH_THRESHOLD)
    except ReturnsError as e:
        logger.debug(f"Crash cluster unavailable: {e}")
        return None

    pctl = percentile_rank(crash_days, history)
    level = level_from_percentile(pctl, 80, 60)

    if level == Level.LOW:
        explanation = (
            f"{pluralize(crash_days, 'day')} at or below {MINUS}2% in last 30, historically moderate."
        )
    else:
        explanation = (
            f"{crash_days} large down days in 30 sessions, more frequent than "
            f"{pctl:.0f}% of historical windows."
        )

    return IndicatorResult(
        value=f"{crash_days}",
        context=f"days ≤ {MINUS}2% in last 30 ({format_percentile(pctl)} pctl)",
        level=level,
        explanation=explanation,
        detail=(
            "Count of trading days with a decline of 2% or more in the last 30 sessions. "
            "Percentile vs rolling 30-day windows over full history. Not financial advice."
        ),
        percentile=pctl,
        raw_value=float(crash_days),
    )


def compute_drawdown_pressure(closes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Drawdown Pressure - decline from the 52-week high and the worst
    peak-to-trough drop inside the same year: |dd| > 20% HIGH, > 10% ELEVATED.
    """
    if len(closes) < DRAWDOWN_MIN_SESSIONS:
        _insufficient("Drawdown pressure", len(closes), DRAWDOWN_MIN_SESSIONS)
        return None

    try:
        stats = trailing_drawdown(closes, window=DRAWDOWN_MIN_SESSIONS)
    except DrawdownError as e:
        logger.debug(f"Drawdown pressure unavailable: {e}")
        return None

    current_dd = stats['current_drawdown_pct'] * 100
    worst_dd = abs(stats['worst_drawdown_pct']) * 100
    abs_dd = abs(current_dd)

    if abs_dd > 20:
        level = Level.HIGH
    elif abs_dd > 10:
        level = Level.ELEVATED
    else:
        level = Level.LOW

    if level == Level.LOW:
        explanation = f"Price within {abs_dd:.1f}% of 52-week high, minimal drawdown."
    else:
        explanation = f"{abs_dd:.1f}% decline from 52-week high. Worst 12M drop was {worst_dd:.1f}%."

    return IndicatorResult(
        value=format_percent(current_dd),
        context=f"from 52w high · worst 12M: {format_decline(worst_dd)}",
        level=level,
        explanation=explanation,
        detail=(
            "Current decline from 52-week high, and the maximum peak-to-trough drop "
            "in the last 12 months. Not financial advice."
        ),
        raw_value=current_dd,
    )


def compute_gap_risk(closes: Sequence[float], opens: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Gap Risk - average absolute overnight gap over 20 sessions, ranked
    against historical 20-session averages: >80 HIGH, >60 ELEVATED.

    Needs valid (non-zero) opens across the last 21 sessions.
    """
    if len(closes) < MIN_SESSIONS or len(opens) < MIN_SESSIONS:
        _insufficient("Gap risk", min(len(closes), len(opens)), MIN_SESSIONS)
        return None

    try:
        avg_gap = average_gap(opens, closes, window=GAP_WINDOW)
        history = rolling_gap_averages(opens, closes, window=GAP_WINDOW)
    except (ReturnsError, ZeroDivisionError) as e:
        logger.debug(f"Gap risk unavailable: {e}")
        return None

    pctl = percentile_rank(avg_gap, history)
    level = level_from_percentile(pctl, 80, 60)

    if level == Level.LOW:
        explanation = "Overnight gaps between sessions are within normal range."
    else:
        explanation = f"Average overnight gap at {format_percentile(pctl)} percentile, larger than typical."

    return IndicatorResult(
        value=format_percent(avg_gap * 100, 2),
        context=f"20D avg gap ({format_percentile(pctl)} pctl)",
        level=level,
        explanation=explanation,
        detail=(
            "Average absolute overnight gap (open vs prior close) over 20 sessions. "
            "Larger gaps = more overnight risk. Not financial advice."
        ),
        percentile=pctl,
        raw_value=avg_gap * 100,
    )


def compute_distribution_days(closes: Sequence[float], volumes: Sequence[float]) -> Optional[IndicatorResult]:
    """
    Distribution Days - down closes on above-average volume in the last 20
    sessions: 6+ HIGH, 4+ ELEVATED.

    Needs valid (non-zero) volumes across the last 21 sessions.
    """
    if len(closes) < MIN_SESSIONS or len(volumes) < MIN_SESSIONS:
        _insufficient("Distribution days", min(len(closes), len(volumes)), MIN_SESSIONS)
        return None

    try:
        dist_days = distribution_day_count(closes, volumes, window=DISTRIBUTION_WINDOW)
    except ReturnsError as e:
        logger.debug(f"Distribution days unavailable: {e}")
        return None

    if dist_days >= 6:
        level = Level.HIGH
    elif dist_days >= 4:
        level = Level.ELEVATED
    else:
        level = Level.LOW

    if level == Level.LOW:
        explanation = f"{pluralize(dist_days, 'distribution day')}, low institutional selling pressure."
    else:
        explanation = (
            f"{dist_days} high-volume down days in 20 sessions. "
            "Clusters have historically preceded increased volatility."
        )

    return IndicatorResult(
        value=f"{dist_days}",
        context="down + high-volume days in last 20",
        level=level,
        explanation=explanation,
        detail=(
            "Distribution day = price decline on above-average volume. Clusters of distribution "
            "days have historically preceded increased volatility. This is contextual, not "
            "predictive. Not financial advice."
        ),
        raw_value=float(dist_days),
    )
