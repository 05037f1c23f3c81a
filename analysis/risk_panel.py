"""
Risk panel assembler - composes every indicator into one Panel.
Pure function over a PriceSeries; holds no cache and no state.
"""

import logging
import pandas as pd
from typing import Dict, Iterable, Optional

from analysis.models import IndicatorResult, Level, Panel, PanelSeverity, PriceSeries, PANEL_ORDER
from analysis.risk_indicators import (
    MIN_SESSIONS,
    compute_correction_clock,
    compute_trend_distance,
    compute_trend_break,
    compute_volatility,
    compute_crash_cluster,
    compute_drawdown_pressure,
    compute_gap_risk,
    compute_distribution_days
)
from analysis.composites import compute_euphoria_meter, compute_risk_temperature
from ingestion.transforms.normalizers import frame_to_price_series
from ingestion.transforms.validators import validate_price_series

logger = logging.getLogger(__name__)


def classify_panel_severity(levels: Iterable[Level]) -> PanelSeverity:
    """
    Banner severity from the levels of every result in the panel.

    - HIGH_RISK: 2+ high, or 1 high together with 2+ elevated
    - ELEVATED: at least one elevated or high
    - NORMAL: otherwise
    """
    levels = list(levels)
    high_count = sum(1 for level in levels if level == Level.HIGH)
    elevated_count = sum(1 for level in levels if level == Level.ELEVATED)

    if high_count >= 2 or (high_count >= 1 and elevated_count >= 2):
        return PanelSeverity.HIGH_RISK
    elif elevated_count >= 1 or high_count >= 1:
        return PanelSeverity.ELEVATED
    else:
        return PanelSeverity.NORMAL


def compute_indicators(series: PriceSeries) -> Dict[str, Optional[IndicatorResult]]:
    """
    Run every indicator and both composites over a series.

    Indicators gate themselves, so unavailable ones map to None.

    Returns:
        Dictionary keyed by logical name in panel order
    """
    closes = series.closes

    trend = compute_trend_distance(closes)
    trend_break = compute_trend_break(closes)
    volatility = compute_volatility(closes)
    crash = compute_crash_cluster(closes)
    drawdown = compute_drawdown_pressure(closes)
    correction = compute_correction_clock(closes)
    gap = compute_gap_risk(closes, series.opens)
    distribution = compute_distribution_days(closes, series.volumes)

    euphoria = compute_euphoria_meter(
        closes,
        vol_pctl=volatility.percentile if volatility else None,
        trend_pctl=trend.percentile if trend else None
    )

    temperature = compute_risk_temperature(
        vol_pctl=volatility.percentile if volatility else None,
        trend_pctl=trend.percentile if trend else None,
        euphoria=euphoria.percentile if euphoria else None,
        crash_pctl=crash.percentile if crash else None,
        # Unrounded, matching what Drawdown Pressure levels on (not the 1-decimal display value)
        dd_pct=drawdown.raw_value if drawdown else None,
        trend_level=trend_break.level if trend_break else None
    )

    results = {
        'temperature': temperature,
        'trend': trend,
        'trendBreak': trend_break,
        'volatility': volatility,
        'euphoria': euphoria,
        'crash': crash,
        'drawdown': drawdown,
        'correction': correction,
        'gap': gap,
        'distribution': distribution,
    }
    return {name: results[name] for name in PANEL_ORDER}


def compute_risk_panel(series: PriceSeries) -> Optional[Panel]:
    """
    Build the risk panel for a price series.

    Args:
        series: Validated daily OHLCV history, oldest first

    Returns:
        Panel holding only the indicators that produced a reading, or None
        when the series has fewer than 200 closes
    """
    if len(series.closes) < MIN_SESSIONS:
        logger.info(f"No risk panel: {len(series.closes)} sessions, need {MIN_SESSIONS}")
        return None

    indicators = {
        name: result
        for name, result in compute_indicators(series).items()
        if result is not None
    }

    severity = classify_panel_severity(result.level for result in indicators.values())

    panel = Panel(
        indicators=indicators,
        severity=severity,
        session_count=len(series),
        as_of=series.last_date,
        ticker=series.ticker,
    )

    logger.info(
        f"Risk panel for {series.ticker or 'series'}: {len(series)} sessions, "
        f"{len(indicators)} indicators, severity {severity.value}, "
        f"flagged {', '.join(panel.flagged()) or 'none'}"
    )

    return panel


def compose_risk_panel(price_df: pd.DataFrame, ticker: Optional[str] = None) -> Optional[Panel]:
    """
    Build the risk panel straight from an OHLCV DataFrame.

    Args:
        price_df: DataFrame with date/open/high/low/close/volume columns
        ticker: Optional label carried onto the panel

    Returns:
        Panel, or None when the history is too short

    Raises:
        ValidationError: If the frame cannot be turned into a valid series
    """
    series = frame_to_price_series(price_df, ticker=ticker)
    validate_price_series(series)
    return compute_risk_panel(series)
