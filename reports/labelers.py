"""
Display lookup tables for indicator levels and panel severity.
Exhaustive over their enums; callers go through level_style() / banner_for().
"""

from typing import Dict, NamedTuple

from analysis.models import Level, PanelSeverity


class LabelerError(Exception):
    """Raised when a value has no display mapping."""
    pass


class LevelStyle(NamedTuple):
    label: str
    color: str
    ansi: str


class Banner(NamedTuple):
    icon: str
    header: str


ANSI_RESET = "\033[0m"

LEVEL_STYLES: Dict[Level, LevelStyle] = {
    Level.LOW: LevelStyle(label="LOW", color="green", ansi="\033[32m"),
    Level.ELEVATED: LevelStyle(label="ELEVATED", color="amber", ansi="\033[33m"),
    Level.HIGH: LevelStyle(label="HIGH", color="red", ansi="\033[31m"),
}

SEVERITY_BANNERS: Dict[PanelSeverity, Banner] = {
    PanelSeverity.NORMAL: Banner(icon="📊", header="RISK DASHBOARD"),
    PanelSeverity.ELEVATED: Banner(icon="⚠️", header="ELEVATED RISK CONTEXT"),
    PanelSeverity.HIGH_RISK: Banner(icon="🔥", header="HIGH RISK CONTEXT"),
}

INDICATOR_ICONS: Dict[str, str] = {
    'temperature': '🌡️',
    'trend': '📊',
    'trendBreak': '⚠️',
    'volatility': '📈',
    'euphoria': '🎢',
    'crash': '💥',
    'drawdown': '📉',
    'correction': '⏰',
    'gap': '🌙',
    'distribution': '📦',
}


def level_style(level: Level) -> LevelStyle:
    """
    Look up the display style for an indicator level.

    Args:
        level: Level enum (or its string value)

    Returns:
        LevelStyle with label, colour name and ANSI escape

    Raises:
        LabelerError: If the value is not a Level
    """
    try:
        return LEVEL_STYLES[Level(level)]
    except ValueError as e:
        raise LabelerError(f"Unknown level: {level!r}") from e


def banner_for(severity: PanelSeverity) -> Banner:
    """
    Look up the panel banner for a severity.

    Raises:
        LabelerError: If the value is not a PanelSeverity
    """
    try:
        return SEVERITY_BANNERS[PanelSeverity(severity)]
    except ValueError as e:
        raise LabelerError(f"Unknown panel severity: {severity!r}") from e


def indicator_icon(name: str) -> str:
    return INDICATOR_ICONS.get(name, '📊')
