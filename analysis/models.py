"""
Data model for the risk panel.
PriceSeries goes in, one IndicatorResult per indicator comes out, Panel collects them.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Any, Iterator, List, Optional, Sequence, Tuple


class Level(str, Enum):
    """Ordinal severity of a single indicator."""
    LOW = "low"
    ELEVATED = "elevated"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {Level.LOW: 0, Level.ELEVATED: 1, Level.HIGH: 2}


class PanelSeverity(str, Enum):
    """Banner classification of the whole panel."""
    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH_RISK = "high-risk"


# Logical name -> display title, in panel order
INDICATOR_TITLES = {
    'temperature': 'Risk Temperature',
    'trend': 'Distance to Trend',
    'trendBreak': 'Trend Break',
    'volatility': 'Realized Volatility',
    'euphoria': 'Euphoria Meter',
    'crash': 'Crash Cluster Risk',
    'drawdown': 'Drawdown Pressure',
    'correction': 'Correction Clocks',
    'gap': 'Overnight Gap Risk',
    'distribution': 'Distribution Days',
}

PANEL_ORDER = tuple(INDICATOR_TITLES)


@dataclass(frozen=True)
class PriceSeries:
    """
    Daily OHLCV history for one instrument, oldest session first.

    Sequences are frozen into tuples so a series cannot change while
    indicators are being computed from it.
    """
    closes: Sequence[float]
    opens: Sequence[float]
    highs: Sequence[float]
    lows: Sequence[float]
    volumes: Sequence[float]
    dates: Sequence[date]
    ticker: Optional[str] = None

    def __post_init__(self):
        for name in ('closes', 'opens', 'highs', 'lows', 'volumes', 'dates'):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def __len__(self) -> int:
        return len(self.closes)

    @property
    def last_date(self) -> Optional[date]:
        return self.dates[-1] if self.dates else None


@dataclass(frozen=True)
class IndicatorResult:
    """
    Output of one indicator.

    Attributes:
        value: Short headline (percentage, count or named state)
        context: Secondary descriptive line
        level: Severity used for colouring and banner counts
        explanation: One sentence justifying the level
        detail: Longer methodology note
        percentile: 0-100 rank that produced the level, when applicable
        raw_value: Unformatted number behind value, when one exists
    """
    value: str
    context: str
    level: Level
    explanation: str
    detail: Optional[str] = None
    percentile: Optional[float] = None
    raw_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'value': self.value,
            'context': self.context,
            'level': self.level.value,
            'explanation': self.explanation,
        }
        if self.detail is not None:
            result['detail'] = self.detail
        if self.percentile is not None:
            result['percentile'] = self.percentile
        return result


@dataclass(frozen=True)
class Panel:
    """Ordered indicator results plus the banner severity."""
    indicators: Dict[str, IndicatorResult]
    severity: PanelSeverity
    session_count: int
    as_of: Optional[date] = None
    ticker: Optional[str] = None

    def __len__(self) -> int:
        return len(self.indicators)

    def __iter__(self) -> Iterator[str]:
        return iter(self.indicators)

    def __contains__(self, name: object) -> bool:
        return name in self.indicators

    def __getitem__(self, name: str) -> IndicatorResult:
        return self.indicators[name]

    def get(self, name: str) -> Optional[IndicatorResult]:
        return self.indicators.get(name)

    def levels(self) -> List[Level]:
        return [result.level for result in self.indicators.values()]

    def flagged(self, minimum: Level = Level.ELEVATED) -> List[str]:
        """Names of indicators at or above a level, in panel order."""
        return [name for name, result in self.indicators.items() if result.level.rank >= minimum.rank]

    def cards(self) -> List[Tuple[str, str, IndicatorResult]]:
        """(name, title, result) for every indicator, in panel order."""
        return [(name, INDICATOR_TITLES[name], result) for name, result in self.indicators.items()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ticker': self.ticker,
            'as_of': self.as_of.isoformat() if self.as_of else None,
            'session_count': self.session_count,
            'severity': self.severity.value,
            'indicators': [
                {'id': name, 'title': INDICATOR_TITLES[name], **result.to_dict()}
                for name, result in self.indicators.items()
            ],
        }
