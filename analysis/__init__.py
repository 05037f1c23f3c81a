"""
Risk Analytics Engine

Derives a descriptive risk panel from one instrument's daily history:
- Statistics kernel (returns, moving averages, percentile rank, RSI)
- Trend, volatility, crash, drawdown, gap and distribution indicators
- Correction clock (10/20/30% correction cycle)
- Euphoria Meter and Risk Temperature composites
"""

__version__ = "0.1.0"
