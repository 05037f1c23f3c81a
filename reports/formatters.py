"""
Display formatters for indicator results.
Deterministic string formatting for percentages, percentiles and spans.
"""

from typing import Optional


MINUS = "−"
TRADING_DAYS_PER_YEAR = 252


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _check_numeric(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"{name} must be numeric, got {type(value)}")


def format_percent(value: Optional[float], decimal_places: int = 1) -> str:
    """
    Format a value already in percent units.

    Args:
        value: Percent value (12.34 = 12.34%)
        decimal_places: Number of decimal places (default: 1)

    Returns:
        Formatted percentage string (e.g., "12.3%")
    """
    if value is None:
        return "Not available"

    _check_numeric(value, "Percent value")
    return f"{value:.{decimal_places}f}%"


def format_signed_percent(value: Optional[float], decimal_places: int = 1) -> str:
    """
    Format a percent value with an explicit sign for non-negative values.

    Examples:
        4.25 -> "+4.2%", -3.0 -> "-3.0%", 0.0 -> "+0.0%"
    """
    if value is None:
        return "Not available"

    _check_numeric(value, "Percent value")
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimal_places}f}%"


def format_decline(value: float, decimal_places: int = 1) -> str:
    """
    Format a decline magnitude with a typographic minus sign.

    Example:
        12.5 -> "−12.5%"
    """
    _check_numeric(value, "Decline value")
    return f"{MINUS}{abs(value):.{decimal_places}f}%"


def format_percentile(percentile: float) -> str:
    """Format a 0-100 rank as an ordinal-style label ("85th")."""
    _check_numeric(percentile, "Percentile")
    return f"{percentile:.0f}th"


def format_years(sessions: int) -> str:
    """Number of years covered by `sessions` trading days, one decimal."""
    return f"{sessions / TRADING_DAYS_PER_YEAR:.1f}"


def pluralize(count: int, word: str) -> str:
    """
    Attach a count to a noun, adding "s" when count != 1.

    Example:
        pluralize(1, "day") -> "1 day", pluralize(3, "day") -> "3 days"
    """
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
