#!/usr/bin/env python3
"""
Risk panel CLI - historical risk context for one ticker.
Usage: python cli.py TICKER [--csv PATH] [--years N] [--format summary|full|json] [--quiet]
"""

import sys
import os
import logging
import argparse
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from analysis.risk_panel import compose_risk_panel, compute_risk_panel
from analysis.risk_indicators import MIN_SESSIONS
from ingestion.price_history import (
    PriceHistoryError,
    build_default_cache,
    default_lookback_years,
    load_price_series
)
from ingestion.providers.yfinance_adapter import YFinanceError
from ingestion.transforms.validators import ValidationError
from reports.render_panel import RENDER_FORMATS, render_panel

logger = logging.getLogger(__name__)


def _configure_logging(quiet: bool) -> None:
    level_name = 'ERROR' if quiet else os.getenv('LOG_LEVEL', 'WARNING').upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='risk-panel',
        description='Historical risk context panel for a ticker',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  risk-panel AAPL
  risk-panel SPY --years 20 --format full
  risk-panel MSFT --csv ./data/msft.csv --format json
        """
    )

    parser.add_argument('ticker', help='Stock ticker symbol (e.g., AAPL)')
    parser.add_argument('--csv',
                        help='Read OHLCV history from a local CSV instead of fetching')
    parser.add_argument('--years',
                        type=int,
                        default=None,
                        help='Years of history to fetch (default: RISK_PANEL_LOOKBACK_YEARS or 10)')
    parser.add_argument('--format',
                        choices=list(RENDER_FORMATS),
                        default='summary',
                        help='Output format (default: summary)')
    parser.add_argument('--quiet', '-q',
                        action='store_true',
                        help='Only errors on stderr, no progress lines')
    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    _configure_logging(args.quiet)

    ticker = args.ticker.upper()

    try:
        if args.csv:
            csv_path = Path(args.csv)
            if not csv_path.exists():
                print(f"❌ CSV not found: {csv_path}", file=sys.stderr)
                return 1
            price_df = pd.read_csv(csv_path)
            panel = compose_risk_panel(price_df, ticker=ticker)
        else:
            years = args.years if args.years is not None else default_lookback_years()
            if not args.quiet and args.format != 'json':
                print(f"🔍 Loading {years}y of daily prices for {ticker}", file=sys.stderr)
            series = load_price_series(ticker, years, cache=build_default_cache())
            panel = compute_risk_panel(series)

    except (ValidationError, YFinanceError, PriceHistoryError,
            pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        print(f"❌ {ticker}: {e}", file=sys.stderr)
        return 1

    if panel is None:
        notice = f"ℹ️  Not enough history for a risk panel on {ticker} (need {MIN_SESSIONS} sessions)"
        if args.format == 'json':
            # stdout stays parseable
            print(notice, file=sys.stderr)
            print('null')
        else:
            print(notice)
        return 0

    color = args.format != 'json' and sys.stdout.isatty()
    print(render_panel(panel, args.format, color=color))
    return 0


if __name__ == '__main__':
    sys.exit(main())
