"""
Tests for provider-row and DataFrame normalizers.
"""

import pytest
import pandas as pd
from datetime import date

from ingestion.transforms.normalizers import (
    normalize_prices,
    rows_to_price_series,
    frame_to_price_series
)
from ingestion.transforms.validators import ValidationError


class TestNormalizePrices:
    """Tests for yfinance rows -> canonical rows."""

    def test_basic_mapping(self):
        raw = [{
            'Date': '2024-01-15',
            'Open': 185.25,
            'High': 186.80,
            'Low': 184.50,
            'Close': 185.92,
            'Adj Close': 185.75,
            'Volume': 65284300,
        }]

        rows = normalize_prices(raw)

        assert rows == [{
            'date': date(2024, 1, 15),
            'open': 185.25,
            'high': 186.80,
            'low': 184.50,
            'close': 185.92,
            'volume': 65284300,
        }]

    def test_empty(self):
        assert normalize_prices([]) == []

    def test_drops_rows_without_close(self):
        raw = [
            {'Date': '2024-01-15', 'Close': 100.0},
            {'Date': '2024-01-16', 'Open': 101.0},
        ]

        rows = normalize_prices(raw)

        assert len(rows) == 1
        assert rows[0]['date'] == date(2024, 1, 15)

    def test_missing_fields_default(self):
        rows = normalize_prices([{'Date': '2024-01-15', 'Close': 100.0}])

        assert rows[0]['open'] == 0.0
        assert rows[0]['volume'] == 0
        assert rows[0]['high'] == 100.0
        assert rows[0]['low'] == 100.0

    def test_dedupes_and_sorts(self):
        """Later rows for a date win; output is chronological."""
        raw = [
            {'Date': '2024-01-16', 'Close': 102.0},
            {'Date': '2024-01-15', 'Close': 100.0},
            {'Date': '2024-01-16', 'Close': 103.0},
        ]

        rows = normalize_prices(raw)

        assert [r['date'] for r in rows] == [date(2024, 1, 15), date(2024, 1, 16)]
        assert rows[1]['close'] == 103.0

    def test_drops_rows_failing_validation(self):
        raw = [
            {'Date': '2024-01-15', 'Close': 100.0},
            {'Date': '2024-01-16', 'Close': float('nan')},
            {'Date': '2024-01-17', 'Close': 102.0, 'Low': -1.0},
            {'Date': 'not-a-date', 'Close': 103.0},
            {'Date': '2024-01-18', 'Close': 'n/a'},
            {'Date': '2024-01-19', 'Close': 104.0},
        ]

        rows = normalize_prices(raw)

        assert [r['date'] for r in rows] == [date(2024, 1, 15), date(2024, 1, 19)]

    def test_nan_open_and_volume_default(self):
        rows = normalize_prices([{
            'Date': '2024-01-15',
            'Open': float('nan'),
            'Close': 100.0,
            'Volume': float('nan'),
        }])

        assert rows[0]['open'] == 0.0
        assert rows[0]['volume'] == 0

    def test_rows_to_price_series(self):
        rows = normalize_prices([
            {'Date': '2024-01-15', 'Open': 99.0, 'Close': 100.0, 'Volume': 10},
            {'Date': '2024-01-16', 'Open': 100.5, 'Close': 101.0, 'Volume': 20},
        ])

        series = rows_to_price_series(rows, ticker='AAPL')

        assert series.closes == (100.0, 101.0)
        assert series.opens == (99.0, 100.5)
        assert series.volumes == (10, 20)
        assert series.ticker == 'AAPL'
        assert series.last_date == date(2024, 1, 16)


class TestFrameToPriceSeries:
    """Tests for DataFrame -> PriceSeries."""

    def test_case_insensitive_columns(self):
        df = pd.DataFrame({
            'Date': ['2024-01-16', '2024-01-15'],
            'Open': [100.5, 99.0],
            'High': [101.5, 100.5],
            'Low': [99.5, 98.5],
            'Close': [101.0, 100.0],
            'Volume': [20, 10],
        })

        series = frame_to_price_series(df)

        assert series.dates == (date(2024, 1, 15), date(2024, 1, 16))
        assert series.closes == (100.0, 101.0)
        assert series.opens == (99.0, 100.5)

    def test_datetime_index(self):
        df = pd.DataFrame(
            {'Close': [100.0, 101.0], 'Open': [99.0, 100.0]},
            index=pd.DatetimeIndex(['2024-01-15', '2024-01-16'], name='Date')
        )

        series = frame_to_price_series(df, ticker='SPY')

        assert series.dates == (date(2024, 1, 15), date(2024, 1, 16))
        assert series.ticker == 'SPY'

    def test_missing_open_and_volume_become_zero(self):
        df = pd.DataFrame({'date': ['2024-01-15', '2024-01-16'], 'close': [100.0, 101.0]})

        series = frame_to_price_series(df)

        assert series.opens == (0.0, 0.0)
        assert series.volumes == (0.0, 0.0)
        assert series.highs == series.closes
        assert series.lows == series.closes

    def test_drops_missing_close(self):
        df = pd.DataFrame({
            'date': ['2024-01-15', '2024-01-16', '2024-01-17'],
            'close': [100.0, None, 102.0],
        })

        series = frame_to_price_series(df)

        assert len(series) == 2
        assert series.closes == (100.0, 102.0)

    def test_multiindex_columns(self):
        columns = pd.MultiIndex.from_tuples([('Close', 'AAPL'), ('Open', 'AAPL')])
        df = pd.DataFrame(
            [[100.0, 99.0], [101.0, 100.0]],
            columns=columns,
            index=pd.DatetimeIndex(['2024-01-15', '2024-01-16'], name='Date')
        )

        series = frame_to_price_series(df)

        assert series.closes == (100.0, 101.0)

    def test_no_close_column(self):
        df = pd.DataFrame({'date': ['2024-01-15'], 'open': [100.0]})

        with pytest.raises(ValidationError, match="close column"):
            frame_to_price_series(df)

    def test_unparseable_date(self):
        df = pd.DataFrame({
            'date': ['2024-01-15', 'not-a-date', '2024-01-17'],
            'close': [100.0, 101.0, 102.0],
        })

        with pytest.raises(ValidationError, match="Unparseable date column"):
            frame_to_price_series(df)

    def test_no_date_information(self):
        df = pd.DataFrame({'close': [100.0, 101.0]})

        with pytest.raises(ValidationError, match="date column"):
            frame_to_price_series(df)
