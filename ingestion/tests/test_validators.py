"""
Tests for price row and price series validators.
"""

import pytest
from datetime import date

from analysis.models import PriceSeries
from ingestion.transforms.validators import (
    validate_price_row,
    validate_price_series,
    ValidationError
)
from tests.factories import make_series, flat_closes


def _row(**overrides):
    row = {
        'date': date(2024, 1, 15),
        'open': 185.25,
        'high': 186.80,
        'low': 184.50,
        'close': 185.92,
        'volume': 65284300,
    }
    row.update(overrides)
    return row


class TestValidatePriceRow:
    """Tests for canonical price row validation."""

    def test_valid_row(self):
        validate_price_row(_row())

    def test_zero_open_and_volume_allowed(self):
        validate_price_row(_row(open=0.0, volume=0))

    def test_missing_keys(self):
        row = _row()
        del row['volume']

        with pytest.raises(ValidationError, match="Missing required keys"):
            validate_price_row(row)

    def test_date_type(self):
        with pytest.raises(ValidationError, match="date must be date"):
            validate_price_row(_row(date='2024-01-15'))

    def test_non_numeric(self):
        with pytest.raises(ValidationError, match="close must be numeric"):
            validate_price_row(_row(close='185.92'))

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="volume must be numeric"):
            validate_price_row(_row(volume=True))

    def test_non_finite(self):
        with pytest.raises(ValidationError, match="high must be finite"):
            validate_price_row(_row(high=float('inf')))

    def test_negative(self):
        with pytest.raises(ValidationError, match="low must be non-negative"):
            validate_price_row(_row(low=-1.0))

    def test_zero_close(self):
        with pytest.raises(ValidationError, match="close must be positive"):
            validate_price_row(_row(close=0.0))


class TestValidatePriceSeries:
    """Tests for whole-series validation."""

    def test_valid_series(self):
        validate_price_series(make_series(flat_closes(30)))

    def test_length_mismatch(self):
        good = make_series(flat_closes(30))
        bad = PriceSeries(
            closes=good.closes,
            opens=good.opens[:-1],
            highs=good.highs,
            lows=good.lows,
            volumes=good.volumes,
            dates=good.dates,
        )

        with pytest.raises(ValidationError, match="lengths must match"):
            validate_price_series(bad)

    def test_dates_not_increasing(self):
        good = make_series(flat_closes(5))
        dates = list(good.dates)
        dates[3] = dates[2]
        bad = PriceSeries(good.closes, good.opens, good.highs, good.lows, good.volumes, dates)

        with pytest.raises(ValidationError, match="strictly increasing"):
            validate_price_series(bad)

    def test_non_positive_close(self):
        closes = flat_closes(10)
        closes[4] = 0.0

        with pytest.raises(ValidationError, match="close must be positive and finite"):
            validate_price_series(make_series(closes))

    def test_nan_close(self):
        closes = flat_closes(10)
        closes[4] = float('nan')

        with pytest.raises(ValidationError, match="close must be positive and finite"):
            validate_price_series(make_series(closes))

    def test_negative_volume(self):
        volumes = [1000.0] * 10
        volumes[2] = -1.0

        with pytest.raises(ValidationError, match="volume must be non-negative"):
            validate_price_series(make_series(flat_closes(10), volumes=volumes))

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)
