"""
Tests for the risk panel assembler.
Gating, banner severity and the end-to-end scenarios on synthetic series.
"""

import pytest

from analysis.models import IndicatorResult, Level, Panel, PanelSeverity, PANEL_ORDER
from analysis.composites import compute_risk_temperature
from analysis.risk_panel import (
    classify_panel_severity,
    compute_indicators,
    compute_risk_panel,
    compose_risk_panel
)
from ingestion.transforms.validators import ValidationError
from tests.factories import (
    make_series,
    flat_closes,
    rising_closes,
    decline_and_recovery_closes,
    crash_run_closes,
    price_frame
)


class TestPanelSeverity:
    """Tests for banner classification."""

    def test_normal(self):
        assert classify_panel_severity([Level.LOW] * 5) == PanelSeverity.NORMAL
        assert classify_panel_severity([]) == PanelSeverity.NORMAL

    def test_single_elevated(self):
        assert classify_panel_severity([Level.LOW, Level.ELEVATED]) == PanelSeverity.ELEVATED

    def test_single_high(self):
        assert classify_panel_severity([Level.HIGH, Level.LOW]) == PanelSeverity.ELEVATED

    def test_one_high_one_elevated(self):
        assert classify_panel_severity([Level.HIGH, Level.ELEVATED]) == PanelSeverity.ELEVATED

    def test_two_high(self):
        assert classify_panel_severity([Level.HIGH, Level.HIGH]) == PanelSeverity.HIGH_RISK

    def test_one_high_two_elevated(self):
        levels = [Level.HIGH, Level.ELEVATED, Level.ELEVATED, Level.LOW]
        assert classify_panel_severity(levels) == PanelSeverity.HIGH_RISK


class TestPanelFlagged:
    """Tests for picking out indicators by level."""

    def _panel(self):
        def result(level):
            return IndicatorResult(value="1", context="ctx", level=level, explanation="x")

        indicators = {
            'trend': result(Level.LOW),
            'volatility': result(Level.HIGH),
            'crash': result(Level.ELEVATED),
            'gap': result(Level.HIGH),
        }
        return Panel(indicators, PanelSeverity.HIGH_RISK, 300)

    def test_default_is_elevated_and_above(self):
        assert self._panel().flagged() == ['volatility', 'crash', 'gap']

    def test_high_only(self):
        assert self._panel().flagged(Level.HIGH) == ['volatility', 'gap']

    def test_low_includes_everything(self):
        assert self._panel().flagged(Level.LOW) == ['trend', 'volatility', 'crash', 'gap']

    def test_level_rank_order(self):
        assert Level.LOW.rank < Level.ELEVATED.rank < Level.HIGH.rank


class TestGating:
    """Tests for panel-level and per-indicator gating."""

    def test_below_minimum_gives_no_panel(self):
        assert compute_risk_panel(make_series(flat_closes(199))) is None

    def test_exactly_minimum(self):
        """At 200 sessions only indicators needing 200 or fewer appear."""
        panel = compute_risk_panel(make_series(flat_closes(200)))

        assert isinstance(panel, Panel)
        assert list(panel) == ['temperature', 'trendBreak', 'volatility', 'euphoria',
                               'crash', 'gap', 'distribution']
        assert 'trend' not in panel
        assert 'drawdown' not in panel
        assert 'correction' not in panel

    def test_compute_indicators_keeps_order_and_gaps(self):
        indicators = compute_indicators(make_series(flat_closes(260)))

        assert tuple(indicators) == PANEL_ORDER
        assert indicators['trend'] is None
        assert indicators['correction'] is None
        assert indicators['drawdown'] is not None

    def test_missing_opens(self):
        """All-zero opens drop Gap Risk and nothing else."""
        closes = flat_closes(400)
        panel = compute_risk_panel(make_series(closes, opens=[0.0] * 400))

        assert 'gap' not in panel
        assert len(panel) == len(PANEL_ORDER) - 1

    def test_missing_volumes(self):
        closes = flat_closes(400)
        panel = compute_risk_panel(make_series(closes, volumes=[0.0] * 400))

        assert 'distribution' not in panel
        assert 'gap' in panel


class TestScenarios:
    """End-to-end readings on known shapes."""

    def test_flat_series(self):
        panel = compute_risk_panel(make_series(flat_closes(400)))

        assert len(panel) == len(PANEL_ORDER)
        assert panel['trend'].raw_value == pytest.approx(0.0)
        assert panel['volatility'].raw_value == pytest.approx(0.0)
        assert panel['drawdown'].raw_value == pytest.approx(0.0)
        assert panel['trendBreak'].value == "Healthy Uptrend"
        assert panel['correction'].value == "At Peak"

    def test_flat_series_banner(self):
        """Only the correction clock (no correction on record) is elevated."""
        panel = compute_risk_panel(make_series(flat_closes(400)))

        assert panel['temperature'].context == "Low"
        assert panel.levels().count(Level.ELEVATED) == 1
        assert panel['correction'].level == Level.ELEVATED
        assert panel.severity == PanelSeverity.ELEVATED

    def test_decline_and_recovery(self):
        closes = decline_and_recovery_closes()

        panel = compute_risk_panel(make_series(closes))

        assert panel['correction'].value == "At Peak"
        assert "1×20%" in panel['correction'].explanation
        assert panel['correction'].level == Level.LOW

    def test_crash_run(self):
        panel = compute_risk_panel(make_series(crash_run_closes()))

        crash = panel['crash']
        assert crash.value == "30"
        assert crash.percentile == 100.0
        assert crash.level == Level.HIGH

    def test_crash_run_high_risk_banner(self):
        """Thirty straight losses break trend and spike crash counts together."""
        panel = compute_risk_panel(make_series(crash_run_closes()))

        assert panel['trendBreak'].level == Level.HIGH
        assert panel.severity == PanelSeverity.HIGH_RISK

    def test_temperature_uses_sibling_readings(self):
        series = make_series(rising_closes(450))
        panel = compute_risk_panel(series)

        indicators = compute_indicators(series)
        assert panel['temperature'] == indicators['temperature']
        assert panel['euphoria'].context.startswith("RSI 100")

    def test_temperature_takes_unrounded_drawdown(self):
        indicators = compute_indicators(make_series(crash_run_closes(calm=270)))
        drawdown = indicators['drawdown']

        def pctl(name):
            result = indicators[name]
            return result.percentile if result else None

        expected = compute_risk_temperature(
            vol_pctl=pctl('volatility'),
            trend_pctl=pctl('trend'),
            euphoria=pctl('euphoria'),
            crash_pctl=pctl('crash'),
            dd_pct=drawdown.raw_value,
            trend_level=indicators['trendBreak'].level
        )

        assert drawdown.raw_value != round(drawdown.raw_value, 1)
        assert indicators['temperature'] == expected

    def test_panel_metadata(self):
        series = make_series(flat_closes(300), ticker='SPY')

        panel = compute_risk_panel(series)

        assert panel.ticker == 'SPY'
        assert panel.session_count == 300
        assert panel.as_of == series.dates[-1]
        payload = panel.to_dict()
        assert payload['severity'] == panel.severity.value
        assert [item['id'] for item in payload['indicators']] == list(panel)
        assert all('raw_value' not in item for item in payload['indicators'])

    def test_idempotent(self):
        series = make_series(decline_and_recovery_closes())

        assert compute_risk_panel(series) == compute_risk_panel(series)


class TestComposeFromFrame:
    """Tests for the DataFrame entry point."""

    def test_compose_risk_panel(self):
        frame = price_frame(make_series(flat_closes(260)))

        panel = compose_risk_panel(frame, ticker='TEST')

        assert panel.ticker == 'TEST'
        assert 'drawdown' in panel

    def test_compose_risk_panel_short(self):
        frame = price_frame(make_series(flat_closes(50)))

        assert compose_risk_panel(frame) is None

    def test_compose_risk_panel_invalid(self):
        frame = price_frame(make_series(flat_closes(260)))
        frame.loc[10, 'close'] = -5.0

        with pytest.raises(ValidationError, match="close must be positive"):
            compose_risk_panel(frame)
