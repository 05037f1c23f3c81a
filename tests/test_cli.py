"""
CLI tests - run cli.py against local CSV files, no network.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import cli
from ingestion.price_history import PriceHistoryError
from reports.render_panel import DISCLAIMER
from tests.factories import make_series, flat_closes, rising_closes, crash_run_closes, price_frame

PROJECT_ROOT = Path(__file__).parent.parent


def _write_csv(tmp_path, closes, name='prices.csv'):
    path = tmp_path / name
    price_frame(make_series(closes)).to_csv(path, index=False)
    return path


class TestCLIInProcess:
    """Tests for cli.main with captured output."""

    def test_summary_from_csv(self, tmp_path, capsys):
        path = _write_csv(tmp_path, flat_closes(400))

        code = cli.main(['test', '--csv', str(path)])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("⚠️ ELEVATED RISK CONTEXT · TEST")
        assert "Risk Temperature: Low · 17/100" in out
        assert out.rstrip().endswith(DISCLAIMER)

    def test_full_from_csv(self, tmp_path, capsys):
        path = _write_csv(tmp_path, crash_run_closes())

        code = cli.main(['TEST', '--csv', str(path), '--format', 'full'])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("🔥 HIGH RISK CONTEXT")
        assert "Crash Cluster Risk [HIGH]" in out

    def test_json_from_csv(self, tmp_path, capsys):
        path = _write_csv(tmp_path, flat_closes(260))

        code = cli.main(['TEST', '--csv', str(path), '--format', 'json'])

        payload = json.loads(capsys.readouterr().out)
        assert code == 0
        assert payload['session_count'] == 260
        assert payload['ticker'] == 'TEST'

    def test_short_history_is_not_an_error(self, tmp_path, capsys):
        path = _write_csv(tmp_path, flat_closes(50))

        code = cli.main(['TEST', '--csv', str(path)])

        assert code == 0
        assert "Not enough history" in capsys.readouterr().out

    def test_short_history_json_stays_parseable(self, tmp_path, capsys):
        path = _write_csv(tmp_path, flat_closes(50))

        code = cli.main(['TEST', '--csv', str(path), '--format', 'json'])

        captured = capsys.readouterr()
        assert code == 0
        assert json.loads(captured.out) is None
        assert "Not enough history" in captured.err

    def test_unparseable_csv_date(self, tmp_path, capsys):
        frame = price_frame(make_series(rising_closes(260)))
        frame.loc[5, 'date'] = 'not-a-date'
        path = tmp_path / 'prices.csv'
        frame.to_csv(path, index=False)

        code = cli.main(['TEST', '--csv', str(path), '--quiet'])

        assert code == 1
        assert "❌ TEST: Unparseable date column" in capsys.readouterr().err

    def test_missing_csv(self, tmp_path, capsys):
        code = cli.main(['TEST', '--csv', str(tmp_path / 'nope.csv')])

        assert code == 1
        assert "CSV not found" in capsys.readouterr().err

    def test_invalid_csv(self, tmp_path, capsys):
        path = tmp_path / 'bad.csv'
        path.write_text("date,close\n2024-01-15,100\n2024-01-15,101\n")

        code = cli.main(['TEST', '--csv', str(path)])

        assert code == 1
        assert "strictly increasing" in capsys.readouterr().err

    def test_fetch_path_uses_loader(self, capsys):
        series = make_series(flat_closes(300), ticker='SPY')

        with patch('cli.load_price_series', return_value=series) as mock_load:
            code = cli.main(['spy', '--years', '3', '--quiet'])

        assert code == 0
        assert mock_load.call_args.args == ('SPY', 3)
        assert "SPY" in capsys.readouterr().out

    def test_loader_error(self, capsys):
        with patch('cli.load_price_series', side_effect=PriceHistoryError("No price data returned for ZZZZ")):
            code = cli.main(['ZZZZ', '--quiet'])

        assert code == 1
        assert "No price data returned for ZZZZ" in capsys.readouterr().err


class TestCLISubprocess:
    """Runs the script the way a user would."""

    def test_script_json(self, tmp_path):
        path = _write_csv(tmp_path, flat_closes(400))

        result = subprocess.run(
            [sys.executable, str(PROJECT_ROOT / 'cli.py'), 'TEST', '--csv', str(path), '--format', 'json'],
            capture_output=True,
            text=True,
            encoding='utf-8',
            cwd=tmp_path,
            env={**os.environ, 'PYTHONIOENCODING': 'utf-8'},
            timeout=120
        )

        assert result.returncode == 0, result.stderr
        payload = json.loads(result.stdout)
        assert payload['severity'] == 'elevated'
        assert len(payload['indicators']) == 10

    def test_script_bad_format(self, tmp_path):
        result = subprocess.run(
            [sys.executable, str(PROJECT_ROOT / 'cli.py'), 'TEST', '--format', 'xml'],
            capture_output=True,
            text=True,
            cwd=tmp_path,
            timeout=120
        )

        assert result.returncode == 2
        assert "invalid choice" in result.stderr
