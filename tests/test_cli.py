"""Tests for cli.py commands."""

import csv
import json

import pytest
from typer.testing import CliRunner

from nightlist.cli import app
from nightlist.config import SETTINGS_ENV_VAR

runner = CliRunner()


@pytest.fixture
def settings_file(tmp_config_dir, sample_config, monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    config_path = tmp_config_dir / "settings.json"
    config_path.write_text(json.dumps(sample_config))
    return config_path


class TestReport:
    """Tests for the report command."""

    def test_prints_hourly_results(self, sample_vesper_csv):
        result = runner.invoke(app, ["report", str(sample_vesper_csv)])

        assert result.exit_code == 0
        assert "Date: 09/08/20" in result.output
        assert "Hour: 20:43" in result.output
        assert "Duration: 17 mins." in result.output
        assert "AMRE:\t1\t(2)" in result.output
        assert "Date: 09/09/20" in result.output
        assert "SWTH:\t1\t(1)" in result.output

    def test_date_window(self, sample_vesper_csv):
        result = runner.invoke(app, ["report", str(sample_vesper_csv), "--date", "2020/09/08"])

        assert result.exit_code == 0
        assert "Hour: 20:43" in result.output

    def test_window_excluding_everything(self, sample_vesper_csv):
        result = runner.invoke(app, ["report", str(sample_vesper_csv), "--date", "2020/10/01"])

        assert result.exit_code == 0
        assert "Date:" not in result.output

    def test_stop_window_drops_morning(self, sample_vesper_csv):
        result = runner.invoke(
            app,
            [
                "report", str(sample_vesper_csv),
                "--start", "2020/09/08 20:00:00",
                "--stop", "2020/09/08 23:00:00",
            ],
        )

        assert result.exit_code == 0
        assert "Date: 09/08/20" in result.output
        assert "09/09/20" not in result.output

    def test_only_start(self, sample_vesper_csv):
        result = runner.invoke(app, ["report", str(sample_vesper_csv), "--start", "2020/09/08 20:00:00"])

        assert result.exit_code == 1
        assert "both a start and an end" in result.output

    def test_stop_before_start(self, sample_vesper_csv):
        result = runner.invoke(
            app,
            [
                "report", str(sample_vesper_csv),
                "--start", "2020/09/08 23:00:00",
                "--stop", "2020/09/08 20:00:00",
            ],
        )

        assert result.exit_code == 1
        assert "cannot precede" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["report", str(tmp_path / "missing.csv")])

        assert result.exit_code == 1
        assert "is not a file" in result.output

    def test_malformed_input_is_fatal(self, write_vesper_csv):
        csv_path = write_vesper_csv(
            ["Fall,2020,tseep,,MSGR,09/08/20,20:43:00,8:xx:00,0:00:37,09/08/20 20:43:37,20:30:00"]
        )

        result = runner.invoke(app, ["report", str(csv_path)])

        assert result.exit_code == 1
        assert "Invalid duration" in result.output
        assert "Date:" not in result.output

    def test_unbucketed_event_is_skipped(self, write_vesper_csv):
        csv_path = write_vesper_csv([
            "Fall,2020,tseep,AMRE,MSGR,09/08/20,20:43:00,8:21:00,0:00:37,09/08/20 20:43:37,20:30:00",
            # Detected after the recording ended
            "Fall,2020,tseep,SWTH,MSGR,09/08/20,20:43:00,8:21:00,10:00:00,09/09/20 06:43:00,06:30:00",
        ])

        result = runner.invoke(app, ["report", str(csv_path)])

        assert result.exit_code == 0
        assert "Warning: skipped event" in result.output
        assert "AMRE:\t1\t(1)" in result.output

    def test_empty_export_name(self, sample_vesper_csv):
        result = runner.invoke(app, ["report", str(sample_vesper_csv), "--export", ""])

        assert result.exit_code == 1
        assert "export file name" in result.output

    def test_export(self, sample_vesper_csv, settings_file, tmp_path):
        export_name = str(tmp_path / "2020-09-08 recorded")

        result = runner.invoke(
            app,
            ["report", str(sample_vesper_csv), "--config", str(settings_file), "--export", export_name],
        )

        assert result.exit_code == 0
        assert "Exported 4 checklist rows" in result.output
        assert "NOWA - is that right?" in result.output
        with open(tmp_path / "2020-09-08 recorded.csv", newline="") as f:
            rows = list(csv.reader(f))
        assert [row[0] for row in rows] == [
            "passerine sp.",
            "American Redstart",
            "Swainson's Thrush",
            "Northern Waterthrush",
        ]

    def test_export_unknown_station(self, sample_vesper_csv, settings_file, tmp_path):
        result = runner.invoke(
            app,
            [
                "report", str(sample_vesper_csv),
                "--config", str(settings_file),
                "--station", "MSGR",
                "--export", str(tmp_path / "out"),
            ],
        )

        assert result.exit_code == 1
        assert "Unknown station 'MSGR'" in result.output
        assert not (tmp_path / "out.csv").exists()


class TestSessions:
    """Tests for the sessions command."""

    def test_lists_sessions(self, sample_vesper_csv):
        result = runner.invoke(app, ["sessions", str(sample_vesper_csv)])

        assert result.exit_code == 0
        assert "09/08/20: 09/08/20 20:43:00 -> 09/09/20 05:04:00 (10 buckets)" in result.output

    def test_no_sessions(self, write_vesper_csv):
        result = runner.invoke(app, ["sessions", str(write_vesper_csv([]))])

        assert result.exit_code == 0
        assert "No recording sessions found" in result.output
