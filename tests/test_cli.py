"""Tests for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bodycomp.cli import app

runner = CliRunner()


@pytest.fixture
def config_args(tmp_path: Path) -> list[str]:
    """Point the CLI at a config file that does not exist (defaults)."""
    return ["--config", str(tmp_path / "config.yaml")]


class TestMainCommands:
    """Tests for top-level help and argument checks."""

    def test_help(self):
        """Test that --help works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "estimate" in result.output
        assert "score" in result.output

    def test_estimate_requires_file(self):
        result = runner.invoke(app, ["estimate"])
        assert result.exit_code != 0

    def test_missing_file(self, config_args, tmp_path: Path):
        result = runner.invoke(
            app, [*config_args, "estimate", str(tmp_path / "none.csv"), "--json"]
        )
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["success"] is False


class TestEstimateCommands:
    """Tests for estimate and trend."""

    def test_estimate_json(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app, [*config_args, "estimate", str(samples_csv), "--date", "2025-03-06", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        estimate = data["data"]["estimate"]
        assert estimate["value"] == pytest.approx(84.35)
        assert estimate["is_interpolated"] is True
        assert estimate["confidence"] == "high"

    def test_estimate_body_fat(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [*config_args, "estimate", str(samples_csv), "--date", "2025-03-11", "--metric", "body_fat"],
        )
        assert result.exit_code == 0
        assert "19.0%" in result.output

    def test_invalid_metric(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app, [*config_args, "estimate", str(samples_csv), "--metric", "height"]
        )
        assert result.exit_code == 1

    def test_invalid_date(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app, [*config_args, "estimate", str(samples_csv), "--date", "03/06/2025"]
        )
        assert result.exit_code == 1

    def test_trend_json(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app, [*config_args, "trend", str(samples_csv), "--date", "2025-03-15", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["raw"]["value"] == pytest.approx(83.5)
        assert data["trend"]["value"] > data["raw"]["value"]


class TestFFMICommand:
    """Tests for the ffmi command."""

    def test_metric_input(self):
        result = runner.invoke(
            app, ["ffmi", "--weight", "90", "--body-fat", "12", "--height", "180", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["ffmi"] == pytest.approx(24.44)
        assert data["status"] == "Advanced"

    def test_imperial_input(self):
        result = runner.invoke(
            app,
            [
                "ffmi", "--weight", "198.4", "--weight-unit", "lbs",
                "--body-fat", "12", "--height", "70.87", "--height-unit", "in",
            ],
        )
        assert result.exit_code == 0
        assert "FFMI" in result.output

    def test_bad_unit(self):
        result = runner.invoke(
            app, ["ffmi", "--weight", "90", "--body-fat", "12", "--height", "180", "--height-unit", "ft"]
        )
        assert result.exit_code == 1


class TestScoreCommand:
    """Tests for the score command."""

    def test_score_json(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [
                *config_args, "score", str(samples_csv),
                "--sex", "male", "--birth-year", "1990", "--height", "180",
                "--date", "2025-03-15", "--json",
            ],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert 0 <= data["score"] <= 100
        assert data["target_body_fat"]["label"] == "Lean"
        assert data["warnings"] == []

    def test_score_defaults_to_latest_complete_sample(self, config_args, samples_csv: Path):
        """Without --date, the last day with both weight and body fat is scored."""
        result = runner.invoke(
            app,
            [
                *config_args, "score", str(samples_csv),
                "--sex", "male", "--birth-year", "1990", "--height", "180", "--json",
            ],
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["date"] == "2025-03-15"

    def test_score_panel(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [
                *config_args, "score", str(samples_csv),
                "--sex", "female", "--birth-year", "1985", "--height", "168",
                "--date", "2025-03-15", "--trend",
            ],
        )
        assert result.exit_code == 0
        assert "Body Score" in result.output

    def test_score_without_body_fat(self, config_args, tmp_path: Path):
        path = tmp_path / "weights.csv"
        path.write_text("date,weight_kg\n2025-01-01,80.0\n")
        result = runner.invoke(
            app,
            [
                *config_args, "score", str(path),
                "--sex", "male", "--birth-year", "1990", "--height", "180",
                "--date", "2025-01-01", "--json",
            ],
        )
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["success"] is False

    def test_invalid_sex(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [*config_args, "score", str(samples_csv), "--sex", "x", "--birth-year", "1990", "--height", "180"],
        )
        assert result.exit_code == 1


class TestSeriesCommand:
    """Tests for the series command."""

    def test_series_json(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [
                *config_args, "series", str(samples_csv),
                "--metric", "lean_mass", "--start", "2025-03-01", "--end", "2025-03-15", "--json",
            ],
        )
        assert result.exit_code == 0
        points = json.loads(result.output)["data"]["points"]
        assert len(points) == 15
        assert points[0]["value"] == pytest.approx(68.0)

    def test_series_table(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [
                *config_args, "series", str(samples_csv),
                "--start", "2025-03-01", "--end", "2025-03-05",
            ],
        )
        assert result.exit_code == 0
        assert "2025-03-01" in result.output

    def test_ffmi_series_needs_height(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [
                *config_args, "series", str(samples_csv),
                "--metric", "ffmi", "--start", "2025-03-01", "--end", "2025-03-05",
            ],
        )
        assert result.exit_code == 1

    def test_end_before_start(self, config_args, samples_csv: Path):
        result = runner.invoke(
            app,
            [
                *config_args, "series", str(samples_csv),
                "--start", "2025-03-05", "--end", "2025-03-01",
            ],
        )
        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_config_help(self):
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0

    def test_init_then_show(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        result = runner.invoke(app, ["config", "init", "--path", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(app, ["--config", str(path), "config", "show", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["interpolation"]["high_confidence_days"] == 7

    def test_init_refuses_overwrite(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        result = runner.invoke(app, ["config", "init", "--path", str(path)])
        assert result.exit_code == 1

    def test_custom_config_changes_confidence(self, tmp_path: Path, samples_csv: Path):
        path = tmp_path / "config.yaml"
        path.write_text("interpolation:\n  high_confidence_days: 2\n")
        result = runner.invoke(
            app,
            ["--config", str(path), "estimate", str(samples_csv), "--date", "2025-03-06", "--json"],
        )
        assert json.loads(result.output)["data"]["estimate"]["confidence"] == "medium"
