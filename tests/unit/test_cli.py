"""Tests for CLI module."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from volley_model.cli import app
from volley_model.config import Settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_settings(test_settings: Settings) -> Settings:
    """Keep CLI log files inside the test's temporary directory."""
    return test_settings


class TestMainApp:
    """Tests for main CLI app."""

    def test_help_shows_all_commands(self) -> None:
        """Help should list every command."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("seasons", "vectors", "profile", "similar"):
            assert command in result.stdout

    def test_version_flag(self) -> None:
        """--version should show version and exit."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_short_version_flag(self) -> None:
        """-v should show version and exit."""
        result = runner.invoke(app, ["-v"])

        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_verbose_flag(self, sample_players_file: Path) -> None:
        """-V should enable verbose mode."""
        result = runner.invoke(app, ["-V", "seasons", str(sample_players_file)])

        assert result.exit_code == 0


class TestSeasonsCommand:
    """Tests for seasons command."""

    def test_lists_seasons(self, sample_players_file: Path) -> None:
        """Seasons are listed for the export."""
        result = runner.invoke(app, ["seasons", str(sample_players_file)])

        assert result.exit_code == 0
        assert "6 players" in result.stdout
        assert result.stdout.index("4") < result.stdout.rindex("3")

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing export exits with an error."""
        result = runner.invoke(app, ["seasons", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """A non UTF-8 export exits with an error instead of a traceback."""
        path = tmp_path / "latin.json"
        path.write_bytes(b'[{"id": 1, "name": "\xff\xfe"}]')

        result = runner.invoke(app, ["seasons", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert not isinstance(result.exception, UnicodeDecodeError)


class TestVectorsCommand:
    """Tests for vectors command."""

    def test_table_output(self, sample_players_file: Path) -> None:
        """Vectors print as a table."""
        result = runner.invoke(
            app, ["vectors", str(sample_players_file), "--season", "4", "--min-sets", "5"]
        )

        assert result.exit_code == 0
        assert "Hana" in result.stdout

    def test_csv_output(self, sample_players_file: Path, tmp_path: Path) -> None:
        """--output writes one CSV row per qualifying player."""
        output = tmp_path / "out" / "vectors.csv"

        result = runner.invoke(
            app,
            [
                "vectors", str(sample_players_file),
                "-s", "4", "-m", "5", "--scheme", "v1", "-o", str(output),
            ],
        )

        assert result.exit_code == 0
        frame = pd.read_csv(output)
        assert len(frame) == 4
        assert "z_plus_minus_per_set" in frame.columns

    def test_unknown_scheme(self, sample_players_file: Path) -> None:
        """Unknown schemes exit with an error."""
        result = runner.invoke(
            app, ["vectors", str(sample_players_file), "-s", "4", "--scheme", "v9"]
        )

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_nobody_qualifies(self, sample_players_file: Path) -> None:
        """An unreachable threshold is reported, not an error."""
        result = runner.invoke(
            app, ["vectors", str(sample_players_file), "-s", "4", "-m", "100"]
        )

        assert result.exit_code == 0
        assert "No players" in result.stdout


class TestProfileCommand:
    """Tests for profile command."""

    def test_table_output(self, sample_players_file: Path) -> None:
        """Profiles print axes and archetypes."""
        result = runner.invoke(app, ["profile", str(sample_players_file), "-s", "4"])

        assert result.exit_code == 0
        assert "Architect" in result.stdout
        assert "The Wall" in result.stdout

    def test_json_output(self, sample_players_file: Path, tmp_path: Path) -> None:
        """--output writes the scatter payload."""
        output = tmp_path / "profile.json"

        result = runner.invoke(
            app, ["profile", str(sample_players_file), "-s", "4", "-o", str(output)]
        )

        assert result.exit_code == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert len(payload["points"]) == 4
        assert payload["points"][0]["archetype_name"] == "Architect"

    def test_empty_season(self, sample_players_file: Path) -> None:
        """A season with no qualifying players is reported."""
        result = runner.invoke(app, ["profile", str(sample_players_file), "-s", "12"])

        assert result.exit_code == 0
        assert "No players" in result.stdout


class TestSimilarCommand:
    """Tests for similar command."""

    def test_lists_neighbors(self, sample_players_file: Path) -> None:
        """Neighbors are ranked and the least similar player is shown."""
        result = runner.invoke(
            app, ["similar", str(sample_players_file), "1", "-s", "4", "--top", "2"]
        )

        assert result.exit_code == 0
        assert "Least similar" in result.stdout
        assert "Sam" in result.stdout

    def test_unqualified_player(self, sample_players_file: Path) -> None:
        """Players outside the population exit with an error."""
        result = runner.invoke(app, ["similar", str(sample_players_file), "4", "-s", "4"])

        assert result.exit_code == 1
        assert "did not qualify" in result.stdout
