"""Shared pytest fixtures for volley model tests.

This module contains fixtures used across multiple test modules:
- Record factories (stat records and players shaped like the API export)
- Sample league export (a small season 4 population plus one season 3 game)
- Configuration fixtures (test settings)

Example:
    def test_something(sample_players, make_player):
        # sample_players is a list of player dicts with nested stat records
        pass
"""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from volley_model.config import Settings, reset_settings
from volley_model.features.schema import SCHEME_V2, PerSetFeatures

# =============================================================================
# Factories
# =============================================================================


def _stat_record(
    season: int = 4,
    team1: int | None = 3,
    team2: int | None = 1,
    game_id: int = 1,
    **stats: float,
) -> dict[str, Any]:
    game: dict[str, Any] = {"id": game_id, "season": {"seasonNumber": season}}
    if team1 is not None:
        game["team1Score"] = team1
    if team2 is not None:
        game["team2Score"] = team2
    return {"game": game, **stats}


def _player(player_id: int | str, name: str, *records: dict[str, Any]) -> dict[str, Any]:
    return {"id": player_id, "name": name, "stats": list(records)}


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    """Return a factory for stat records with a nested game and season.

    Stat keyword arguments use the export's camelCase names.
    """
    return _stat_record


@pytest.fixture
def make_player() -> Callable[..., dict[str, Any]]:
    """Return a factory for player dicts."""
    return _player


@pytest.fixture
def make_features() -> Callable[..., PerSetFeatures]:
    """Return a factory for v2 per-set features; unspecified keys are 0."""

    def factory(**values: float) -> PerSetFeatures:
        base = dict.fromkeys(SCHEME_V2.keys, 0.0)
        base.update(values)
        return PerSetFeatures(SCHEME_V2, base)

    return factory


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def sample_players() -> list[dict[str, Any]]:
    """Return a small league export.

    Season 4 sets played (3-1 game = 4 sets, 3-2 game = 5 sets):
    - 1 Sam (setter): 8 sets, 7 assists and 1 block per set
    - 2 Hana (hitter): 10 sets, 1 kill and 2.5 attempts per set
    - 3 Dee (libero): 9 sets, 3 digs per set
    - 4 Ray (rookie): 3 sets, plus one season 3 game
    - 5 Bo (blocker): 5 sets, 1.2 blocks and 0.8 block follows per set
    - 6 Ben: no stat records
    """
    return [
        _player(
            1,
            "Sam",
            _stat_record(game_id=1, assists=28, blocks=4),
            _stat_record(game_id=2, assists=28, blocks=4),
        ),
        _player(
            2,
            "Hana",
            _stat_record(
                game_id=1, team1=3, team2=2,
                spikeKills=5, spikeAttempts=12, spikingErrors=2, digs=3,
            ),
            _stat_record(
                game_id=3, team1=2, team2=3,
                spikeKills=5, spikeAttempts=13, spikingErrors=1, digs=2,
                servingErrors=1,
            ),
        ),
        _player(
            3,
            "Dee",
            _stat_record(game_id=1, digs=12, assists=1),
            _stat_record(game_id=3, team1=2, team2=3, digs=15, assists=1, spikeAttempts=1),
        ),
        _player(
            4,
            "Ray",
            _stat_record(game_id=4, team1=2, team2=1, spikeKills=1, spikeAttempts=2),
            _stat_record(season=3, game_id=9, team1=3, team2=0, digs=2),
        ),
        _player(
            5,
            "Bo",
            _stat_record(
                game_id=3, team1=3, team2=2,
                blocks=6, blockFollows=4, spikeKills=1, spikeAttempts=3, miscErrors=1,
            ),
        ),
        _player(6, "Ben"),
    ]


@pytest.fixture
def sample_players_file(tmp_path: Path, sample_players: list[dict[str, Any]]) -> Path:
    """Write the sample league export to a JSON file and return its path."""
    path = tmp_path / "players.json"
    path.write_text(json.dumps({"players": sample_players}), encoding="utf-8")
    return path


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def test_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings, None, None]:
    """Provide test settings with temporary directories.

    Automatically resets settings singleton after test.
    """
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    reset_settings()
    from volley_model.config import get_settings

    settings = get_settings()
    settings.ensure_directories()

    yield settings

    reset_settings()
