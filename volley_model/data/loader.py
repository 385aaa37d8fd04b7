"""Player export loading.

Reads the JSON export of players with their nested per-game stat records.
Two layouts are accepted: a bare list of players, or an object with a
``players`` list. Each player needs an ``id``; ``name`` and ``stats`` are
optional.

Example:
    >>> from volley_model.data import load_players
    >>> players = load_players("exports/players.json")
    >>> players[0]["stats"][0]["game"]["season"]["seasonNumber"]
    4
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from volley_model.logging import get_logger
from volley_model.types import DataLoadError

logger = get_logger(__name__)


def parse_players(payload: Any, source: str = "<payload>") -> list[dict[str, Any]]:
    """Validate the top-level shape of a decoded export.

    Args:
        payload: Decoded JSON document.
        source: Label used in error messages.

    Returns:
        List of player mappings.

    Raises:
        DataLoadError: If the document is not a player list, or a player
            has no ``id``.
    """
    if isinstance(payload, Mapping):
        if "players" not in payload:
            raise DataLoadError(f"{source}: expected a 'players' key")
        payload = payload["players"]

    if not isinstance(payload, list):
        raise DataLoadError(
            f"{source}: expected a list of players, got {type(payload).__name__}"
        )

    players: list[dict[str, Any]] = []
    for i, player in enumerate(payload):
        if not isinstance(player, Mapping):
            raise DataLoadError(f"{source}: player {i} is not an object")
        if player.get("id") is None:
            raise DataLoadError(f"{source}: player {i} has no id")
        stats = player.get("stats")
        if stats is not None and not isinstance(stats, list):
            raise DataLoadError(f"{source}: player {player['id']} stats is not a list")
        players.append(dict(player))
    return players


def load_players(path: str | Path) -> list[dict[str, Any]]:
    """Load players from a JSON export file.

    Raises:
        DataLoadError: If the file is missing, unreadable, not valid JSON,
            or not shaped like a player export.
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"Player file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"{path}: invalid JSON ({e})") from e
    except UnicodeDecodeError as e:
        raise DataLoadError(f"{path}: not UTF-8 encoded ({e.reason})") from e
    except OSError as e:
        raise DataLoadError(f"{path}: {e}") from e

    players = parse_players(payload, source=str(path))
    record_count = sum(len(p.get("stats") or []) for p in players)
    logger.info(
        "Loaded {} players with {} stat records from {}",
        len(players),
        record_count,
        path,
    )
    return players


__all__ = [
    "load_players",
    "parse_players",
]
