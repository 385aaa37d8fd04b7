"""Data access for volley model.

Submodules:
    loader: JSON player export loading and validation

Example:
    >>> from volley_model.data import load_players
    >>> players = load_players("players.json")
"""

from __future__ import annotations

from volley_model.data.loader import load_players, parse_players

__all__ = [
    "load_players",
    "parse_players",
]
