"""Volleyball player profiling.

Turns per-game volleyball stat records into per-set feature vectors,
standardizes them against a season population, projects them to 3D with
PCA, and labels each player with a rule-based archetype.

Example:
    >>> from volley_model import build_season_profile
    >>> profile = build_season_profile(players, season_number=4, min_sets_played=5)
    >>> profile.points[0].archetype.name
    'Precise Striker'
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Volley Model Team"

# Public API exports
from volley_model.config import Settings, get_settings
from volley_model.pipeline import SeasonProfile, build_season_profile

__all__ = [
    "SeasonProfile",
    "Settings",
    "__author__",
    "__version__",
    "build_season_profile",
    "get_settings",
]
