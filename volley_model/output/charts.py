"""Chart data generation for season profiles.

This module turns a SeasonProfile into JSON-serializable structures for a
frontend: a 3D scatter of projected players colored by archetype, and
Chart.js-compatible bar charts for axis variance and archetype counts.

Example:
    >>> from volley_model.output import ChartGenerator
    >>> generator = ChartGenerator()
    >>> payload = generator.scatter_3d(profile)
    >>> payload["points"][0]["color"]
    '#C7CEEA'
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any

from volley_model.analysis.archetypes import NEUTRAL_COLOR
from volley_model.logging import get_logger
from volley_model.types import ScatterPoint

if TYPE_CHECKING:
    from volley_model.pipeline import PlayerProfile, SeasonProfile

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Chart color scheme
CHART_COLORS = {
    "primary": "rgb(59, 130, 246)",  # Blue
    "secondary": "rgb(16, 185, 129)",  # Green
    "neutral": NEUTRAL_COLOR,
}

UNLABELED: str = "Unlabeled"
COORDINATE_DIGITS: int = 4


# =============================================================================
# Chart Generator
# =============================================================================


class ChartGenerator:
    """Generate chart data for season profile visualizations.

    Produces:
    - 3D scatter payload (one point per player)
    - Explained variance bar chart per projected axis
    - Archetype distribution bar chart

    All methods return dictionaries that can be serialized to JSON.

    Example:
        >>> generator = ChartGenerator()
        >>> variance = generator.variance_chart(profile)
        >>> variance["labels"]
        ['x', 'y', 'z']
    """

    def __init__(self, precision: int = COORDINATE_DIGITS) -> None:
        """Initialize ChartGenerator.

        Args:
            precision: Decimal places kept for coordinates and ratios.
        """
        self.precision = precision

    def scatter_point(self, point: PlayerProfile) -> ScatterPoint:
        """Flatten one player profile into a scatter point."""
        archetype = point.archetype
        return {
            "player_id": point.row.player_id,
            "player_name": point.row.player_name,
            "sets_played": point.row.sets_played,
            "x": round(point.projection.x, self.precision),
            "y": round(point.projection.y, self.precision),
            "z": round(point.projection.z, self.precision),
            "archetype_id": archetype.id if archetype else None,
            "archetype_name": archetype.name if archetype else None,
            "color": archetype.color if archetype else CHART_COLORS["neutral"],
        }

    def scatter_3d(self, profile: SeasonProfile) -> dict[str, Any]:
        """Generate the 3D scatter payload for a season profile.

        Args:
            profile: Profiled season.

        Returns:
            Dictionary with:
            - season_number, min_sets_played, vector_version
            - axes: axis name, label and explained variance ratio
            - points: one ScatterPoint per player, in profile order
            - legend: archetypes present with their color and count
        """
        logger.debug("Generating 3D scatter with {} points", len(profile.points))

        points = [self.scatter_point(point) for point in profile.points]

        counts = Counter(p["archetype_id"] for p in points)
        legend: list[dict[str, Any]] = []
        seen: set[str | None] = set()
        for p in points:
            if p["archetype_id"] in seen:
                continue
            seen.add(p["archetype_id"])
            legend.append(
                {
                    "archetype_id": p["archetype_id"],
                    "name": p["archetype_name"] or UNLABELED,
                    "color": p["color"],
                    "count": counts[p["archetype_id"]],
                }
            )

        return {
            "season_number": profile.season_number,
            "min_sets_played": profile.min_sets_played,
            "vector_version": profile.version,
            "axes": [
                {
                    "axis": axis["axis"],
                    "label": axis["label"],
                    "explained_variance_ratio": round(
                        axis["explained_variance_ratio"], self.precision
                    ),
                }
                for axis in profile.axes
            ],
            "points": points,
            "legend": legend,
        }

    def variance_chart(self, profile: SeasonProfile) -> dict[str, Any]:
        """Generate explained variance bar chart data.

        Returns:
            Chart.js-compatible bar chart with one bar per projected axis,
            values in percent.
        """
        if not profile.axes:
            return self._empty_bar_chart()

        return {
            "labels": [axis["axis"] for axis in profile.axes],
            "datasets": [
                {
                    "label": "Explained Variance %",
                    "data": [
                        round(axis["explained_variance_ratio"] * 100, 2)
                        for axis in profile.axes
                    ],
                    "backgroundColor": CHART_COLORS["primary"],
                    "borderColor": CHART_COLORS["primary"],
                    "borderWidth": 1,
                }
            ],
            "metadata": {
                "axis_labels": {axis["axis"]: axis["label"] for axis in profile.axes},
            },
        }

    def archetype_distribution_chart(self, profile: SeasonProfile) -> dict[str, Any]:
        """Generate archetype count bar chart data, most common first."""
        if profile.is_empty:
            return self._empty_bar_chart()

        counts: Counter[str] = Counter()
        colors: dict[str, str] = {}
        for point in profile.points:
            name = point.archetype.name if point.archetype else UNLABELED
            counts[name] += 1
            colors[name] = (
                point.archetype.color if point.archetype else CHART_COLORS["neutral"]
            )

        ordered = counts.most_common()
        return {
            "labels": [name for name, _ in ordered],
            "datasets": [
                {
                    "label": "Players",
                    "data": [count for _, count in ordered],
                    "backgroundColor": [colors[name] for name, _ in ordered],
                    "borderWidth": 1,
                }
            ],
        }

    def _empty_bar_chart(self) -> dict[str, Any]:
        """Return empty bar chart structure."""
        return {
            "labels": [],
            "datasets": [
                {
                    "label": "No Data",
                    "data": [],
                    "backgroundColor": CHART_COLORS["neutral"],
                }
            ],
        }


__all__ = [
    "CHART_COLORS",
    "ChartGenerator",
]
