"""Output generation for volley model.

Submodules:
    charts: Scatter and bar chart payloads for a season profile

Example:
    >>> from volley_model.output import ChartGenerator
    >>> payload = ChartGenerator().scatter_3d(profile)
"""

from __future__ import annotations

from volley_model.output.charts import CHART_COLORS, ChartGenerator

__all__ = [
    "CHART_COLORS",
    "ChartGenerator",
]
