from __future__ import annotations

from typing import Any, Dict, List

import altair as alt

alt.data_transformers.disable_max_rows()

STATUS_COLORS = {
    "Good": "#10b981",
    "Satisfactory": "#84cc16",
    "Moderate": "#eab308",
    "Poor": "#f97316",
    "Very Poor": "#ef4444",
    "Severe": "#7f1d1d",
    "Unknown": "#6b7280",
}
POLLUTANT_COLORS = ["#8b5cf6", "#3b82f6", "#06b6d4", "#f59e0b", "#ef4444"]
RING_COLORS = ["#ef4444", "#10b981"]


def status_scale(statuses: List[str]) -> alt.Scale:
    """Fixed colour per known status, grey for anything else."""
    return alt.Scale(domain=statuses, range=[STATUS_COLORS.get(s, STATUS_COLORS["Unknown"]) for s in statuses])


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()
