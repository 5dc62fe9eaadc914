from __future__ import annotations

from typing import Any, Dict, List

from core.analysis import get_aqi_category
from core.filters import FilterState


def generate_insights(insights: Dict[str, Any], filters: FilterState) -> List[str]:
    """Turn analysis output into short human-readable sentences."""
    out: List[str] = []

    avg_aqi = float(insights.get("avg_aqi", 0.0))
    out.append(f"Overall air quality is {get_aqi_category(avg_aqi).lower()} with an average AQI of {avg_aqi:.1f}")

    state_stats = insights.get("state_stats") or []
    if state_stats:
        worst = state_stats[0]
        out.append(f"{worst['state']} has the highest average AQI of {worst['avg_aqi']:.1f}")

    area_stats = insights.get("area_stats") or []
    if area_stats:
        worst = area_stats[0]
        out.append(f"{worst['area']} has the highest average AQI of {worst['avg_aqi']:.1f}")

    r = float((insights.get("correlations") or {}).get("stations_aqi", 0.0))
    if abs(r) > filters.thresholds.correlation_min:
        kind = "Positive" if r > 0 else "Negative"
        out.append(f"{kind} correlation ({r:.2f}) between monitoring stations and AQI")

    weekday_stats = insights.get("weekday_stats") or []
    if weekday_stats:
        worst_day = weekday_stats[0]
        for day in weekday_stats[1:]:
            if day["avg_aqi"] > worst_day["avg_aqi"]:
                worst_day = day
        out.append(f"{worst_day['day']}s have the highest average AQI of {worst_day['avg_aqi']:.1f}")

    pollutants = insights.get("pollutant_frequency") or []
    if pollutants:
        top = pollutants[0]
        out.append(f"{top['pollutant']} is the most prominent pollutant ({top['percentage']:.1f}% of records)")

    if filters.selected_state:
        out.append(f"Analysis filtered for {filters.selected_state} state")
    if filters.selected_pollutants:
        out.append(f"Showing data for pollutants: {', '.join(filters.selected_pollutants)}")

    return out
