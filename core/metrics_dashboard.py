from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from core.analysis import analyze_data
from core.charts import POLLUTANT_COLORS, RING_COLORS, status_scale, to_vega_spec
from core.filters import FilterState


def _stat_cards(insights: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "avg_aqi": {
            "title": "Average AQI",
            "value": insights["avg_aqi"],
            "display": f"{insights['avg_aqi']:.1f}",
            "subtitle": "Air Quality Index",
        },
        "avg_stations": {
            "title": "Avg Stations",
            "value": insights["avg_stations"],
            "display": f"{insights['avg_stations']:.1f}",
            "subtitle": "Monitoring Stations",
        },
        "total_records": {
            "title": "Total Records",
            "value": insights["total_records"],
            "display": str(insights["total_records"]),
            "subtitle": "Data Points",
        },
        "avg_pm25": {
            "title": "Average PM2.5",
            "value": insights["avg_pm25"],
            "display": f"{insights['avg_pm25']:.1f} μg/m³",
            "subtitle": "Fine Particles",
        },
    }


def quality_counts(df: pd.DataFrame, filters: FilterState) -> Dict[str, Any]:
    if df.empty:
        return {"poor": 0, "good": 0, "poor_pct": None, "good_pct": None}
    poor = int((df["aqi_value"] > filters.thresholds.poor_aqi).sum())
    good = int((df["aqi_value"] <= filters.thresholds.good_aqi).sum())
    total = poor + good
    return {
        "poor": poor,
        "good": good,
        "poor_pct": (poor / total * 100) if total else None,
        "good_pct": (good / total * 100) if total else None,
    }


def compute_dashboard(filters: FilterState, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    insights: Dict[str, Any] = ctx.get("insights") or analyze_data(df)
    counts = quality_counts(df, filters)

    charts: Dict[str, Any] = {}

    monthly = pd.DataFrame(insights["monthly_trend"])
    if not monthly.empty:
        monthly["aqi"] = monthly["aqi"].round().astype(int)
        month_order = monthly["month"].tolist()
        hover = alt.selection_point(fields=["month"], on="mouseover", empty="all")
        line = (
            alt.Chart(monthly)
            .mark_line(point={"filled": True, "size": 60}, color="#8b5cf6")
            .encode(
                x=alt.X("month:N", title="Month", sort=month_order, axis=alt.Axis(grid=False)),
                y=alt.Y("aqi:Q", title="AQI", axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
                opacity=alt.condition(hover, alt.value(1), alt.value(0.4)),
                tooltip=["month", alt.Tooltip("aqi:Q", title="AQI")],
            )
            .add_params(hover)
            .properties(height=260, title="AQI Over Time")
        )
        charts["aqi_over_time"] = to_vega_spec(line)

    weekday = pd.DataFrame(insights["weekday_stats"])
    if not weekday.empty:
        weekday = weekday.assign(
            aqi=weekday["avg_aqi"].round().astype(int),
            stations=weekday["avg_stations"].round().astype(int),
        )
        day_order = weekday["day"].tolist()
        area = (
            alt.Chart(weekday)
            .mark_area(line=True, opacity=0.4, color="#3b82f6")
            .encode(
                x=alt.X("day:N", title="Day", sort=day_order, axis=alt.Axis(grid=False)),
                y=alt.Y("stations:Q", title="Stations", axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
                tooltip=["day", alt.Tooltip("stations:Q", title="Stations"), alt.Tooltip("aqi:Q", title="AQI")],
            )
            .properties(height=260, title="Station Count by Weekday")
        )
        charts["stations_by_weekday"] = to_vega_spec(area)

    status = pd.DataFrame(insights["status_distribution"])
    if not status.empty:
        statuses = status["status"].tolist()
        bar = (
            alt.Chart(status)
            .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
            .encode(
                x=alt.X("status:N", title="Status", sort=statuses),
                y=alt.Y("count:Q", title="Records"),
                color=alt.Color("status:N", scale=status_scale(statuses), legend=None),
                tooltip=["status", "count", alt.Tooltip("percentage:Q", title="Share %", format=".1f")],
            )
            .properties(height=260, title="Air Quality Status Distribution")
        )
        charts["status_distribution"] = to_vega_spec(bar)

    pollutants = pd.DataFrame(insights["pollutant_frequency"][:5])
    if not pollutants.empty:
        donut = (
            alt.Chart(pollutants)
            .mark_arc(innerRadius=50)
            .encode(
                theta=alt.Theta("count:Q"),
                color=alt.Color(
                    "pollutant:N",
                    title="Pollutant",
                    scale=alt.Scale(range=POLLUTANT_COLORS),
                    sort=pollutants["pollutant"].tolist(),
                ),
                tooltip=["pollutant", "count", alt.Tooltip("percentage:Q", title="Share %", format=".1f")],
            )
            .properties(height=260, title="Prominent Pollutants")
        )
        charts["prominent_pollutants"] = to_vega_spec(donut)

    if counts["poor"] + counts["good"] > 0:
        ring_df = pd.DataFrame(
            [
                {"name": "Poor", "count": counts["poor"], "percentage": counts["poor_pct"]},
                {"name": "Good", "count": counts["good"], "percentage": counts["good_pct"]},
            ]
        )
        ring = (
            alt.Chart(ring_df)
            .mark_arc(innerRadius=60, outerRadius=90)
            .encode(
                theta=alt.Theta("percentage:Q"),
                color=alt.Color("name:N", title=None, scale=alt.Scale(domain=["Poor", "Good"], range=RING_COLORS)),
                tooltip=["name", "count", alt.Tooltip("percentage:Q", title="Share %", format=".1f")],
            )
            .properties(height=260, title="Poor vs Good AQI")
        )
        charts["poor_vs_good"] = to_vega_spec(ring)

    return {
        "filters": asdict(filters),
        "source": ctx.get("source"),
        "stat_cards": _stat_cards(insights),
        "quality_counts": counts,
        "charts": charts,
    }
