from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.analysis import analyze_data, get_aqi_category
from core.filters import FilterState, active_filter_count
from core.insights import generate_insights


def filter_summary(filters: FilterState, filtered_count: int) -> Dict[str, Any]:
    return {
        "filtered_records": int(filtered_count),
        "state": filters.selected_state or "All",
        "area": filters.selected_area or "All",
        "pollutants": len(filters.selected_pollutants) or "All",
        "active_filters": active_filter_count(filters),
    }


def state_rankings(insights: Dict[str, Any], top_n: int) -> List[Dict[str, Any]]:
    return [
        {
            "rank": i,
            "state": row["state"],
            "avg_aqi": row["avg_aqi"],
            "category": get_aqi_category(row["avg_aqi"]),
        }
        for i, row in enumerate(insights["state_stats"][:top_n], start=1)
    ]


def compute_analysis(filters: FilterState, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    insights: Dict[str, Any] = ctx.get("insights") or analyze_data(df)
    return {
        "filters": asdict(filters),
        "insights": generate_insights(insights, filters),
        "summary": filter_summary(filters, len(df)),
        "state_rankings": state_rankings(insights, filters.top_n),
        "extremes": {"max_aqi": insights["max_aqi"], "min_aqi": insights["min_aqi"]},
        "correlations": insights["correlations"],
    }
