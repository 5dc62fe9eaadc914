from __future__ import annotations

from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from core.filters import split_pollutants

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

AQI_CATEGORIES = [
    (50, "Good"),
    (100, "Satisfactory"),
    (200, "Moderate"),
    (300, "Poor"),
    (400, "Very Poor"),
]


def get_aqi_category(aqi: float) -> str:
    for upper, label in AQI_CATEGORIES:
        if aqi <= upper:
            return label
    return "Severe"


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient; 0.0 when undefined."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = len(xs)
    if n == 0:
        return 0.0
    sum_x, sum_y = xs.sum(), ys.sum()
    numerator = n * (xs * ys).sum() - sum_x * sum_y
    variance = (n * (xs * xs).sum() - sum_x * sum_x) * (n * (ys * ys).sum() - sum_y * sum_y)
    if variance <= 0:
        return 0.0
    return float(numerator / np.sqrt(variance))


def empty_insights() -> Dict[str, Any]:
    return {
        "avg_aqi": 0.0,
        "avg_stations": 0.0,
        "total_records": 0,
        "avg_pm25": 0.0,
        "max_aqi": {"value": 0.0, "date": "", "area": ""},
        "min_aqi": {"value": 0.0, "date": "", "area": ""},
        "state_stats": [],
        "area_stats": [],
        "status_distribution": [],
        "pollutant_frequency": [],
        "weekday_stats": [],
        "monthly_trend": [],
        "correlations": {"stations_aqi": 0.0},
    }


def _format_date(value: object) -> str:
    if value is None or pd.isna(value):
        return ""
    return pd.Timestamp(value).strftime("%Y-%m-%d")


def _extreme(row: pd.Series) -> Dict[str, Any]:
    return {"value": float(row["aqi_value"]), "date": _format_date(row["date"]), "area": str(row["area"])}


def _group_avg_aqi(df: pd.DataFrame, key: str) -> List[Dict[str, Any]]:
    grouped = (
        df.groupby(key, sort=False)["aqi_value"]
        .mean()
        .reset_index()
        .sort_values("aqi_value", ascending=False, kind="stable")
    )
    return [{key: str(r[key]), "avg_aqi": float(r["aqi_value"])} for _, r in grouped.iterrows()]


def _status_distribution(df: pd.DataFrame) -> List[Dict[str, Any]]:
    total = len(df)
    counts = df.groupby("air_quality_status", sort=False).size()
    return [
        {"status": str(status), "count": int(count), "percentage": float(count / total * 100)}
        for status, count in counts.items()
    ]


def _pollutant_frequency(df: pd.DataFrame) -> List[Dict[str, Any]]:
    total = len(df)
    counts: Dict[str, int] = {}
    for value in df["prominent_pollutants"].tolist():
        for p in split_pollutants(value):
            if p:
                counts[p] = counts.get(p, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [{"pollutant": p, "count": c, "percentage": c / total * 100} for p, c in ranked]


def _weekday_stats(dated: pd.DataFrame) -> List[Dict[str, Any]]:
    if dated.empty:
        return []
    grouped = dated.assign(day=dated["date"].dt.day_name()).groupby("day")[["aqi_value", "station_count"]].mean()
    return [
        {
            "day": day,
            "avg_aqi": float(grouped.loc[day, "aqi_value"]),
            "avg_stations": float(grouped.loc[day, "station_count"]),
        }
        for day in WEEKDAYS
        if day in grouped.index
    ]


def _monthly_trend(dated: pd.DataFrame) -> List[Dict[str, Any]]:
    if dated.empty:
        return []
    grouped = (
        dated.assign(period=dated["date"].dt.to_period("M"))
        .groupby("period")[["aqi_value", "station_count"]]
        .mean()
        .sort_index()
    )
    return [
        {
            "month": period.strftime("%b %Y"),
            "aqi": float(r["aqi_value"]),
            "stations": float(r["station_count"]),
        }
        for period, r in grouped.iterrows()
    ]


def analyze_data(df: pd.DataFrame) -> Dict[str, Any]:
    """Summarise a (filtered) record table.

    Averages cover every record. Weekday and monthly breakdowns only use
    records with a valid date.
    """
    if df is None or df.empty:
        return empty_insights()

    aqi = df["aqi_value"].astype(float)
    stations = df["station_count"].astype(float)
    dated = df.dropna(subset=["date"])

    return {
        "avg_aqi": float(aqi.mean()),
        "avg_stations": float(stations.mean()),
        "total_records": int(len(df)),
        "avg_pm25": float(df["pm25"].fillna(0).mean()),
        # argmax/argmin return the first row holding the extreme.
        "max_aqi": _extreme(df.iloc[int(np.argmax(aqi.to_numpy()))]),
        "min_aqi": _extreme(df.iloc[int(np.argmin(aqi.to_numpy()))]),
        "state_stats": _group_avg_aqi(df, "state"),
        "area_stats": _group_avg_aqi(df, "area"),
        "status_distribution": _status_distribution(df),
        "pollutant_frequency": _pollutant_frequency(df),
        "weekday_stats": _weekday_stats(dated),
        "monthly_trend": _monthly_trend(dated),
        "correlations": {"stations_aqi": calculate_correlation(stations.tolist(), aqi.tolist())},
    }
