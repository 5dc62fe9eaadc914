from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

EXCLUDED_POLLUTANT_TOKENS = {"", "N/A", "NA"}


@dataclass(frozen=True)
class Thresholds:
    poor_aqi: float = 200.0
    good_aqi: float = 100.0
    correlation_min: float = 0.3


@dataclass(frozen=True)
class DateRange:
    start: str = ""
    end: str = ""


@dataclass(frozen=True)
class FilterState:
    selected_state: str = ""
    selected_area: str = ""
    date_range: DateRange = field(default_factory=DateRange)
    selected_pollutants: List[str] = field(default_factory=list)
    top_n: int = 5
    thresholds: Thresholds = field(default_factory=Thresholds)


def _as_str(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_iso_date(value: object) -> str:
    """Return YYYY-MM-DD for anything date-like, or "" when it cannot be parsed."""
    if value is None or value == "":
        return ""
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    parsed = pd.to_datetime(str(value).strip(), errors="coerce")
    if pd.isna(parsed):
        return ""
    return parsed.strftime("%Y-%m-%d")


def _as_float(value: object, default: float) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return default if pd.isna(out) else out


def split_pollutants(value: object) -> List[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return [p.strip() for p in str(value).split(",")]


def normalize_filters(raw: dict) -> FilterState:
    raw = raw or {}
    dr = raw.get("date_range") or {}
    date_range = DateRange(start=_as_iso_date(dr.get("start")), end=_as_iso_date(dr.get("end")))

    pollutants: List[str] = []
    for p in raw.get("selected_pollutants") or []:
        s = _as_str(p)
        if s and s not in pollutants:
            pollutants.append(s)

    top_n = raw.get("top_n", 5)
    try:
        top_n = int(top_n)
    except Exception:
        top_n = 5
    top_n = max(1, min(50, top_n))

    t = raw.get("thresholds") or {}
    thresholds = Thresholds(
        poor_aqi=_as_float(t.get("poor_aqi"), 200.0),
        good_aqi=_as_float(t.get("good_aqi"), 100.0),
        correlation_min=_as_float(t.get("correlation_min"), 0.3),
    )

    return FilterState(
        selected_state=_as_str(raw.get("selected_state")),
        selected_area=_as_str(raw.get("selected_area")),
        date_range=date_range,
        selected_pollutants=pollutants,
        top_n=top_n,
        thresholds=thresholds,
    )


def _matches_pollutants(value: object, selected: Iterable[str]) -> bool:
    item_pollutants = split_pollutants(value)
    return any(sel in p for sel in selected for p in item_pollutants)


def apply_filters(df: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    if df.empty:
        return df.copy()

    mask = pd.Series(True, index=df.index)
    if filters.selected_state:
        mask &= df["state"] == filters.selected_state
    if filters.selected_area:
        mask &= df["area"] == filters.selected_area

    start, end = filters.date_range.start, filters.date_range.end
    if start or end:
        dates = df["date"]
        mask &= dates.notna()
        if start:
            mask &= dates >= pd.Timestamp(start)
        if end:
            mask &= dates <= pd.Timestamp(end)

    if filters.selected_pollutants:
        selected = list(filters.selected_pollutants)
        mask &= df["prominent_pollutants"].apply(lambda v: _matches_pollutants(v, selected))

    return df[mask].copy()


def _unique_sorted(values: pd.Series) -> List[str]:
    cleaned = values.dropna().astype(str).str.strip()
    return sorted(set(cleaned[cleaned != ""].tolist()))


def filter_options(df: pd.DataFrame, selected_state: str = "") -> Dict[str, List[str]]:
    if df.empty:
        return {"states": [], "areas": [], "pollutants": []}

    states = _unique_sorted(df["state"])
    area_src = df[df["state"] == selected_state] if selected_state else df
    areas = _unique_sorted(area_src["area"])

    tokens = set()
    for value in df["prominent_pollutants"].tolist():
        for p in split_pollutants(value):
            if p not in EXCLUDED_POLLUTANT_TOKENS:
                tokens.add(p)
    return {"states": states, "areas": areas, "pollutants": sorted(tokens)}


# ---------------- Transitions ----------------
def with_state(filters: FilterState, state: Optional[str]) -> FilterState:
    # Areas only make sense inside a state.
    return replace(filters, selected_state=_as_str(state), selected_area="")


def with_area(filters: FilterState, area: Optional[str]) -> FilterState:
    return replace(filters, selected_area=_as_str(area))


def with_date_range(filters: FilterState, start: Any = "", end: Any = "") -> FilterState:
    return replace(filters, date_range=DateRange(start=_as_iso_date(start), end=_as_iso_date(end)))


def with_pollutants(filters: FilterState, pollutants: Iterable[str]) -> FilterState:
    return replace(filters, selected_pollutants=[p for p in (_as_str(x) for x in pollutants) if p])


def clear_filters(filters: Optional[FilterState] = None) -> FilterState:
    if filters is None:
        return FilterState()
    return FilterState(top_n=filters.top_n, thresholds=filters.thresholds)


def active_filter_count(filters: FilterState) -> int:
    return sum(
        [
            bool(filters.selected_state),
            bool(filters.selected_area),
            bool(filters.date_range.start),
            bool(filters.selected_pollutants),
        ]
    )


def has_active_filters(filters: FilterState) -> bool:
    return active_filter_count(filters) > 0
