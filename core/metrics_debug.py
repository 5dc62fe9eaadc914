from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.data import UNKNOWN_STATUS, date_bounds
from core.filters import FilterState


def compute_debug(filters: FilterState, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "source": ctx.get("source"),
        "row_counts": {
            "records": int(len(records)),
            "filtered": int(len(filtered)),
        },
        "parse_fallbacks": {},
        "date_coverage": {},
        "areas_per_state": [],
    }
    if records.empty:
        return payload

    payload["parse_fallbacks"] = {
        "unknown_status_rows": int((records["air_quality_status"] == UNKNOWN_STATUS).sum()),
        "zero_aqi_rows": int((records["aqi_value"] == 0).sum()),
        "missing_date_rows": int(records["date"].isna().sum()),
        "blank_pollutant_rows": int((records["prominent_pollutants"] == "").sum()),
    }

    first, last = date_bounds(records)
    dated = records["date"].dropna()
    payload["date_coverage"] = {
        "first": first,
        "last": last,
        "distinct_days": int(dated.nunique()),
    }

    per_state = (
        records.groupby("state")
        .agg(records=("area", "size"), areas=("area", "nunique"))
        .reset_index()
        .sort_values("state")
    )
    payload["areas_per_state"] = per_state.to_dict(orient="records")
    return payload
