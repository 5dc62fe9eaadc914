from __future__ import annotations

import io
import logging
import os
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from core.analysis import analyze_data
from core.filters import FilterState, apply_filters, filter_options, normalize_filters


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_FILE = "aqi.csv"
DATA_PATH_ENV = "AQI_DATA_PATH"
SAMPLE_SOURCE = "sample"

TEXT_COLUMNS = ["state", "area", "air_quality_status", "prominent_pollutants"]
NUMERIC_COLUMNS = ["aqi_value", "station_count", "pm25", "pm10", "co", "no2", "o3", "so2"]
RECORD_COLUMNS = [
    "date",
    "state",
    "area",
    "aqi_value",
    "air_quality_status",
    "prominent_pollutants",
    "station_count",
    "pm25",
    "pm10",
    "co",
    "no2",
    "o3",
    "so2",
]
UNKNOWN_STATUS = "Unknown"

COLUMN_ALIASES = {
    "aqi": "aqi_value",
    "status": "air_quality_status",
    "pollutants": "prominent_pollutants",
    "number_of_monitoring_stations": "station_count",
    "stations": "station_count",
    "pm2.5": "pm25",
    "pm2_5": "pm25",
}

SAMPLE_AREAS = {
    "Delhi": ["New Delhi", "Dwarka", "Rohini", "Anand Vihar"],
    "Maharashtra": ["Mumbai", "Pune", "Nagpur", "Nashik"],
    "Karnataka": ["Bangalore", "Mysore", "Hubli", "Mangalore"],
    "Tamil Nadu": ["Chennai", "Coimbatore", "Madurai", "Salem"],
    "West Bengal": ["Kolkata", "Howrah", "Durgapur", "Siliguri"],
}
SAMPLE_STATUSES = ["Good", "Satisfactory", "Moderate", "Poor", "Very Poor"]
SAMPLE_POLLUTANTS = ["PM2.5", "PM10", "NO2", "CO", "O3", "SO2"]

CsvSource = Union[str, Path, io.IOBase]


def get_data_path() -> Path:
    override = os.environ.get(DATA_PATH_ENV, "").strip()
    return Path(override) if override else DATA_DIR / DATA_FILE


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


def normalize_header(name: object) -> str:
    key = str(name).strip().lower().replace(" ", "_")
    return COLUMN_ALIASES.get(key, key)


def parse_dates(values: pd.Series) -> pd.Series:
    """Parse a date column with one format for every row.

    ISO dates win; otherwise the column is read day-first (dd-mm-yyyy).
    Values that fit neither become NaT.
    """
    if pd.api.types.is_datetime64_any_dtype(values):
        return values.dt.normalize()
    iso = pd.to_datetime(values, errors="coerce", format="ISO8601")
    if iso.notna().all():
        return iso.dt.normalize()
    dayfirst = pd.to_datetime(values, errors="coerce", dayfirst=True)
    best = dayfirst if dayfirst.notna().sum() > iso.notna().sum() else iso
    return best.dt.normalize()


def normalize_records(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce a raw table into the record schema, applying parse-failure defaults."""
    df = df.rename(columns={c: normalize_header(c) for c in df.columns})
    df = df.loc[:, ~df.columns.duplicated()].copy()

    for col in TEXT_COLUMNS:
        if col not in df.columns:
            df[col] = ""
        df[col] = df[col].fillna("").astype(str).str.strip()
        df[col] = df[col].replace({"nan": "", "None": ""})
    df["air_quality_status"] = df["air_quality_status"].replace({"": UNKNOWN_STATUS})

    for col in NUMERIC_COLUMNS:
        if col not in df.columns:
            df[col] = 0.0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0).astype(float)

    if "date" not in df.columns:
        df["date"] = pd.NaT
    df["date"] = parse_dates(df["date"])

    return df[RECORD_COLUMNS].reset_index(drop=True)


def _keep_leading_fields(fields: List[str]) -> List[str]:
    # pandas drops the fields past the header width.
    logger.warning("malformed CSV row with %d fields, extra fields dropped: %s", len(fields), fields)
    return fields


def parse_csv(source: CsvSource) -> pd.DataFrame:
    """Parse CSV text, a path, or a file-like object into records.

    A string containing a newline is treated as CSV text; anything else string-like
    is a path.
    """
    if isinstance(source, str) and "\n" in source:
        source = io.StringIO(source.strip())
    raw = pd.read_csv(
        source,
        dtype=str,
        skipinitialspace=True,
        keep_default_na=False,
        engine="python",
        on_bad_lines=_keep_leading_fields,
    )
    return normalize_records(raw)


def generate_sample_data(n: int = 200, seed: Optional[int] = None, today: Optional[date] = None) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    today = today or date.today()
    states = list(SAMPLE_AREAS)
    rows: List[Dict[str, object]] = []
    for i in range(n):
        state = states[rng.integers(len(states))]
        areas = SAMPLE_AREAS[state]
        aqi = int(rng.integers(50, 350))
        picked = rng.permutation(SAMPLE_POLLUTANTS)[: int(rng.integers(1, 4))]
        rows.append(
            {
                "date": (today - timedelta(days=i)).isoformat(),
                "state": state,
                "area": areas[rng.integers(len(areas))],
                "aqi_value": aqi,
                "air_quality_status": SAMPLE_STATUSES[min(aqi // 60, len(SAMPLE_STATUSES) - 1)],
                "prominent_pollutants": ", ".join(str(p) for p in picked),
                "station_count": int(rng.integers(1, 11)),
                "pm25": int(rng.integers(20, 120)),
                "pm10": int(rng.integers(30, 180)),
                "co": int(rng.integers(1, 11)),
                "no2": int(rng.integers(10, 90)),
                "o3": int(rng.integers(20, 140)),
                "so2": int(rng.integers(5, 55)),
            }
        )
    return normalize_records(pd.DataFrame(rows))


def date_bounds(df: pd.DataFrame) -> Tuple[Optional[str], Optional[str]]:
    dates = df["date"].dropna() if "date" in df.columns else pd.Series(dtype="datetime64[ns]")
    if dates.empty:
        return None, None
    return dates.min().strftime("%Y-%m-%d"), dates.max().strftime("%Y-%m-%d")


def build_data_context(records: pd.DataFrame, source: str) -> Dict[str, object]:
    options = filter_options(records)
    return {
        "source": source,
        "records": records,
        "states": options["states"],
        "pollutants": options["pollutants"],
        "date_bounds": date_bounds(records),
    }


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(file_sig: Tuple[str, float]) -> Dict[str, object]:
    path = Path(file_sig[0])
    try:
        records = parse_csv(path)
    except (OSError, ValueError):
        # pandas' EmptyDataError and ParserError are both ValueErrors.
        logger.exception("failed to parse %s, using sample data", path)
        return _sample_context()
    if records.empty:
        logger.warning("%s has no records, using sample data", path)
        return _sample_context()
    logger.info("loaded %d records from %s", len(records), path)
    return build_data_context(records, str(path))


@lru_cache(maxsize=1)
def _sample_context() -> Dict[str, object]:
    return build_data_context(generate_sample_data(), SAMPLE_SOURCE)


def load_dashboard_data() -> Dict[str, object]:
    path = get_data_path()
    if not path.exists():
        logger.warning("data file %s not found, using sample data", path)
        return _sample_context()
    return _load_dashboard_data_cached(file_signature(path))


def prepare_context(filters: dict | FilterState, data_ctx: Dict[str, object]) -> Dict[str, object]:
    records: pd.DataFrame = data_ctx.get("records", pd.DataFrame())
    if records.empty and not len(records.columns):
        records = pd.DataFrame(columns=RECORD_COLUMNS)
    filt = filters if isinstance(filters, FilterState) else normalize_filters(filters)

    filtered = apply_filters(records, filt)
    return {
        "filters": filt,
        "source": data_ctx.get("source"),
        "records": records,
        "filtered": filtered,
        "insights": analyze_data(filtered),
        "options": filter_options(records, filt.selected_state),
    }
