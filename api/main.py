from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import FilterStateModel, MetaSourceResponse
from core.data import load_dashboard_data, prepare_context
from core.filters import FilterState, filter_options, normalize_filters
from core.metrics_analysis import compute_analysis
from core.metrics_dashboard import compute_dashboard
from core.metrics_debug import compute_debug


app = FastAPI(title="AQI Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: FilterStateModel) -> FilterState:
    return normalize_filters(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    def _timestamp(ts: pd.Timestamp) -> str | None:
        return None if pd.isna(ts) else ts.strftime("%Y-%m-%d")

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: _timestamp,
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/source")
def meta_source():
    try:
        data_ctx = load_dashboard_data()
        records: pd.DataFrame = data_ctx.get("records", pd.DataFrame())
        meta = MetaSourceResponse(
            source=str(data_ctx.get("source") or ""),
            records=int(len(records)),
            date_bounds=data_ctx.get("date_bounds") or (None, None),
        )
        return _json(meta.model_dump())
    except Exception as exc:
        return _error("meta_source", exc)


@app.get("/meta/states")
def meta_states():
    try:
        data_ctx = load_dashboard_data()
        return _json({"states": list(data_ctx.get("states") or [])})
    except Exception as exc:
        return _error("meta_states", exc)


@app.get("/meta/areas")
def meta_areas(state: str = Query(default="")):
    try:
        data_ctx = load_dashboard_data()
        records: pd.DataFrame = data_ctx.get("records", pd.DataFrame())
        options = filter_options(records, (state or "").strip())
        return _json({"state": state, "areas": options["areas"]})
    except Exception as exc:
        return _error("meta_areas", exc)


@app.get("/meta/pollutants")
def meta_pollutants():
    try:
        data_ctx = load_dashboard_data()
        return _json({"pollutants": list(data_ctx.get("pollutants") or [])})
    except Exception as exc:
        return _error("meta_pollutants", exc)


@app.post("/dashboard")
def dashboard(filters: FilterStateModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_dashboard(f, ctx))
    except Exception as exc:
        return _error("dashboard", exc)


@app.post("/analysis")
def analysis(filters: FilterStateModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_analysis(f, ctx))
    except Exception as exc:
        return _error("analysis", exc)


@app.post("/insights")
def insights(filters: FilterStateModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json({"filters": f, "insights": ctx["insights"]})
    except Exception as exc:
        return _error("insights", exc)


@app.post("/debug")
def debug(filters: FilterStateModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        return _error("debug", exc)


@app.post("/export/{page}")
def export_page(page: str, filters: FilterStateModel):
    f = _filters_from_model(filters)
    ctx = prepare_context(f, load_dashboard_data())
    insights_data = ctx["insights"]

    filename = f"{page}.csv"
    if page == "records":
        export_df = ctx["filtered"].copy()
        if not export_df.empty:
            export_df["date"] = export_df["date"].dt.strftime("%Y-%m-%d")
    elif page == "states":
        export_df = pd.DataFrame(insights_data["state_stats"])
    elif page == "areas":
        export_df = pd.DataFrame(insights_data["area_stats"])
    elif page == "pollutants":
        export_df = pd.DataFrame(insights_data["pollutant_frequency"])
    elif page == "monthly":
        export_df = pd.DataFrame(insights_data["monthly_trend"])
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
