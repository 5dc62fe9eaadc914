import pandas as pd
import streamlit as st
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, List, Optional

from core.data import load_dashboard_data, prepare_context
from core.filters import FilterState, active_filter_count, filter_options, normalize_filters
from core.metrics_analysis import compute_analysis
from core.metrics_dashboard import compute_dashboard
from core.metrics_debug import compute_debug

ALL_STATES = "All States"
ALL_AREAS = "All Areas"


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #374151;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #9ca3af;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .insight {border-left: 3px solid #8b5cf6;padding: 8px 12px;margin-bottom: 8px;background: rgba(139,92,246,0.08);border-radius: 6px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header"><div class="card-title">{title}</div></div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: FilterState) -> str:
    dr = filters.date_range
    chips = [
        f"State: {filters.selected_state or 'All'}",
        f"Area: {filters.selected_area or 'All'}",
        f"Dates: {dr.start or '…'} → {dr.end or '…'}" if (dr.start or dr.end) else "Dates: All",
        f"Pollutants: {', '.join(filters.selected_pollutants)}" if filters.selected_pollutants else "Pollutants: All",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filters: FilterState, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{format_filter_summary(filters)}</div>", unsafe_allow_html=True)


def render_chart(charts: Dict[str, Any], key: str, empty_message: str = "No data for the selected filters."):
    spec = charts.get(key)
    if spec is None:
        st.info(empty_message)
        return
    st.vega_lite_chart(spec, use_container_width=True)


def reset_area():
    st.session_state["area"] = ALL_AREAS


def clear_all_filters():
    st.session_state["state"] = ALL_STATES
    st.session_state["area"] = ALL_AREAS
    st.session_state["date_range"] = ()
    st.session_state["pollutants"] = []


def _to_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


# ---------- UI setup ----------
st.set_page_config(page_title="AQI Dashboard", layout="wide")
inject_base_styles()
st.title("AQI Dashboard")
st.caption("Air quality monitoring and analysis across states and areas.")

data_ctx = load_dashboard_data()
records: pd.DataFrame = data_ctx.get("records", pd.DataFrame())
if records.empty:
    st.error("Error loading data. Place aqi.csv in the data/ directory or set AQI_DATA_PATH.")
    st.stop()
if data_ctx.get("source") == "sample":
    st.warning("No AQI data file found; showing generated sample data.")

first_day, last_day = (_to_date(d) for d in data_ctx.get("date_bounds", (None, None)))

# ----- Sidebar: navigation + filters -----
with st.sidebar:
    st.markdown("### Navigate")
    page = st.radio("Navigate", ["Dashboard", "Analysis", "Data Quality"], index=0, label_visibility="collapsed")

    st.markdown("---")
    st.markdown("### Filters")
    state_options = [ALL_STATES] + list(data_ctx.get("states") or [])
    selected_state = st.selectbox("State", options=state_options, key="state", on_change=reset_area)
    state_value = "" if selected_state == ALL_STATES else selected_state

    area_options = [ALL_AREAS] + filter_options(records, state_value)["areas"]
    if st.session_state.get("area") not in area_options:
        st.session_state["area"] = ALL_AREAS
    selected_area = st.selectbox("Area", options=area_options, key="area", disabled=not state_value)

    date_range = st.date_input("Date range", value=(), min_value=first_day, max_value=last_day, key="date_range")
    selected_pollutants: List[str] = st.multiselect("Pollutants", options=list(data_ctx.get("pollutants") or []), key="pollutants")

filters = normalize_filters(
    {
        "selected_state": state_value,
        "selected_area": "" if selected_area == ALL_AREAS else selected_area,
        "date_range": {
            "start": date_range[0] if len(date_range) >= 1 else "",
            "end": date_range[1] if len(date_range) >= 2 else "",
        },
        "selected_pollutants": selected_pollutants,
    }
)

with st.sidebar:
    active = active_filter_count(filters)
    if active:
        st.caption(f"{active} active filter{'s' if active != 1 else ''}")
        st.button("Clear All Filters", on_click=clear_all_filters)

ctx = prepare_context(filters, data_ctx)
filtered: pd.DataFrame = ctx["filtered"]


# ----- Page renderers -----
def render_dashboard_page():
    payload = compute_dashboard(filters, ctx)
    export_df = filtered.assign(date=filtered["date"].dt.strftime("%Y-%m-%d")) if not filtered.empty else filtered
    render_page_header("Dashboard", "Home / Dashboard", filters, export_df=export_df, export_name="aqi_filtered.csv")

    cards = payload["stat_cards"]
    cols = st.columns(4)
    for col, key in zip(cols, ["avg_aqi", "avg_stations", "total_records", "avg_pm25"]):
        c = cards[key]
        col.metric(c["title"], c["display"], help=c["subtitle"])

    charts = payload["charts"]
    row1 = st.columns(2)
    with row1[0]:
        with card("AQI Over Time"):
            render_chart(charts, "aqi_over_time")
    with row1[1]:
        with card("Station Count by Weekday"):
            render_chart(charts, "stations_by_weekday")

    row2 = st.columns(3)
    with row2[0]:
        with card("Air Quality Status Distribution"):
            render_chart(charts, "status_distribution")
    with row2[1]:
        with card("Prominent Pollutants"):
            render_chart(charts, "prominent_pollutants")
    with row2[2]:
        with card("Poor vs Good AQI"):
            counts = payload["quality_counts"]
            render_chart(charts, "poor_vs_good", empty_message="No poor or good readings.")
            if counts["poor"] + counts["good"]:
                st.caption(f"Poor: {counts['poor']} ({counts['poor_pct']:.0f}%) · Good: {counts['good']} ({counts['good_pct']:.0f}%)")


def render_analysis_page():
    payload = compute_analysis(filters, ctx)
    render_page_header("Analysis", "Home / Analysis", filters)

    with card("Data Insights & Analysis"):
        cols = st.columns(2)
        for i, text in enumerate(payload["insights"]):
            cols[i % 2].markdown(f"<div class='insight'>{text}</div>", unsafe_allow_html=True)

    with card("Current Filter Summary"):
        summary = payload["summary"]
        cols = st.columns(4)
        cols[0].metric("Filtered Records", summary["filtered_records"])
        cols[1].metric("State", summary["state"])
        cols[2].metric("Area", summary["area"])
        cols[3].metric("Pollutants", summary["pollutants"])

    with card("State AQI Rankings"):
        rankings = payload["state_rankings"]
        if not rankings:
            st.info("No states for the selected filters.")
        else:
            table = pd.DataFrame(rankings)
            table["avg_aqi"] = table["avg_aqi"].map(lambda v: f"{v:.1f} AQI")
            st.dataframe(table, hide_index=True, use_container_width=True)


def render_debug_page():
    payload = compute_debug(filters, ctx)
    render_page_header("Data Quality", "Home / Data Quality", filters)
    st.write(f"Source: `{payload['source']}`")
    st.json({"row_counts": payload["row_counts"], "parse_fallbacks": payload["parse_fallbacks"], "date_coverage": payload["date_coverage"]})
    if payload["areas_per_state"]:
        st.dataframe(pd.DataFrame(payload["areas_per_state"]), hide_index=True, use_container_width=True)


if page == "Dashboard":
    render_dashboard_page()
elif page == "Analysis":
    render_analysis_page()
else:
    render_debug_page()
