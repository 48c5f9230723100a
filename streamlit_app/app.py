from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict
from pathlib import Path

import altair as alt
import pandas as pd
import streamlit as st

from fisheries_pipeline.aggregate.currency import convert_series, format_currency, rate_for
from fisheries_pipeline.aggregate.proportions import category_series
from fisheries_pipeline.aggregate.temporal import bucket_by_month, difference_from_mean
from fisheries_pipeline.aggregate.views import (
    ALL_SITES,
    SITE_STATS_COLUMNS,
    color_intensity,
    column_ranges,
    effort_stats,
    filter_effort_cells,
    gear_habitat_rows,
    landing_sites,
    latest_change,
    metric_series,
    site_label,
    taxa_composition,
    taxa_length_summaries,
    time_break_index,
    toggle_time_break,
)
from fisheries_pipeline.config import get_settings
from fisheries_pipeline.load.errors import DataLoadError
from fisheries_pipeline.load.reader import load_dataset
from fisheries_pipeline.load.store import LatestResultSlot
from fisheries_pipeline.lookups import TimeBreak, get_display_config

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Fisheries Monitoring Dashboard", layout="wide")
st.title("🐟 Fisheries Monitoring Dashboard")

SETTINGS = get_settings()
CONFIG = get_display_config()

SITE_STATS_HEADERS = {
    "district": "District",
    "landing_site": "Landing Site",
    "trip_duration_hrs": "Trip Duration (hrs)",
    "cpue_kg_fisher_hr": "CPUE (kg/fisher/hr)",
    "price_per_kg_mzn": "Price per kg (MZN)",
    "mean_catch_kg": "Mean Catch (kg)",
    "mean_catch_price_mzn": "Mean Catch Price (MZN)",
}

# RGB shading per site statistics column
SITE_STATS_COLORS = {
    "trip_duration_hrs": "133, 146, 163",
    "cpue_kg_fisher_hr": "25, 135, 84",
    "price_per_kg_mzn": "13, 110, 253",
    "mean_catch_kg": "214, 51, 132",
    "mean_catch_price_mzn": "255, 193, 7",
}


# =====================================================
# Helpers
# =====================================================
@st.cache_data(show_spinner="Loading data...")
def load_records(name: str, data_dir: str) -> list[dict]:
    """Load the validated records of one dataset (cached per session)."""
    return load_dataset(name, Path(data_dir)).records


def records_or_stop(name: str) -> list[dict]:
    """Return a dataset's records, or show the load error and stop the page."""
    try:
        return load_records(name, str(SETTINGS.data_dir))
    except DataLoadError as exc:
        st.error(f"Error loading data: {exc}")
        st.stop()
        raise


def metric_slot() -> LatestResultSlot:
    """Session-wide holder of the series for the current landing-site selection."""
    if "metric_slot" not in st.session_state:
        st.session_state["metric_slot"] = LatestResultSlot()
    return st.session_state["metric_slot"]


@st.cache_resource
def loader_pool() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=2, thread_name_prefix="series-loader")


def load_series(metric: str, landing_site: str, data_dir: str) -> list:
    """Worker-side load of one metric series (no Streamlit calls)."""
    records = load_dataset("monthly-metrics", Path(data_dir)).records
    return metric_series(records, metric, landing_site)


def selected_series(metric: str, landing_site: str) -> list:
    """Series for the current selection, loaded off the script thread.

    A rerun triggered by a new selection interrupts the wait below; the
    abandoned load then settles against a stale token and is dropped.
    """
    slot = metric_slot()
    wanted = (metric, landing_site)
    if slot.key != wanted:
        token, _ = slot.submit(loader_pool(), wanted, load_series, metric, landing_site, str(SETTINGS.data_dir))
        status = st.empty()
        while slot.key != wanted and slot.error is None and slot.is_current(token):
            status.caption("Loading data...")
            time.sleep(0.1)
        status.empty()

    if slot.error:
        st.error(f"Error loading data: {slot.error}")
        st.stop()
    return slot.value or []


def kpi(label: str, value, delta: str | None = None) -> None:
    """Display a simple KPI metric in the dashboard."""
    st.metric(label, value, delta)


def center_dataframe(df: pd.DataFrame):
    """Center-align column headers and values for display."""
    return (
        df.style
        .set_properties(**{"text-align": "center"})
        .set_table_styles(
            [{"selector": "th", "props": [("text-align", "center")]}]
        )
    )


def points_frame(points) -> pd.DataFrame:
    return pd.DataFrame([p.as_dict() for p in points], columns=["x", "y"])


def time_series_section(title: str, metric: str, unit: str, landing_site: str, currency: str | None) -> None:
    """Monthly/differenced bar chart, seasonal profile and latest-change KPI."""
    rate = rate_for(currency, CONFIG.currency_rates) if currency else 1.0
    series = convert_series(selected_series(metric, landing_site), rate)

    if not any(p.y is not None for p in series):
        where = "all landing sites" if landing_site == ALL_SITES else site_label(landing_site)
        st.info(f"No data available for {where}")
        return

    def fmt(v: float | None) -> str:
        if currency:
            return format_currency(v, currency, CONFIG.currency_symbols)
        return "No data" if v is None else f"{v:.2f} {unit}"

    st.subheader(title)
    view_mode = st.radio("View", ["Monthly", "Differenced"], horizontal=True, key=f"{metric}_view")

    change = latest_change(series)
    if change is not None:
        delta = None if change.change_pct is None else f"{change.change_pct:+.1f}%"
        kpi(f"Latest ({change.current_period} vs {change.previous_period})", fmt(change.latest), delta)

    c1, c2 = st.columns([2, 1])
    with c1:
        if view_mode == "Differenced":
            diffed = difference_from_mean(series)
            df = points_frame(diffed.points)
            df["actual"] = [diffed.actual_value(p.y) for p in diffed.points]
            y_title = diffed.axis_title(unit)
            color = alt.condition("datum.y >= 0", alt.value("#16a34a"), alt.value("#dc2626"))
            tooltip = [
                alt.Tooltip("x:T", format="%b %Y"),
                alt.Tooltip("y:Q", format=".2f", title="Difference"),
                alt.Tooltip("actual:Q", format=".2f", title="Actual"),
            ]
        else:
            df = points_frame(series)
            y_title = unit
            color = alt.value("#2196f3")
            tooltip = [alt.Tooltip("x:T", format="%b %Y"), alt.Tooltip("y:Q", format=".2f")]

        df["x"] = pd.to_datetime(df["x"], errors="coerce")
        chart = (
            alt.Chart(df.dropna(subset=["x"]))
            .mark_bar()
            .encode(
                x=alt.X("x:T", title=None, axis=alt.Axis(format="%b %Y")),
                y=alt.Y("y:Q", title=y_title),
                color=color,
                tooltip=tooltip,
            )
            .properties(height=350)
        )
        st.altair_chart(chart, width="stretch")

    with c2:
        seasonal = points_frame(bucket_by_month(series, CONFIG.month_names))
        chart_seasonal = (
            alt.Chart(seasonal)
            .mark_bar()
            .encode(
                x=alt.X("x:N", sort=list(CONFIG.month_names), title=None),
                y=alt.Y("y:Q", title=f"Median ({unit})"),
                tooltip=["x:N", alt.Tooltip("y:Q", format=".2f")],
            )
            .properties(height=350)
        )
        st.altair_chart(chart_seasonal, width="stretch")


def gear_habitat_section(title: str, metric: str, unit: str, rate: float = 1.0) -> None:
    st.subheader(title)
    rows = gear_habitat_rows(records_or_stop("gear-habitat-metrics"), metric)
    if not rows:
        st.info("No gear metrics data available")
        return

    df = pd.DataFrame(rows)
    df["value"] = pd.to_numeric(df["value"], errors="coerce") * rate
    chart = (
        alt.Chart(df)
        .mark_rect()
        .encode(
            x=alt.X("gear:N", title="Gear"),
            y=alt.Y("habitat:N", title="Habitat"),
            color=alt.Color("value:Q", title=unit),
            tooltip=["habitat:N", "gear:N", alt.Tooltip("value:Q", format=".2f")],
        )
        .properties(height=320)
    )
    st.altair_chart(chart, width="stretch")


# =====================================================
# Sidebar
# =====================================================
monthly_records = records_or_stop("monthly-metrics")
sites = [ALL_SITES, *landing_sites(monthly_records)]

page = st.sidebar.radio("Page", ["Home", "Catch", "Revenue", "Composition", "Taxa length"])
landing_site = st.sidebar.selectbox(
    "Landing site",
    sites,
    format_func=lambda s: "All landing sites" if s == ALL_SITES else site_label(s),
)
currency = st.sidebar.selectbox("Currency", list(CONFIG.currency_rates), index=0)

# =====================================================
# HOME — EFFORT GRID & LANDING SITE STATISTICS
# =====================================================
if page == "Home":
    st.header("🗺️ Fishing Effort Distribution")

    cells = records_or_stop("surveys-gps")
    labels = [b.label for b in CONFIG.time_breaks]
    if "time_breaks" not in st.session_state:
        st.session_state["time_breaks"] = list(CONFIG.time_breaks)

    def on_toggle(brk: TimeBreak) -> None:
        st.session_state["time_breaks"] = toggle_time_break(st.session_state["time_breaks"], brk)

    st.caption("Time ranges (click to filter)")
    for col, brk in zip(st.columns(len(CONFIG.time_breaks)), CONFIG.time_breaks):
        with col:
            st.button(
                brk.label,
                key=f"break_{brk.label}",
                type="primary" if brk in st.session_state["time_breaks"] else "secondary",
                on_click=on_toggle,
                args=(brk,),
            )
    selected_breaks = st.session_state["time_breaks"]
    visible = filter_effort_cells(cells, selected_breaks)

    stats = effort_stats(visible)
    c1, c2, c3, c4, c5 = st.columns(5)
    with c1:
        kpi("Total visits", f"{stats.total_visits:,.0f}")
    with c2:
        kpi("Active grid cells", f"{stats.grid_cells:,}")
    with c3:
        kpi("Avg time per visit", f"{stats.avg_time}h")
    with c4:
        kpi("Max time recorded", f"{stats.max_time}h")
    with c5:
        kpi("Avg speed", f"{stats.avg_speed} km/h")

    if visible:
        df_grid = pd.DataFrame(visible)
        df_grid["break"] = [time_break_index(h, CONFIG.time_breaks) for h in df_grid["avg_time_hours"]]
        df_grid["range"] = [labels[i] for i in df_grid["break"]]
        palette = ["#%02x%02x%02x" % rgb for rgb in CONFIG.color_range]
        chart_grid = (
            alt.Chart(df_grid)
            .mark_square(size=40)
            .encode(
                x=alt.X("lng_grid_1km:Q", title="Longitude", scale=alt.Scale(zero=False)),
                y=alt.Y("lat_grid_1km:Q", title="Latitude", scale=alt.Scale(zero=False)),
                color=alt.Color("range:N", sort=labels, scale=alt.Scale(domain=labels, range=palette), title="Avg time"),
                tooltip=[
                    alt.Tooltip("avg_time_hours:Q", format=".2f", title="Average time (h)"),
                    alt.Tooltip("total_visits:Q", title="Total visits"),
                ],
            )
            .properties(height=600)
        )
        st.altair_chart(chart_grid, width="stretch")
        st.caption("Grid resolution: 1 × 1 km. Each cell is an area where fishing activity was recorded.")
    else:
        st.info("No grid cells in the selected time ranges.")

    st.divider()
    st.header("📋 Landing Sites Statistics")

    site_rows = records_or_stop("sites-stats")
    if not site_rows:
        st.info("Landing site statistics not available.")
    else:
        ranges = column_ranges(site_rows, SITE_STATS_COLUMNS)
        df_sites = pd.DataFrame(site_rows)[list(SITE_STATS_HEADERS)]

        def shade(col: pd.Series) -> list[str]:
            if col.name not in SITE_STATS_COLORS:
                return [""] * len(col)
            lo, hi = ranges[col.name]
            return [
                f"background-color: rgba({SITE_STATS_COLORS[col.name]}, {color_intensity(v, lo, hi) * 0.3:.3f})"
                for v in col
            ]

        styled = center_dataframe(df_sites).apply(shade).format(precision=2)
        st.dataframe(styled.relabel_index(list(SITE_STATS_HEADERS.values()), axis=1), width="stretch")

# =====================================================
# CATCH
# =====================================================
elif page == "Catch":
    st.header("🎣 Catch")
    time_series_section("Catch per unit effort (median)", "cpue", "kg/fisher/hour", landing_site, None)
    st.divider()
    gear_habitat_section("Catch Rate by Gear Type", "cpue", "kg/hrs")

# =====================================================
# REVENUE
# =====================================================
elif page == "Revenue":
    st.header("💰 Revenue")
    time_series_section("Revenue per unit effort (median)", "rpue", currency, landing_site, currency)
    st.divider()
    gear_habitat_section(
        "Revenue by Gear Type and Habitat",
        "rpue",
        f"{CONFIG.currency_symbols[currency]}/hrs",
        rate_for(currency, CONFIG.currency_rates),
    )

# =====================================================
# COMPOSITION
# =====================================================
elif page == "Composition":
    st.header("🐠 Catch Composition by Landing Site")

    table = taxa_composition(records_or_stop("taxa-sites"), CONFIG)
    if not table:
        st.info("Composition data not available.")
    else:
        by_category = category_series(table)
        sites_order = [site_label(str(s)) for s in table]
        df_comp = pd.DataFrame(
            [
                {"landing_site": site, "category": category, "percent": pct}
                for category, values in by_category.items()
                for site, pct in zip(sites_order, values)
            ]
        )
        chart_comp = (
            alt.Chart(df_comp)
            .mark_bar()
            .encode(
                y=alt.Y("landing_site:N", sort=sites_order, title=None),
                x=alt.X("percent:Q", stack="normalize", title="Catch Composition", axis=alt.Axis(format="%")),
                color=alt.Color("category:N", sort=list(CONFIG.display_categories), title=None),
                tooltip=["landing_site:N", "category:N", alt.Tooltip("percent:Q", format=".1f")],
            )
            .properties(height=max(450, len(sites_order) * 40))
        )
        st.altair_chart(chart_comp, width="stretch")

# =====================================================
# TAXA LENGTH
# =====================================================
else:
    st.header("📏 Fish Length Distribution by Taxa")
    st.caption("Ranked by median length")

    summaries = taxa_length_summaries(records_or_stop("taxa-length"))
    if not summaries:
        st.info("Length data not available.")
    else:
        df_len = pd.DataFrame(
            [{"taxon": t.taxon, **asdict(t.summary)} for t in summaries]
        )
        order = df_len["taxon"].tolist()
        base = alt.Chart(df_len).encode(y=alt.Y("taxon:N", sort=order, title="Fish Taxa"))
        whiskers = base.mark_rule().encode(x=alt.X("min:Q", title="Length (cm)"), x2="max:Q")
        boxes = base.mark_bar(size=14).encode(
            x="q1:Q",
            x2="q3:Q",
            tooltip=["taxon:N", "count:Q", "min:Q", "q1:Q", "median:Q", "q3:Q", "max:Q"],
        )
        medians = base.mark_tick(color="white", size=14).encode(x="median:Q")
        st.altair_chart(
            (whiskers + boxes + medians).properties(height=max(450, len(order) * 30)),
            width="stretch",
        )
        st.caption(
            "Each box shows the distribution of fish lengths: the central line is the median, box "
            "edges are the 1st and 3rd quartiles, whiskers show the minimum and maximum values."
        )

# =====================================================
# Footer
# =====================================================
st.caption("MongoDB exports • pandas • Streamlit • Altair | Fisheries monitoring")
