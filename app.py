"""
Seat Price Dashboard Streamlit application
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from seat_prices import buckets, data_prep, figs, stats, utils
from seat_prices.data_prep import AnalysisContext
from seat_prices.models import ALL, FilterSelection

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).parent / "data"
ASSETS_DIR = Path(__file__).parent / "assets"
DEFAULT_DATA_PATH = DATA_DIR / "0309.csv"
LOG_LEVEL = os.environ.get("SEAT_PRICES_LOG_LEVEL", "INFO")

TOP_ZONES = 15
ZONE_TABLE_ROWS = 20
REGULAR_ZONE_LIMIT = 30
VIEW_MODES = {
    "zonePrice": "Average price by zone",
    "floorPrice": "Average price by floor",
    "gradePrice": "Average price by grade",
    "heatMap": "Price heat map",
    "stats": "Detailed statistics",
}

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
def load_dataset(uploaded_file, local_path: str | Path) -> tuple[pd.DataFrame | None, pd.DataFrame, str]:
    empty_issues = pd.DataFrame(columns=data_prep.ISSUE_COLUMNS)
    if uploaded_file is not None:
        try:
            table, issues = data_prep.load_csv(uploaded_file)
            return table, issues, uploaded_file.name
        except data_prep.DataLoadError as exc:
            st.error(f"Unable to read uploaded file: {exc}")
            return None, empty_issues, uploaded_file.name

    path = Path(local_path).expanduser()
    if not path.exists():
        st.warning(f"Local CSV not found at {path}. Update the path or upload a file.")
        return None, empty_issues, str(path)
    try:
        table, issues = data_prep.load_csv(str(path))
        return table, issues, str(path)
    except (data_prep.DataLoadError, OSError) as exc:
        logger.exception("Failed to load %s", path)
        st.error(f"Unable to read {path}: {exc}")
        return None, empty_issues, str(path)


def sidebar_selection(context: AnalysisContext) -> FilterSelection:
    options = context.options()
    st.sidebar.subheader("Filters")

    def pick(label: str, values: list[str]) -> str:
        return st.sidebar.selectbox(
            label, [ALL] + values, format_func=lambda v: "All" if v == ALL else v
        )

    return FilterSelection(
        floor=pick("Floor", options["floors"]),
        grade=pick("Grade", options["grades"]),
        date_prefix=pick("Show date", options["dates"]),
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------
def render_plot(title: str, fig: go.Figure | None, key: str, subtitle: str | None = None) -> None:
    st.subheader(title)
    if subtitle:
        st.caption(subtitle)
    if fig is None or not fig.data:
        st.info("Not enough data to render this visual.")
        return
    st.plotly_chart(fig, use_container_width=True, key=key)
    try:
        ASSETS_DIR.mkdir(parents=True, exist_ok=True)
        png_path = ASSETS_DIR / f"{key}.png"
        fig.write_image(str(png_path), format="png", engine="kaleido", scale=2)
        st.download_button(
            "Download PNG", data=png_path.read_bytes(), file_name=f"{key}.png", mime="image/png", key=f"{key}_png"
        )
    except Exception as exc:
        st.warning(f"PNG export unavailable: {exc}")


def render_summary(summary) -> None:
    cols = st.columns(4)
    cols[0].metric("Lowest price", utils.format_won(summary.min))
    cols[1].metric("Average price", utils.format_won(summary.avg))
    cols[2].metric("Median price", utils.format_won(summary.median))
    cols[3].metric("Highest price", utils.format_won(summary.max))


def price_table(view: pd.DataFrame, label: str, title: str, columns: list[str]) -> pd.DataFrame:
    shown = view[[label] + columns].copy()
    for col in columns:
        if col.endswith("_price"):
            shown[col] = shown[col].map(utils.format_won)
    names = {
        label: title,
        "avg_price": "Average price",
        "min_price": "Lowest price",
        "max_price": "Highest price",
        "median_price": "Median price",
        "count": "Tickets",
    }
    return shown.rename(columns=names)


def render_heatmap(heatmap: pd.DataFrame, subtitle: str) -> None:
    regular = heatmap[heatmap["section"] == stats.REGULAR_SECTION].head(REGULAR_ZONE_LIMIT)
    floor = heatmap[heatmap["section"] == stats.FLOOR_SECTION]
    render_plot("Floor seat zones", figs.fig_zone_tiles(floor, stats.FLOOR_SECTION), "heat_floor", subtitle)
    render_plot(
        f"Regular zones (first {REGULAR_ZONE_LIMIT})",
        figs.fig_zone_tiles(regular, stats.REGULAR_SECTION),
        "heat_regular",
        subtitle,
    )
    legend = " ".join(
        f"<span style='background:{buckets.BAND_COLORS[band]};color:white;padding:2px 8px;border-radius:4px'>{band}</span>"
        for band in buckets.BAND_LABELS
    )
    st.markdown(f"Price range: {legend}", unsafe_allow_html=True)


def render_detail(views: dict, subtitle: str) -> None:
    matrix = stats.pivot_cross_tab(views["cross_tab"])
    if matrix.empty:
        st.info("No floor/grade combinations in the current selection.")
    else:
        render_plot("Average price by floor and grade", figs.fig_cross_tab(matrix), "cross_tab", subtitle)

    st.subheader("Average price by special note")
    st.dataframe(
        price_table(views["special_note"], "special_note", "Special note", ["avg_price", "count"]),
        hide_index=True,
        use_container_width=True,
    )
    st.subheader("Average price by show date")
    st.dataframe(
        price_table(views["date"], "date", "Show date", ["avg_price", "count"]),
        hide_index=True,
        use_container_width=True,
    )


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    st.set_page_config(page_title="Seat Price Dashboard", layout="wide")
    st.title("Seat prices by zone")

    st.sidebar.header("Data source")
    uploaded = st.sidebar.file_uploader("Upload a CSV", type=["csv"])
    local_files = utils.available_data_files(DATA_DIR)
    default_path = str(local_files[0]) if local_files else str(DEFAULT_DATA_PATH)
    local_path = st.sidebar.text_input(
        "Or load from local path",
        value=default_path,
        help="Relative or absolute path to a seat export CSV (default points to ./data).",
    )

    table, issues, source_label = load_dataset(uploaded, local_path)
    if table is None:
        if uploaded is None and not local_files:
            st.info("No CSV detected; showing synthetic sample data for preview.")
            table = data_prep.make_fake_data()
            source_label = "Synthetic sample data"
        else:
            st.info("Provide a CSV via upload or local path to explore seat prices.")
            return

    st.caption(f"Data source: {source_label} • Seats: {len(table):,}")
    if not issues.empty:
        with st.expander(f"{len(issues):,} malformed values were blanked"):
            st.dataframe(issues, hide_index=True, use_container_width=True)

    view_mode = st.sidebar.selectbox("View", list(VIEW_MODES), format_func=VIEW_MODES.get)
    context = AnalysisContext(table=table)
    context = AnalysisContext(table=table, selection=sidebar_selection(context))
    views = context.views()
    subtitle = context.selection.describe()

    if views["filtered"].empty:
        st.warning("No seats match the current filters.")
        return

    render_summary(views["summary"])

    if view_mode == "zonePrice":
        render_plot(
            f"Average price by zone (top {TOP_ZONES})",
            figs.fig_price_bars(views["zone"], "zone", top_n=TOP_ZONES, spread=True),
            "zone_price",
            subtitle,
        )
        st.dataframe(
            price_table(
                views["zone"].head(ZONE_TABLE_ROWS),
                "zone",
                "Zone",
                ["avg_price", "min_price", "max_price", "count"],
            ),
            hide_index=True,
            use_container_width=True,
        )
    elif view_mode == "floorPrice":
        render_plot("Average price by floor", figs.fig_price_bars(views["floor"], "floor"), "floor_price", subtitle)
        st.dataframe(
            price_table(views["floor"], "floor", "Floor", ["avg_price", "count"]),
            hide_index=True,
            use_container_width=True,
        )
    elif view_mode == "gradePrice":
        render_plot("Average price by grade", figs.fig_price_bars(views["grade"], "grade"), "grade_price", subtitle)
        st.dataframe(
            price_table(views["grade"], "grade", "Grade", ["avg_price", "count"]),
            hide_index=True,
            use_container_width=True,
        )
    elif view_mode == "heatMap":
        render_heatmap(views["heatmap"], subtitle)
    else:
        render_detail(views, subtitle)

    csv_bytes = views["filtered"].to_csv(index=False).encode("utf-8")
    st.download_button(
        "Download filtered CSV",
        data=csv_bytes,
        file_name="seat_prices_filtered.csv",
        mime="text/csv",
        key="filtered_csv",
    )


if __name__ == "__main__":
    main()
