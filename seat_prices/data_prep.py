"""
Data preparation layer for the seat price dashboard.

Reads a seat export CSV, maps it onto the canonical seat schema, and derives
every aggregate view the Streamlit app renders for a filter selection.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import IO, Any, Iterable

import numpy as np
import pandas as pd
import streamlit as st

from . import buckets, filters, options, stats, utils
from .models import CATEGORY_COLUMNS, SEAT_COLUMNS, TEXT_COLUMNS, FilterSelection

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Header mappings
# ---------------------------------------------------------------------------
# Cleaned header -> canonical column. The Korean names are the headers of the
# ticketing site export.
COLUMN_ALIASES = {
    "zone": "zone",
    "section": "zone",
    "구역": "zone",
    "floor": "floor",
    "level": "floor",
    "tier": "floor",
    "층": "floor",
    "grade": "grade",
    "class": "grade",
    "seat_grade": "grade",
    "등급": "grade",
    "price": "price",
    "가격": "price",
    "show_datetime": "show_datetime",
    "show_date": "show_datetime",
    "performance": "show_datetime",
    "공연일시": "show_datetime",
    "special_note": "special_note",
    "note": "special_note",
    "notes": "special_note",
    "특이사항": "special_note",
}

ISSUE_COLUMNS = ["row", "field", "value", "problem"]
PRICE_NOISE = re.compile(r"[,\s원₩]")


class DataLoadError(ValueError):
    """The source table could not be read or holds no seats."""


# ---------------------------------------------------------------------------
# Header / column utilities
# ---------------------------------------------------------------------------
def _clean_headers(columns: Iterable[Any]) -> list[str]:
    """Lowercase, strip, and snake_case column names."""
    return [str(col).strip().lower().replace(" ", "_") for col in columns]


def _map_headers(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for col in df.columns:
        target = COLUMN_ALIASES.get(col)
        # first matching header wins when an export carries duplicates
        if target and target not in renamed.values():
            renamed[col] = target
    return df[list(renamed)].rename(columns=renamed)


def _parse_price(value: Any) -> float | None:
    text = utils.coerce_text(value)
    if text is None:
        return None
    return float(PRICE_NOISE.sub("", text))


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------
def read_seat_csv(path_or_buffer: str | Path | IO[str]) -> pd.DataFrame:
    """Read a seat export with every field kept as text."""
    try:
        raw = pd.read_csv(path_or_buffer, dtype=str, skip_blank_lines=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Unable to parse seat table: {exc}") from exc
    if raw.empty:
        raise DataLoadError("Seat table has no rows")
    return raw


def normalize_seat_table(raw: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Coerce a raw export into ``SEAT_COLUMNS``.

    Malformed values are nulled rather than rejected; each one is reported as
    a row of the returned issues frame (row, field, value, problem). Rows are
    never dropped, so the table keeps the export's order.
    """
    work = raw.copy()
    work.columns = _clean_headers(work.columns)
    work = _map_headers(work)
    if work.columns.empty:
        raise DataLoadError(
            "No seat columns found; expected some of: " + ", ".join(SEAT_COLUMNS)
        )

    issues: list[dict] = []
    for col in SEAT_COLUMNS:
        if col not in work.columns:
            work[col] = np.nan
            issues.append({"row": None, "field": col, "value": None, "problem": "missing column"})

    df = pd.DataFrame(index=pd.RangeIndex(len(work)))
    for col in TEXT_COLUMNS:
        df[col] = utils.text_column(work[col].reset_index(drop=True))

    prices = []
    for idx, value in enumerate(work["price"]):
        try:
            price = _parse_price(value)
        except ValueError:
            issues.append({"row": idx, "field": "price", "value": value, "problem": "not a number"})
            price = None
        if price is not None and (not np.isfinite(price) or price < 0):
            issues.append({"row": idx, "field": "price", "value": value, "problem": "negative or non-finite"})
            price = None
        prices.append(np.nan if price is None else price)
    df["price"] = pd.Series(prices, dtype="float64")

    for col in CATEGORY_COLUMNS:
        if col in {issue["field"] for issue in issues if issue["row"] is None}:
            continue
        for idx in df.index[df[col].isna()]:
            issues.append({"row": int(idx), "field": col, "value": None, "problem": "missing value"})

    df = df[list(SEAT_COLUMNS)]
    report = pd.DataFrame(issues, columns=ISSUE_COLUMNS)
    if not report.empty:
        logger.warning(
            "Seat table has %d malformed values: %s",
            len(report),
            report.groupby(["field", "problem"]).size().to_dict(),
        )
    logger.info("Loaded %d seats (%d priced)", len(df), stats.priced_values(df).size)
    return df, report


@st.cache_data(show_spinner=False)
def load_csv(path_or_buffer: str | Path | IO[str]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Read a CSV, normalize schema, and return the seat table with its
    diagnostics frame.
    """
    return normalize_seat_table(read_seat_csv(path_or_buffer))


# ---------------------------------------------------------------------------
# Synthetic data for development
# ---------------------------------------------------------------------------
FAKE_FLOORS = {
    "Floor": ("VIP", 198_000),
    "1st tier": ("R", 176_000),
    "2nd tier": ("S", 154_000),
    "3rd tier": ("A", 132_000),
}
FAKE_SHOWS = ("03/08 18:00", "03/09 17:00", "03/10 17:00")
FAKE_NOTES = (None, None, None, "Obstructed view", "Side view", "Aisle")


def make_fake_data(n_seats: int = 600, seed: int | None = 42) -> pd.DataFrame:
    """
    Fabricate a synthetic seat table for local development previews.
    Roughly one seat in twelve is left unpriced.
    """
    rng = np.random.default_rng(seed)
    floors = list(FAKE_FLOORS)
    records: list[dict] = []
    for _ in range(n_seats):
        floor = floors[int(rng.integers(0, len(floors)))]
        grade, base_price = FAKE_FLOORS[floor]
        prefix = "F" if floor == "Floor" else floor[0]
        zone = f"{prefix}{int(rng.integers(1, 9))}"
        markup = float(rng.choice([1.0, 1.0, 1.5, 2.0, 3.0]))
        price = round(base_price * markup, -3)
        if rng.random() < 1 / 12:
            price = np.nan
        records.append(
            {
                "zone": zone,
                "floor": floor,
                "grade": grade,
                "price": price,
                "show_datetime": FAKE_SHOWS[int(rng.integers(0, len(FAKE_SHOWS)))],
                "special_note": FAKE_NOTES[int(rng.integers(0, len(FAKE_NOTES)))],
            }
        )

    df = pd.DataFrame(records, columns=list(SEAT_COLUMNS))
    df["price"] = df["price"].astype("float64")
    for col in TEXT_COLUMNS:
        df[col] = utils.text_column(df[col])
    return df


# ---------------------------------------------------------------------------
# Main aggregation
# ---------------------------------------------------------------------------
@st.cache_data(show_spinner=False)
def _derive_views(df: pd.DataFrame, floor: str, grade: str, date_prefix: str, zone: str) -> dict[str, Any]:
    selection = FilterSelection(floor=floor, grade=grade, date_prefix=date_prefix, zone=zone)
    filtered = filters.filter_table(df, selection)
    outputs = {
        "filtered": filtered,
        "summary": stats.overall_price_stats(filtered),
        "price_range": buckets.price_range(filtered),
        "zone": stats.zone_price_stats(filtered),
        "floor": stats.floor_price_stats(filtered),
        "grade": stats.grade_price_stats(filtered),
        "special_note": stats.special_note_price_stats(filtered),
        "date": stats.date_price_stats(filtered),
        "cross_tab": stats.cross_tab(filtered),
        "heatmap": stats.zone_heatmap(filtered),
    }
    logger.debug("derive_core(%s): %d of %d seats", selection.describe(), len(filtered), len(df))
    return outputs


def derive_core(df: pd.DataFrame, selection: FilterSelection = FilterSelection()) -> dict[str, Any]:
    """
    Produce every view for ``selection``. Bands in ``cross_tab`` and
    ``heatmap`` are relative to the filtered seats only.
    """
    return _derive_views(df, selection.floor, selection.grade, selection.date_prefix, selection.zone)


@dataclass(frozen=True)
class AnalysisContext:
    """
    The loaded table plus the active selection. Swapped as a whole on reload
    or filter change; engine calls never mutate it.
    """

    table: pd.DataFrame = field(compare=False)
    selection: FilterSelection = field(default_factory=FilterSelection)

    def with_selection(self, **changes: str) -> "AnalysisContext":
        return replace(self, selection=replace(self.selection, **changes))

    def filtered(self) -> pd.DataFrame:
        return filters.filter_table(self.table, self.selection)

    def options(self) -> dict[str, list[str]]:
        return options.filter_options(self.table)

    def views(self) -> dict[str, Any]:
        return derive_core(self.table, self.selection)
