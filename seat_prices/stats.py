"""
Grouping and price statistics over the seat table.

Every dimension view (zone, floor, grade, special note, show date) is the same
``group_by`` + ``stats_for`` pass with a different key and sort order. All
functions take the already-filtered table and return fresh frames.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

from . import buckets, utils
from .models import PriceStats
from .options import Selector, date_buckets, distinct_values, resolve

logger = logging.getLogger(__name__)

STAT_COLUMNS = ["count", "avg_price", "min_price", "max_price", "median_price"]
HEATMAP_COLUMNS = ["section", "zone", "count", "avg_price", "band"]
FLOOR_SECTION = "floor"
REGULAR_SECTION = "regular"


# ---------------------------------------------------------------------------
# Core pair
# ---------------------------------------------------------------------------
def group_keys(df: pd.DataFrame, key: Selector) -> pd.Series:
    """Key per row; missing keys collapse into ``NO_INFO`` so no row is dropped."""
    keys = resolve(df, key)
    return keys.map(lambda value: utils.NO_INFO if utils.is_missing(value) or value == "" else value)


def group_by(df: pd.DataFrame, key: Selector) -> dict[str, pd.DataFrame]:
    """
    Partition ``df`` by ``key``. Groups appear in first-occurrence order and
    keep table order inside; group sizes always sum to ``len(df)``.
    """
    if df.empty:
        return {}
    keys = group_keys(df, key)
    return {name: group for name, group in df.groupby(keys, sort=False)}


def priced_values(df: pd.DataFrame) -> np.ndarray:
    """Prices that count toward statistics: present and non-zero."""
    prices = pd.to_numeric(df["price"], errors="coerce")
    return prices[prices.notna() & (prices != 0)].to_numpy(dtype=float)


def stats_for(df: pd.DataFrame) -> PriceStats:
    """
    Count every row, but compute avg/min/max/median over priced rows only.

    The median is the element at index ``n // 2`` of the sorted prices: the
    upper-middle value for even ``n``, not the mean of the two middle values.
    """
    count = int(len(df))
    prices = priced_values(df)
    if prices.size == 0:
        return PriceStats(count=count)
    ordered = np.sort(prices)
    return PriceStats(
        count=count,
        avg=float(ordered.mean()),
        min=float(ordered[0]),
        max=float(ordered[-1]),
        median=float(ordered[ordered.size // 2]),
    )


def _stats_row(label: str, name: str, stats: PriceStats) -> dict:
    return {
        label: name,
        "count": stats.count,
        "avg_price": stats.avg,
        "min_price": stats.min,
        "max_price": stats.max,
        "median_price": stats.median,
    }


# ---------------------------------------------------------------------------
# Dimension views
# ---------------------------------------------------------------------------
def dimension_stats(
    df: pd.DataFrame,
    key: Selector,
    label: str,
    sort: str = "avg",
) -> pd.DataFrame:
    """
    One stats row per group. ``sort="avg"`` orders by average price, highest
    first (ties keep first-occurrence order); ``sort="key"`` orders by the
    group key ascending.
    """
    rows = [_stats_row(label, name, stats_for(group)) for name, group in group_by(df, key).items()]
    out = pd.DataFrame(rows, columns=[label] + STAT_COLUMNS)
    if out.empty:
        return out
    if sort == "avg":
        out = out.sort_values("avg_price", ascending=False, kind="stable")
    elif sort == "key":
        out = out.sort_values(label, ascending=True, kind="stable")
    else:
        raise ValueError(f"Unknown sort order: {sort!r}")
    logger.debug("dimension_stats(%s): %d groups over %d rows", label, len(out), len(df))
    return out.reset_index(drop=True)


def zone_price_stats(df: pd.DataFrame) -> pd.DataFrame:
    return dimension_stats(df, "zone", "zone")


def floor_price_stats(df: pd.DataFrame) -> pd.DataFrame:
    return dimension_stats(df, "floor", "floor")


def grade_price_stats(df: pd.DataFrame) -> pd.DataFrame:
    return dimension_stats(df, "grade", "grade")


def _note_labels(df: pd.DataFrame) -> pd.Series:
    return df["special_note"].map(utils.note_label)


def special_note_price_stats(df: pd.DataFrame) -> pd.DataFrame:
    return dimension_stats(df, _note_labels, "special_note")


def date_price_stats(df: pd.DataFrame) -> pd.DataFrame:
    """Per show date, in date-key order; undated seats fall under ``NO_INFO``."""
    return dimension_stats(df, date_buckets, "date", sort="key")


def overall_price_stats(df: pd.DataFrame) -> PriceStats:
    """Summary cards for the whole filtered set."""
    return stats_for(df)


# ---------------------------------------------------------------------------
# Floor × grade cross-tab
# ---------------------------------------------------------------------------
def cross_tab(df: pd.DataFrame) -> pd.DataFrame:
    """
    Stats for every floor × grade pair observed in ``df``. Pairs without any
    priced seat carry NaN stats and the ``no-data`` band instead of zeros.
    """
    columns = ["floor", "grade"] + STAT_COLUMNS + ["band"]
    floors = distinct_values(df, "floor")
    grades = distinct_values(df, "grade")
    if not floors or not grades:
        return pd.DataFrame(columns=columns)

    lo, hi = buckets.price_range(df)
    rows = []
    for floor in floors:
        floor_rows = df[df["floor"] == floor]
        for grade in grades:
            cell = floor_rows[floor_rows["grade"] == grade]
            stats = stats_for(cell)
            has_prices = priced_values(cell).size > 0
            row = {"floor": floor, "grade": grade, "count": stats.count}
            if has_prices:
                row.update(
                    avg_price=stats.avg,
                    min_price=stats.min,
                    max_price=stats.max,
                    median_price=stats.median,
                )
            else:
                row.update(avg_price=np.nan, min_price=np.nan, max_price=np.nan, median_price=np.nan)
            rows.append(row)
    out = pd.DataFrame(rows, columns=columns[:-1])
    out["band"] = buckets.assign_bands(out["avg_price"], lo, hi)
    return out


def pivot_cross_tab(table: pd.DataFrame, value: str = "avg_price") -> pd.DataFrame:
    """Pivot a ``cross_tab`` frame: floors as rows, grades as columns, in observed order."""
    if table.empty:
        return pd.DataFrame()
    floors = list(dict.fromkeys(table["floor"]))
    grades = list(dict.fromkeys(table["grade"]))
    matrix = table.pivot(index="floor", columns="grade", values=value)
    return matrix.reindex(index=floors, columns=grades)


def cross_tab_matrix(df: pd.DataFrame, value: str = "avg_price") -> pd.DataFrame:
    return pivot_cross_tab(cross_tab(df), value)


# ---------------------------------------------------------------------------
# Zone heat map
# ---------------------------------------------------------------------------
def _zone_tiles(seats: pd.DataFrame, section: str, limit: Optional[int]) -> list[dict]:
    zones = distinct_values(seats, "zone")
    if limit is not None:
        zones = zones[:limit]
    tiles = []
    for zone in zones:
        stats = stats_for(seats[seats["zone"] == zone])
        tiles.append(
            {
                "section": section,
                "zone": zone,
                "count": stats.count,
                "avg_price": stats.avg,
            }
        )
    return tiles


def zone_heatmap(df: pd.DataFrame, limit: Optional[int] = None) -> pd.DataFrame:
    """
    Zone tiles split into floor-seat zones and regular zones, each colored by
    its average price relative to the individual prices in ``df``. ``limit``
    caps the regular section only.
    """
    if df.empty:
        return pd.DataFrame(columns=HEATMAP_COLUMNS)
    lo, hi = buckets.price_range(df)
    on_floor = df["floor"].map(utils.is_floor_seat).astype(bool)
    tiles = _zone_tiles(df[on_floor], FLOOR_SECTION, None)
    tiles += _zone_tiles(df[~on_floor], REGULAR_SECTION, limit)
    out = pd.DataFrame(tiles, columns=HEATMAP_COLUMNS[:-1])
    out["band"] = buckets.assign_bands(out["avg_price"], lo, hi)
    return out
