"""
Relative price bands for heat-map coloring.

Bands are relative to the current filtered set: ``lo``/``hi`` come from
``price_range`` of whatever table the view was derived from.
"""
from __future__ import annotations

import math

import numpy as np
import pandas as pd

NO_DATA = "no-data"

# (upper bound of the ratio, exclusive; band label). The last band is closed.
PRICE_BANDS: tuple[tuple[float, str], ...] = (
    (0.2, "very-low"),
    (0.4, "low"),
    (0.6, "mid"),
    (0.8, "high"),
    (math.inf, "very-high"),
)
BAND_LABELS = tuple(label for _, label in PRICE_BANDS)

BAND_COLORS = {
    NO_DATA: "#e5e7eb",
    "very-low": "#1e3a8a",
    "low": "#1d4ed8",
    "mid": "#3b82f6",
    "high": "#ef4444",
    "very-high": "#b91c1c",
}


def _priced(values: pd.Series) -> pd.Series:
    prices = pd.to_numeric(values, errors="coerce")
    return prices[prices.notna() & (prices != 0)]


def price_range(df: pd.DataFrame) -> tuple[float, float]:
    """Min and max of the priced seats in ``df``; (0, 0) when none are priced."""
    if "price" not in df.columns:
        return 0.0, 0.0
    prices = _priced(df["price"])
    if prices.empty:
        return 0.0, 0.0
    return float(prices.min()), float(prices.max())


def price_ratio(price: float, lo: float, hi: float) -> float:
    spread = hi - lo
    if spread == 0:
        return 0.0
    return (price - lo) / spread


def intensity(price: float | None, lo: float, hi: float) -> str:
    if price is None or not price or (isinstance(price, float) and math.isnan(price)):
        return NO_DATA
    ratio = price_ratio(price, lo, hi)
    for upper, label in PRICE_BANDS:
        if ratio < upper:
            return label
    return PRICE_BANDS[-1][1]


def assign_bands(prices: pd.Series, lo: float, hi: float) -> pd.Series:
    """Vectorized ``intensity`` for a Series of prices."""
    values = pd.to_numeric(prices, errors="coerce")
    spread = hi - lo
    if spread == 0:
        ratios = pd.Series(0.0, index=values.index)
    else:
        ratios = (values - lo) / spread
    edges = [-np.inf] + [upper for upper, _ in PRICE_BANDS]
    bands = pd.cut(ratios, bins=edges, labels=list(BAND_LABELS), right=False).astype(object)
    unpriced = values.isna() | (values == 0)
    return bands.where(~unpriced, NO_DATA)
