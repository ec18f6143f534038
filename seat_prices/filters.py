"""
Filter evaluation for the seat table.

``matches`` decides inclusion for a single record; ``filter_table`` is the
vectorized equivalent over the whole table and keeps the original row order.
"""
from __future__ import annotations

import pandas as pd

from .models import ALL, FilterSelection, SeatRecord

# selection attribute -> table column, for the equality dimensions
EQUALITY_DIMENSIONS = (
    ("zone", "zone"),
    ("floor", "floor"),
    ("grade", "grade"),
)


def matches(record: SeatRecord, selection: FilterSelection) -> bool:
    for attr, column in EQUALITY_DIMENSIONS:
        wanted = getattr(selection, attr)
        if wanted == ALL:
            continue
        value = getattr(record, column)
        if value is None or value != wanted:
            return False

    if selection.date_prefix != ALL:
        shown = record.show_datetime
        if not isinstance(shown, str) or selection.date_prefix not in shown:
            return False
    return True


def selection_mask(df: pd.DataFrame, selection: FilterSelection) -> pd.Series:
    mask = pd.Series(True, index=df.index)
    for attr, column in EQUALITY_DIMENSIONS:
        wanted = getattr(selection, attr)
        if wanted != ALL:
            # NaN never equals a string, so missing fields drop out here
            mask &= df[column] == wanted

    if selection.date_prefix != ALL:
        shown = df["show_datetime"]
        is_text = shown.map(lambda value: isinstance(value, str))
        contains = shown.where(is_text, "").astype(str).str.contains(
            selection.date_prefix, regex=False
        )
        mask &= is_text.astype(bool) & contains.astype(bool)
    return mask.astype(bool)


def filter_table(df: pd.DataFrame, selection: FilterSelection) -> pd.DataFrame:
    """Rows of ``df`` matching ``selection``, in table order."""
    if selection.is_default:
        return df.copy()
    return df.loc[selection_mask(df, selection)].copy()
