"""
Selectable filter values derived from the loaded seat table.
"""
from __future__ import annotations

from typing import Callable, Union

import pandas as pd

from . import utils

Selector = Union[str, Callable[[pd.DataFrame], pd.Series]]


def resolve(df: pd.DataFrame, selector: Selector) -> pd.Series:
    """Column name or ``DataFrame -> Series`` callable, aligned to ``df``."""
    if callable(selector):
        return selector(df)
    return df[selector]


def date_buckets(df: pd.DataFrame) -> pd.Series:
    return df["show_datetime"].map(utils.date_key)


def distinct_values(df: pd.DataFrame, selector: Selector) -> list[str]:
    """Unique non-empty values in first-occurrence order."""
    values = resolve(df, selector)
    kept = [value for value in values if not utils.is_missing(value) and value != ""]
    return list(dict.fromkeys(kept))


def filter_options(df: pd.DataFrame) -> dict[str, list[str]]:
    """Option lists for the sidebar; always built from the full table."""
    return {
        "zones": distinct_values(df, "zone"),
        "floors": distinct_values(df, "floor"),
        "grades": distinct_values(df, "grade"),
        "dates": distinct_values(df, date_buckets),
    }
