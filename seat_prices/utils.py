"""
Shared utilities for the seat price dashboard.
"""
from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Iterable, Optional

import numpy as np
import pandas as pd

# Sentinel categories -----------------------------------------------------------

NO_INFO = "No info"
DATE_KEY_LENGTH = 5  # "03/09 18:00" -> "03/09"

# Floor labels containing a marker, or equal to / starting with one of the English
# forms, are floor-seat sections. Ordinal tiers ("2nd floor") stay regular.
FLOOR_SEAT_MARKERS = ("플로어",)
FLOOR_SEAT_LABELS = ("floor",)
FLOOR_SEAT_PREFIXES = ("floor seat", "floor standing")


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NA or value is pd.NaT


def coerce_text(value: Any) -> Optional[str]:
    """Strip text values; empty strings and nulls become None."""
    if is_missing(value):
        return None
    text = str(value).strip()
    return text or None


def date_key(value: Any) -> Optional[str]:
    """
    Date bucket of a show timestamp: its first ``DATE_KEY_LENGTH`` characters.
    Non-string values have no bucket.
    """
    if not isinstance(value, str) or not value:
        return None
    return value[:DATE_KEY_LENGTH]


def note_label(value: Any) -> str:
    """Special notes collapse empty or missing values into ``NO_INFO``."""
    text = coerce_text(value)
    return text if text else NO_INFO


def is_floor_seat(floor: Any) -> bool:
    if not isinstance(floor, str):
        return False
    if any(marker in floor for marker in FLOOR_SEAT_MARKERS):
        return True
    lowered = floor.strip().lower()
    return lowered in FLOOR_SEAT_LABELS or lowered.startswith(FLOOR_SEAT_PREFIXES)


def format_won(value: float | int | None) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "–"
    return f"{int(round(float(value))):,}원"


# File system helpers ----------------------------------------------------------

def available_data_files(data_dir: Path, suffixes: Iterable[str] = (".csv",)) -> list[Path]:
    """
    Enumerate seat exports the analyst can pick instead of using the uploader.
    """
    if not data_dir.exists():
        return []
    suffix_set = {s.lower() for s in suffixes}
    return sorted(
        path for path in data_dir.iterdir() if path.suffix.lower() in suffix_set and path.is_file()
    )


def text_column(values: pd.Series) -> pd.Series:
    """Object column of stripped text with NaN for every missing value."""
    cleaned = [np.nan if text is None else text for text in map(coerce_text, values)]
    return pd.Series(cleaned, index=values.index, dtype=object)
