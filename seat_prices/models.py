"""
Record shapes shared by the loader, the aggregation engine, and the app.

The seat table itself is a DataFrame with the canonical ``SEAT_COLUMNS``;
``SeatRecord`` is the typed view of a single row.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from . import utils

ALL = "all"

CATEGORY_COLUMNS = ("zone", "floor", "grade")
TEXT_COLUMNS = CATEGORY_COLUMNS + ("show_datetime", "special_note")
SEAT_COLUMNS = ("zone", "floor", "grade", "price", "show_datetime", "special_note")


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return str(value)


def _price_or_none(value: Any) -> Optional[float]:
    if value is None:
        return None
    price = float(value)
    if math.isnan(price):
        return None
    return price


@dataclass(frozen=True)
class SeatRecord:
    """One priced (or unpriced) seat."""

    zone: Optional[str] = None
    floor: Optional[str] = None
    grade: Optional[str] = None
    price: Optional[float] = None
    show_datetime: Optional[str] = None
    special_note: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SeatRecord":
        return cls(
            zone=_text_or_none(row.get("zone")),
            floor=_text_or_none(row.get("floor")),
            grade=_text_or_none(row.get("grade")),
            price=_price_or_none(row.get("price")),
            show_datetime=_text_or_none(row.get("show_datetime")),
            special_note=_text_or_none(row.get("special_note")),
        )


def records_from_frame(df: pd.DataFrame) -> list[SeatRecord]:
    return [SeatRecord.from_row(row) for row in df.to_dict(orient="records")]


def frame_from_records(records: Iterable[SeatRecord]) -> pd.DataFrame:
    rows = [asdict(record) for record in records]
    df = pd.DataFrame(rows, columns=list(SEAT_COLUMNS))
    df["price"] = pd.to_numeric(df["price"], errors="coerce").astype("float64")
    for col in TEXT_COLUMNS:
        df[col] = utils.text_column(df[col])
    return df


@dataclass(frozen=True)
class FilterSelection:
    """
    Active filter values. Each field is either ``ALL`` or a concrete value
    observed in the table; unobserved values simply match nothing.
    """

    floor: str = ALL
    grade: str = ALL
    date_prefix: str = ALL
    zone: str = ALL

    @property
    def is_default(self) -> bool:
        return all(value == ALL for value in (self.floor, self.grade, self.date_prefix, self.zone))

    def describe(self) -> str:
        parts = [
            f"Floor: {'All' if self.floor == ALL else self.floor}",
            f"Grade: {'All' if self.grade == ALL else self.grade}",
            f"Date: {'All' if self.date_prefix == ALL else self.date_prefix}",
        ]
        if self.zone != ALL:
            parts.insert(0, f"Zone: {self.zone}")
        return " | ".join(parts)


@dataclass(frozen=True)
class PriceStats:
    count: int = 0
    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0

