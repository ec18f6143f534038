import numpy as np
import pytest

from seat_prices.models import SeatRecord, frame_from_records


@pytest.fixture
def seats():
    return frame_from_records(
        [
            SeatRecord("F1", "플로어석", "VIP", 198000.0, "03/09 18:00", None),
            SeatRecord("F1", "플로어석", "VIP", 250000.0, "03/10 18:00", "Aisle"),
            SeatRecord("F2", "플로어석", "VIP", None, "03/09 18:00", None),
            SeatRecord("101", "1층", "R", 176000.0, "03/09 18:00", "Side view"),
            SeatRecord("101", "1층", "R", 180000.0, "03/10 18:00", None),
            SeatRecord("205", "2층", "S", 154000.0, "03/10 18:00", "Side view"),
            SeatRecord("205", "2층", "S", 0.0, None, None),
            SeatRecord("310", "3층", "A", 132000.0, "03/09 18:00", None),
            SeatRecord(None, None, None, 99000.0, "03/09 18:00", None),
        ]
    )


@pytest.fixture
def example_table():
    return frame_from_records(
        [
            SeatRecord(zone="A", price=100000.0),
            SeatRecord(zone="A", price=200000.0),
            SeatRecord(zone="B", price=150000.0),
        ]
    )


@pytest.fixture
def rng():
    return np.random.default_rng(7)
