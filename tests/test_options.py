import pandas as pd

from seat_prices import options
from seat_prices.models import SeatRecord, frame_from_records


def test_date_buckets_are_distinct_in_first_occurrence_order():
    df = frame_from_records(
        [
            SeatRecord(show_datetime="03/09 18:00"),
            SeatRecord(show_datetime="03/09 19:00"),
            SeatRecord(show_datetime="03/10 18:00"),
        ]
    )
    assert options.distinct_values(df, options.date_buckets) == ["03/09", "03/10"]


def test_distinct_values_drops_missing_and_empty(seats):
    assert options.distinct_values(seats, "floor") == ["플로어석", "1층", "2층", "3층"]
    assert options.distinct_values(seats, "special_note") == ["Aisle", "Side view"]


def test_non_string_show_times_have_no_bucket():
    df = pd.DataFrame({"show_datetime": ["03/10 18:00", 309, None, "03/09 18:00"]})
    assert options.distinct_values(df, options.date_buckets) == ["03/10", "03/09"]


def test_filter_options_come_from_full_table(seats):
    opts = options.filter_options(seats)
    assert opts["grades"] == ["VIP", "R", "S", "A"]
    assert opts["dates"] == ["03/09", "03/10"]
    assert opts["zones"][:2] == ["F1", "F2"]
