import numpy as np
import pandas as pd
import pytest

from seat_prices import buckets, stats, utils
from seat_prices.models import PriceStats, SeatRecord, frame_from_records


def test_zone_grouping_example(example_table):
    groups = stats.group_by(example_table, "zone")
    assert list(groups) == ["A", "B"]
    assert stats.stats_for(groups["A"]) == PriceStats(count=2, avg=150000, min=100000, max=200000, median=200000)
    assert stats.stats_for(groups["B"]) == PriceStats(count=1, avg=150000, min=150000, max=150000, median=150000)


def test_median_is_upper_middle_for_even_groups():
    # index n // 2 of the sorted prices, not the mean of the two middle values
    df = frame_from_records([SeatRecord(price=p) for p in (40.0, 10.0, 30.0, 20.0)])
    assert stats.stats_for(df).median == 30.0


def test_empty_stats_are_zero():
    empty = frame_from_records([])
    assert stats.stats_for(empty) == PriceStats(count=0, avg=0, min=0, max=0, median=0)


def test_unpriced_rows_count_but_do_not_move_prices():
    df = frame_from_records(
        [SeatRecord(price=None), SeatRecord(price=0.0), SeatRecord(price=120000.0)]
    )
    result = stats.stats_for(df)
    assert result.count == 3
    assert result.avg == result.min == result.max == result.median == 120000


def test_group_without_prices_reports_zeros():
    df = frame_from_records([SeatRecord(zone="Z", price=None)])
    assert stats.stats_for(df) == PriceStats(count=1)


@pytest.mark.parametrize("key", ["zone", "floor", "grade", "special_note"])
def test_grouping_is_partition_complete(seats, key):
    groups = stats.group_by(seats, key)
    assert sum(len(group) for group in groups.values()) == len(seats)


def test_date_grouping_is_partition_complete(seats):
    view = stats.date_price_stats(seats)
    assert view["count"].sum() == len(seats)
    assert list(view["date"]) == ["03/09", "03/10", utils.NO_INFO]


def test_stats_are_invariant_under_shuffling(seats, rng):
    baseline = stats.stats_for(seats)
    for _ in range(5):
        shuffled = seats.iloc[rng.permutation(len(seats))]
        assert stats.stats_for(shuffled) == baseline


def test_zone_view_sorted_by_average_descending(seats):
    view = stats.zone_price_stats(seats)
    assert list(view.columns) == ["zone"] + stats.STAT_COLUMNS
    assert view["avg_price"].is_monotonic_decreasing
    assert view.iloc[0]["zone"] == "F1"
    assert view.iloc[0]["avg_price"] == pytest.approx(224000)
    # zone F2 has no priced seats
    f2 = view.set_index("zone").loc["F2"]
    assert f2["count"] == 1 and f2["avg_price"] == 0


def test_missing_category_grouped_under_sentinel(seats):
    view = stats.floor_price_stats(seats)
    assert utils.NO_INFO in set(view["floor"])
    assert view["count"].sum() == len(seats)


def test_special_note_view_normalizes_blank_notes(seats):
    view = stats.special_note_price_stats(seats).set_index("special_note")
    assert view.loc[utils.NO_INFO, "count"] == 6
    assert view.loc["Side view", "avg_price"] == pytest.approx(165000)


def test_sort_ties_keep_first_occurrence_order(example_table):
    df = example_table.assign(zone=["A", "B", "C"], price=[150000.0, 150000.0, 150000.0])
    assert list(stats.zone_price_stats(df)["zone"]) == ["A", "B", "C"]


def test_unknown_sort_order_raises(seats):
    with pytest.raises(ValueError):
        stats.dimension_stats(seats, "zone", "zone", sort="size")


def test_views_of_empty_table_are_empty():
    empty = frame_from_records([])
    assert stats.zone_price_stats(empty).empty
    assert stats.cross_tab(empty).empty
    assert stats.zone_heatmap(empty).empty
    assert stats.group_by(empty, "zone") == {}


def test_cross_tab_reports_no_data_for_unpriced_pairs():
    df = frame_from_records(
        [
            SeatRecord(zone="A", floor="1층", grade="R", price=100000.0),
            SeatRecord(zone="B", floor="2층", grade="S", price=200000.0),
            SeatRecord(zone="C", floor="2층", grade="R", price=0.0),
        ]
    )
    table = stats.cross_tab(df).set_index(["floor", "grade"])
    assert len(table) == 4
    assert table.loc[("1층", "R"), "band"] == "very-low"
    assert table.loc[("2층", "S"), "band"] == "very-high"
    assert np.isnan(table.loc[("1층", "S"), "avg_price"])
    assert table.loc[("1층", "S"), "band"] == "no-data"
    # a pair with seats but no prices is still "no data"
    assert table.loc[("2층", "R"), "count"] == 1
    assert np.isnan(table.loc[("2층", "R"), "avg_price"])


def test_cross_tab_matrix_keeps_observed_order(seats):
    matrix = stats.cross_tab_matrix(seats)
    assert list(matrix.index) == ["플로어석", "1층", "2층", "3층"]
    assert list(matrix.columns) == ["VIP", "R", "S", "A"]
    assert matrix.loc["플로어석", "VIP"] == pytest.approx(224000)
    assert pd.isna(matrix.loc["1층", "VIP"])


def test_zone_heatmap_splits_floor_seats(seats):
    heatmap = stats.zone_heatmap(seats)
    floor = heatmap[heatmap["section"] == stats.FLOOR_SECTION]
    regular = heatmap[heatmap["section"] == stats.REGULAR_SECTION]
    assert list(floor["zone"]) == ["F1", "F2"]
    assert list(regular["zone"]) == ["101", "205", "310"]
    assert floor.set_index("zone").loc["F2", "band"] == "no-data"
    # F1 averages 224000 against a 99000..250000 range
    assert floor.set_index("zone").loc["F1", "band"] == "very-high"


def test_zone_heatmap_keeps_ordinal_floor_tiers_regular():
    df = frame_from_records(
        [
            SeatRecord(zone="F1", floor="Floor seating", grade="VIP", price=200000.0),
            SeatRecord(zone="201", floor="2nd floor", grade="R", price=150000.0),
            SeatRecord(zone="301", floor="3rd Floor", grade="S", price=100000.0),
        ]
    )
    heatmap = stats.zone_heatmap(df).set_index("zone")
    assert heatmap.loc["F1", "section"] == stats.FLOOR_SECTION
    assert heatmap.loc["201", "section"] == stats.REGULAR_SECTION
    assert heatmap.loc["301", "section"] == stats.REGULAR_SECTION


def test_zone_heatmap_limit_caps_regular_zones_only(seats):
    heatmap = stats.zone_heatmap(seats, limit=1)
    assert list(heatmap["zone"]) == ["F1", "F2", "101"]


def test_overall_stats_cover_filtered_set(seats):
    summary = stats.overall_price_stats(seats)
    assert summary.count == 9
    assert summary.min == 99000
    assert summary.max == 250000
    # sorted priced: 99k 132k 154k 176k 180k 198k 250k -> index 3
    assert summary.median == 176000


def test_heatmap_and_cross_tab_bands_agree_with_intensity(seats):
    lo, hi = buckets.price_range(seats)
    heatmap = stats.zone_heatmap(seats)
    expected = [buckets.intensity(avg, lo, hi) for avg in heatmap["avg_price"]]
    assert list(heatmap["band"]) == expected
    table = stats.cross_tab(seats)
    expected = [buckets.intensity(avg, lo, hi) for avg in table["avg_price"]]
    assert list(table["band"]) == expected
