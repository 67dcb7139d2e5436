"""
Unit Tests - Group-and-Count Reducers
"""
import pytest
import polars as pl

from src.statistics.reducers import GroupCount, SortMode, group_count, with_percentages


@pytest.fixture
def devices():
    return pl.DataFrame(
        {"device": ["Oppo", "iPhone", "", "iPhone", None, "Samsung", "Oppo", "Vivo"]},
        schema={"device": pl.Utf8},
    )


class TestGroupCount:
    """Tests for group_count"""

    def test_count_desc_is_stable(self, devices):
        result = group_count(devices, "device")

        # Ties keep first-seen order: Oppo before iPhone, "" before None
        assert [(g.label, g.count) for g in result] == [
            ("Oppo", 2),
            ("iPhone", 2),
            ("", 1),
            (None, 1),
            ("Samsung", 1),
            ("Vivo", 1),
        ]

    def test_filter_empty(self, devices):
        result = group_count(devices, "device", filter_empty=True)

        labels = [g.label for g in result]
        assert "" not in labels
        assert None not in labels
        assert sum(g.count for g in result) == 6

    def test_key_asc_puts_null_last(self):
        frame = pl.DataFrame({"hour": ["21", None, "09", "10", "09"]}, schema={"hour": pl.Utf8})

        result = group_count(frame, "hour", sort=SortMode.KEY_ASC)

        assert [(g.label, g.count) for g in result] == [
            ("09", 2),
            ("10", 1),
            ("21", 1),
            (None, 1),
        ]

    def test_counts_are_positive(self, devices):
        assert all(g.count > 0 for g in group_count(devices, "device"))

    def test_empty_frame(self):
        frame = pl.DataFrame({"device": []}, schema={"device": pl.Utf8})
        assert group_count(frame, "device") == []

    def test_only_empty_values(self):
        frame = pl.DataFrame({"device": ["", None]}, schema={"device": pl.Utf8})
        assert group_count(frame, "device", filter_empty=True) == []


class TestPercentages:
    """Tests for with_percentages"""

    def test_share_of_filtered_total(self, devices):
        groups = with_percentages(group_count(devices, "device", filter_empty=True))

        shares = {g.label: g.percentage for g in groups}
        assert shares == {"Oppo": 33.33, "iPhone": 33.33, "Samsung": 16.67, "Vivo": 16.67}

    def test_sum_close_to_hundred(self):
        groups = [GroupCount(label=str(i), count=1) for i in range(7)]

        total = sum(g.percentage for g in with_percentages(groups))

        assert abs(total - 100) <= 0.01 * len(groups)

    def test_no_groups(self):
        assert with_percentages([]) == []
