"""
Unit Tests - Report Assembly
"""
import pytest

from src.statistics.dedup import DedupKey, deduplicate, get_strategy
from src.statistics.records import records_to_frame
from src.statistics.reports import (
    SUMMARY_COLUMNS,
    age_group_report,
    correlation_report,
    customer_counts,
    device_report,
    digital_interest_report,
    gender_breakdown,
    location_report,
    login_hour_report,
    summary_report,
)

YEAR = 2024


@pytest.fixture
def frame(sample_records):
    return records_to_frame(sample_records)


class TestGenderBreakdown:
    """Tests for gender_breakdown"""

    def test_row_level(self, frame):
        assert gender_breakdown(frame) == {"F": 3, "M": 2}

    def test_by_email(self, frame):
        result = gender_breakdown(deduplicate(frame, DedupKey.EMAIL))
        assert result == {"F": 2, "M": 2}
        assert list(result) == ["F", "M"]

    def test_missing_gender_is_unknown(self, make_record):
        frame = records_to_frame([
            make_record(email="a@x.com", gender=None),
            make_record(email="b@x.com", gender="M"),
            make_record(email="c@x.com", gender=None),
        ])
        assert gender_breakdown(frame) == {"unknown": 2, "M": 1}


class TestAgeGroupReport:
    """Tests for age_group_report"""

    def test_buckets_in_label_order(self, frame):
        result = age_group_report(frame, YEAR)

        assert [(r.age_group, r.count, r.avg_age, r.avg_birth_year) for r in result] == [
            ("18-24", 1, 23.0, 2001),
            ("25-34", 2, 34.0, 1990),
            ("35-44", 1, 39.0, 1985),
        ]

    def test_missing_birth_years_excluded(self, frame):
        total = sum(r.count for r in age_group_report(frame, YEAR))
        assert total == frame["birth_year"].drop_nulls().len()

    def test_no_birth_years(self, make_record):
        frame = records_to_frame([make_record(birth_year=None)])
        assert age_group_report(frame, YEAR) == []


class TestBreakdowns:
    """Tests for the per-field breakdowns"""

    def test_digital_interests(self, frame):
        result = digital_interest_report(frame)

        assert [(r.interest, r.count, r.percentage) for r in result] == [
            ("Music", 3, 75.0),
            ("Sports", 1, 25.0),
        ]

    def test_digital_interests_deduplicated(self, frame):
        result = digital_interest_report(deduplicate(frame, DedupKey.EMAIL))

        assert [(r.interest, r.count, r.percentage) for r in result] == [
            ("Music", 2, 66.67),
            ("Sports", 1, 33.33),
        ]

    def test_devices_skip_empty(self, frame):
        result = device_report(frame)
        assert [(r.device, r.count) for r in result] == [("iPhone", 2), ("Samsung", 2)]

    def test_locations(self, frame):
        result = location_report(frame)

        assert [(r.location_type, r.count, r.unique_locations) for r in result] == [
            ("Mall", 3, 2),
            ("Cafe", 1, 1),
        ]

    def test_login_hours_ascending(self, frame):
        result = login_hour_report(frame)
        assert [(r.hour, r.count) for r in result] == [("09", 2), ("10", 1), ("21", 1)]


class TestCorrelationReport:
    """Tests for correlation_report"""

    def test_report(self, frame):
        result = correlation_report(frame, YEAR)

        assert result.total_analyzed == 4
        assert result.age_by_gender == {"F": 34.0, "M": 31.0}
        assert result.summary.avg_age == 32.5
        assert result.summary.gender_distribution == {"F": 2, "M": 2}

        first = result.scatter_data[0]
        assert (first.age, first.gender, first.device) == (34, "F", "iPhone")
        assert (first.digital_interest, first.location_type) == ("Music", "Mall")

    def test_scatter_limit(self, frame):
        result = correlation_report(frame, YEAR, scatter_limit=2)

        assert len(result.scatter_data) == 2
        assert result.total_analyzed == 4

    def test_zero_birth_year_and_blank_gender_excluded(self, make_record):
        frame = records_to_frame([
            make_record(birth_year=0, gender="F"),
            make_record(birth_year=1990, gender=""),
            make_record(birth_year=1990, gender=None),
            make_record(birth_year=2000, gender="M"),
        ])

        result = correlation_report(frame, YEAR)

        assert result.total_analyzed == 1
        assert result.age_by_gender == {"M": 24.0}

    def test_nothing_to_analyze(self, make_record):
        frame = records_to_frame([make_record(birth_year=None, gender="F")])

        result = correlation_report(frame, YEAR)

        assert result.total_analyzed == 0
        assert result.scatter_data == []
        assert result.summary.avg_age == 0


class TestSummaryReport:
    """Tests for summary_report"""

    def test_counts_side_by_side(self, frame):
        counts = customer_counts(frame)

        assert counts.total_records == 5
        assert counts.by_customer_id == 3
        assert counts.by_email == 4
        assert counts.by_name == 3
        assert counts.by_name_email == 4

    def test_email_population(self, sample_records):
        frame = records_to_frame(sample_records, SUMMARY_COLUMNS)

        result = summary_report(frame, get_strategy(DedupKey.EMAIL), YEAR)

        assert result.dedup_key == "email"
        assert result.total_customers == 4
        assert result.demographics.age.average == 32.0
        assert (result.demographics.age.min, result.demographics.age.max) == (23, 39)
        assert result.demographics.birth_year.average == 1992
        assert (result.demographics.birth_year.min, result.demographics.birth_year.max) == (1985, 2001)
        assert result.demographics.gender == {"F": 2, "M": 2}
        assert [(d.interest, d.count) for d in result.digital_interests] == [("Music", 2), ("Sports", 1)]
        assert [(d.device, d.count) for d in result.devices] == [("Samsung", 2), ("iPhone", 1)]
        assert [(d.location_type, d.count) for d in result.location_types] == [("Mall", 2), ("Cafe", 1)]

    @pytest.mark.parametrize("key", list(DedupKey))
    def test_total_matches_direct_count(self, sample_records, key):
        frame = records_to_frame(sample_records, SUMMARY_COLUMNS)
        columns = get_strategy(key).columns
        if columns:
            expected = len({tuple(getattr(r, c) for c in columns) for r in sample_records})
        else:
            expected = len(sample_records)

        result = summary_report(frame, get_strategy(key), YEAR)

        assert result.total_customers == expected
        assert result.customer_counts.total_records == len(sample_records)
