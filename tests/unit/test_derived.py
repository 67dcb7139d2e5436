"""
Unit Tests - Derived Fields
"""
import pytest
import polars as pl

from src.statistics.derived import (
    AGE_GROUPS,
    age_group,
    age_group_expr,
    known_ages,
    resolve_current_year,
    round_half_up,
    summarize,
)
from src.statistics.records import coerce_birth_year


class TestAgeGroup:
    """Tests for age bucketing"""

    @pytest.mark.parametrize("age,expected", [
        (10, "18-24"),
        (18, "18-24"),
        (24, "18-24"),
        (25, "25-34"),
        (34, "25-34"),
        (35, "35-44"),
        (44, "35-44"),
        (45, "45-54"),
        (55, "55-64"),
        (64, "55-64"),
        (65, "65+"),
        (90, "65+"),
    ])
    def test_boundaries(self, age, expected):
        assert age_group(age) == expected

    def test_expression_matches_scalar(self):
        ages = list(range(0, 100))
        frame = pl.DataFrame({"age": ages})

        labels = frame.select(age_group_expr().alias("group"))["group"].to_list()

        assert labels == [age_group(age) for age in ages]
        assert set(labels) == set(AGE_GROUPS)


class TestRoundHalfUp:
    """Tests for report rounding"""

    @pytest.mark.parametrize("value,ndigits,expected", [
        (2.5, 0, 3.0),
        (0.125, 2, 0.13),
        (36.45, 1, 36.5),
        (66.666, 2, 66.67),
        (33.333, 2, 33.33),
        (1992.0, 0, 1992.0),
    ])
    def test_rounding(self, value, ndigits, expected):
        assert round_half_up(value, ndigits) == expected


class TestSummarize:
    """Tests for null-safe summaries"""

    def test_age_summary_skips_missing_birth_year(self):
        frame = pl.DataFrame({"birth_year": [1990, None, 1985]}, schema={"birth_year": pl.Int64})

        ages = known_ages(frame, 2024)["age"]
        result = summarize(ages, 1)

        assert result.count == 2
        assert result.average == 36.5
        assert result.minimum == 34
        assert result.maximum == 39

    def test_empty_input(self):
        result = summarize(pl.Series("age", [], dtype=pl.Int64), 1)

        assert result.count == 0
        assert result.average == 0
        assert result.minimum is None
        assert result.maximum is None

    def test_all_null_input(self):
        result = summarize(pl.Series("age", [None, None], dtype=pl.Int64), 1)
        assert result.count == 0


class TestBirthYearCoercion:
    """Tests for birth year normalization"""

    @pytest.mark.parametrize("value,expected", [
        (1990, 1990),
        (1990.0, 1990),
        (" 1985 ", 1985),
        ("abc", None),
        ("", None),
        (None, None),
        (float("nan"), None),
        (True, None),
    ])
    def test_coerce(self, value, expected):
        assert coerce_birth_year(value) == expected

    def test_resolve_current_year_override(self):
        assert resolve_current_year(2024) == 2024
        assert resolve_current_year() >= 2024
