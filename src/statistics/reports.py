"""
Report Assembly

Pure functions composing dedup, reducers and derived fields into the
report payloads. Every function takes an already projected (and, where
relevant, deduplicated) frame and never touches the store.
"""

from typing import Dict, List

import polars as pl

from src.statistics.dedup import DedupKey, DedupStrategy, count_all_variants, deduplicate
from src.statistics.derived import (
    AGE_GROUPS,
    age_group_expr,
    known_ages,
    round_half_up,
    summarize,
)
from src.statistics.reducers import SortMode, drop_empty, group_count, with_percentages
from src.statistics.schemas import (
    AgeGroupStat,
    AgeStats,
    BirthYearStats,
    CorrelationReport,
    CorrelationSummary,
    CustomerCounts,
    Demographics,
    DeviceStat,
    InterestCount,
    InterestStat,
    LocationStat,
    LocationTypeCount,
    LoginHourStat,
    ScatterPoint,
    SummaryReport,
)

UNKNOWN_GENDER = "unknown"


def gender_breakdown(frame: pl.DataFrame) -> Dict[str, int]:
    """Gender label -> count, largest first; a missing gender counts as "unknown"."""
    breakdown: Dict[str, int] = {}
    for group in group_count(frame, "gender", sort=SortMode.COUNT_DESC):
        label = UNKNOWN_GENDER if group.label is None else group.label
        breakdown[label] = breakdown.get(label, 0) + group.count
    return breakdown


def age_group_report(frame: pl.DataFrame, current_year: int) -> List[AgeGroupStat]:
    """Bucketed counts with average age and birth year, in bucket order."""
    aged = known_ages(frame, current_year)
    if aged.height == 0:
        return []

    grouped = (
        aged.with_columns(age_group_expr().alias("age_group"))
        .group_by("age_group", maintain_order=True)
        .agg(
            pl.len().alias("count"),
            pl.col("age").mean().alias("avg_age"),
            pl.col("birth_year").mean().alias("avg_birth_year"),
        )
    )
    by_label = {row["age_group"]: row for row in grouped.iter_rows(named=True)}

    return [
        AgeGroupStat(
            age_group=label,
            count=by_label[label]["count"],
            avg_age=round_half_up(by_label[label]["avg_age"], 1),
            avg_birth_year=int(round_half_up(by_label[label]["avg_birth_year"], 0)),
        )
        for label in AGE_GROUPS
        if label in by_label
    ]


def digital_interest_report(frame: pl.DataFrame) -> List[InterestStat]:
    groups = with_percentages(group_count(frame, "digital_interest", filter_empty=True))
    return [
        InterestStat(interest=g.label, count=g.count, percentage=g.percentage)
        for g in groups
    ]


def digital_interest_counts(frame: pl.DataFrame) -> List[InterestCount]:
    return [
        InterestCount(interest=g.label, count=g.count)
        for g in group_count(frame, "digital_interest", filter_empty=True)
    ]


def device_report(frame: pl.DataFrame) -> List[DeviceStat]:
    return [
        DeviceStat(device=g.label, count=g.count)
        for g in group_count(frame, "device", filter_empty=True)
    ]


def location_type_counts(frame: pl.DataFrame) -> List[LocationTypeCount]:
    return [
        LocationTypeCount(location_type=g.label, count=g.count)
        for g in group_count(frame, "location_type", filter_empty=True)
    ]


def location_report(frame: pl.DataFrame) -> List[LocationStat]:
    """Location types with visit counts and how many distinct places each covers."""
    frame = drop_empty(frame, "location_type")
    if frame.height == 0:
        return []

    grouped = (
        frame.group_by("location_type", maintain_order=True)
        .agg(
            pl.len().alias("count"),
            pl.col("location_name").n_unique().alias("unique_locations"),
        )
        .sort("count", descending=True, maintain_order=True)
    )
    return [
        LocationStat(
            location_type=row["location_type"],
            count=row["count"],
            unique_locations=row["unique_locations"],
        )
        for row in grouped.iter_rows(named=True)
    ]


def login_hour_report(frame: pl.DataFrame) -> List[LoginHourStat]:
    # Labels are zero-padded strings, so lexical order is hour order
    return [
        LoginHourStat(hour=g.label, count=g.count)
        for g in group_count(frame, "login_hour", filter_empty=True, sort=SortMode.KEY_ASC)
    ]


def correlation_report(
    frame: pl.DataFrame,
    current_year: int,
    scatter_limit: int = 1000,
) -> CorrelationReport:
    """
    Age against gender, device, interest and location type.

    Only rows with a non-zero birth year and a non-empty gender are analyzed.
    """
    analyzed = known_ages(
        frame.filter(
            pl.col("birth_year").is_not_null()
            & (pl.col("birth_year") != 0)
            & pl.col("gender").is_not_null()
            & (pl.col("gender") != "")
        ),
        current_year,
    )

    by_gender = (
        analyzed.group_by("gender", maintain_order=True)
        .agg(pl.len().alias("count"), pl.col("age").mean().alias("avg_age"))
    )
    age_by_gender = {}
    gender_distribution = {}
    for row in by_gender.iter_rows(named=True):
        age_by_gender[row["gender"]] = round_half_up(row["avg_age"], 1)
        gender_distribution[row["gender"]] = row["count"]

    scatter = [
        ScatterPoint(
            age=row["age"],
            gender=row["gender"],
            device=row["device"],
            digital_interest=row["digital_interest"],
            location_type=row["location_type"],
        )
        for row in analyzed.head(scatter_limit).iter_rows(named=True)
    ]

    return CorrelationReport(
        total_analyzed=analyzed.height,
        age_by_gender=age_by_gender,
        scatter_data=scatter,
        summary=CorrelationSummary(
            avg_age=summarize(analyzed["age"], 1).average,
            gender_distribution=gender_distribution,
        ),
    )


def customer_counts(frame: pl.DataFrame) -> CustomerCounts:
    """Population size under every counting key, side by side."""
    variants = count_all_variants(frame)
    return CustomerCounts(
        total_records=variants[DedupKey.NONE],
        by_customer_id=variants[DedupKey.CUSTOMER_ID],
        by_email=variants[DedupKey.EMAIL],
        by_name=variants[DedupKey.FULL_NAME],
        by_name_email=variants[DedupKey.NAME_EMAIL],
    )


def summary_report(
    frame: pl.DataFrame,
    strategy: DedupStrategy,
    current_year: int,
) -> SummaryReport:
    """
    Dashboard summary over the population selected by ``strategy``.

    ``frame`` must carry every dedup key column so that all counting
    variants can be reported next to the primary total.
    """
    counts = customer_counts(frame)
    population = deduplicate(frame, strategy)

    ages = summarize(known_ages(population, current_year)["age"], 1)
    birth_years = summarize(population["birth_year"], 0)

    return SummaryReport(
        customer_counts=counts,
        dedup_key=strategy.name,
        total_customers=population.height,
        demographics=Demographics(
            age=AgeStats(average=ages.average, min=ages.minimum, max=ages.maximum),
            birth_year=BirthYearStats(
                average=int(birth_years.average),
                min=birth_years.minimum,
                max=birth_years.maximum,
            ),
            gender=gender_breakdown(population),
        ),
        digital_interests=digital_interest_counts(population),
        devices=device_report(population),
        location_types=location_type_counts(population),
    )


SUMMARY_COLUMNS = [
    "customer_id",
    "email",
    "full_name",
    "birth_year",
    "gender",
    "digital_interest",
    "device",
    "location_type",
]
