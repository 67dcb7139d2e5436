"""
Report Schemas

Pydantic models for every report the engine assembles. Field names are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Base for report payloads"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class CustomerOut(ReportModel):
    """Raw customer record as listed by the API"""
    sequence_index: Optional[int]
    customer_id: int
    location_name: str
    date: str
    login_hour: str
    full_name: str
    birth_year: Optional[int]
    gender: Optional[str]
    email: str
    phone: Optional[str]
    device: Optional[str]
    digital_interest: Optional[str]
    location_type: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class CustomerPage(ReportModel):
    """Paginated customer listing"""
    page: int
    limit: int
    total_items: int
    total_pages: int
    data: List[CustomerOut]


class AgeGroupStat(ReportModel):
    age_group: str
    count: int
    avg_age: float
    avg_birth_year: int


class InterestStat(ReportModel):
    interest: str
    count: int
    percentage: float


class InterestCount(ReportModel):
    interest: str
    count: int


class DeviceStat(ReportModel):
    device: str
    count: int


class LocationStat(ReportModel):
    location_type: str
    count: int
    unique_locations: int


class LocationTypeCount(ReportModel):
    location_type: str
    count: int


class LoginHourStat(ReportModel):
    hour: str
    count: int


class ScatterPoint(ReportModel):
    """One analyzed row of the correlation report"""
    age: int
    gender: str
    device: Optional[str]
    digital_interest: Optional[str]
    location_type: Optional[str]


class CorrelationSummary(ReportModel):
    avg_age: float
    gender_distribution: Dict[str, int]


class CorrelationReport(ReportModel):
    """Age vs. categorical attributes, over rows with both birth year and gender"""
    total_analyzed: int
    age_by_gender: Dict[str, float]
    scatter_data: List[ScatterPoint]
    summary: CorrelationSummary


class CustomerCounts(ReportModel):
    """Population size under every counting methodology"""
    total_records: int
    by_customer_id: int
    by_email: int
    by_name: int
    by_name_email: int


class AgeStats(ReportModel):
    average: float
    min: Optional[int]
    max: Optional[int]


class BirthYearStats(ReportModel):
    average: int
    min: Optional[int]
    max: Optional[int]


class Demographics(ReportModel):
    age: AgeStats
    birth_year: BirthYearStats
    gender: Dict[str, int]


class SummaryReport(ReportModel):
    """
    Dashboard summary.

    ``customer_counts`` always carries every dedup variant; everything else
    is computed over the population selected by ``dedup_key``.
    """
    customer_counts: CustomerCounts
    dedup_key: str
    total_customers: int
    demographics: Demographics
    digital_interests: List[InterestCount]
    devices: List[DeviceStat]
    location_types: List[LocationTypeCount]
