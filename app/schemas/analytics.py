"""
Dashboard statistics and analytics schemas.

Everything here is derived from the visible record list on request and
never persisted.
"""

from typing import List

from pydantic import Field

from app.schemas.common.base import BaseSchema

__all__ = [
    "AggregateStats",
    "TrendPoint",
    "BreakdownItem",
    "StatusSummary",
    "DashboardMetrics",
    "AdminAnalytics",
    "StudentAnalytics",
]


class AggregateStats(BaseSchema):
    """Headline counts for the active dashboard tab."""

    total: int = Field(default=0, ge=0)
    resolved: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    in_review: int = Field(default=0, ge=0, alias="inReview")
    resolution_rate: str = Field(
        default="—%",
        alias="resolutionRate",
        description="Whole-number percentage, '—%' for an empty list",
    )


class TrendPoint(BaseSchema):
    """Record count for one calendar month."""

    month: int = Field(..., ge=1, le=12)
    year: int
    label: str = Field(..., description="Short month name, e.g. 'Jan'")
    count: int = Field(default=0, ge=0)


class BreakdownItem(BaseSchema):
    """One slice of a category or status chart."""

    key: str
    label: str
    value: int = Field(..., ge=0)


class StatusSummary(BaseSchema):
    """Server-side complaint status summary."""

    total: int = 0
    resolved: int = 0
    open: int = 0
    inprogress: int = 0


class DashboardMetrics(BaseSchema):
    """
    Server-side metrics shown on the admin dashboard.

    Each metric falls back to its zero default when the upstream call for
    it fails; ``degraded`` lists the metrics that did.
    """

    status_summary: StatusSummary = Field(default_factory=StatusSummary, alias="statusSummary")
    resolution_rate: float = Field(default=0, alias="resolutionRate")
    resolution_rate_label: str = Field(default="—%", alias="resolutionRateLabel")
    pending_count: int = Field(default=0, alias="pendingCount")
    pending_apologies: int = Field(default=0, alias="pendingApologies")
    degraded: List[str] = Field(default_factory=list)


class AdminAnalytics(BaseSchema):
    """Charts for the admin analytics panel."""

    stats: AggregateStats
    category_breakdown: List[BreakdownItem] = Field(default_factory=list, alias="categoryBreakdown")
    status_breakdown: List[BreakdownItem] = Field(default_factory=list, alias="statusBreakdown")
    monthly_trend: List[TrendPoint] = Field(default_factory=list, alias="monthlyTrend")
    average_resolution_time: str = Field(default="N/A", alias="averageResolutionTime")


class StudentAnalytics(BaseSchema):
    """Charts for a student's own submissions."""

    complaints: AggregateStats
    apologies: AggregateStats
    status_breakdown: List[BreakdownItem] = Field(default_factory=list, alias="statusBreakdown")
    monthly_trend: List[TrendPoint] = Field(default_factory=list, alias="monthlyTrend")
    average_response_time: str = Field(default="N/A", alias="averageResponseTime")
    recent_complaints: List[dict] = Field(default_factory=list, alias="recentComplaints")
    recent_apologies: List[dict] = Field(default_factory=list, alias="recentApologies")
