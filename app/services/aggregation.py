"""
Dashboard aggregation over the visible record list.

All functions are pure: they take already-filtered, already-normalized
records and return fresh values. Status counting goes through the shared
status buckets so complaints and apologies can be mixed freely.
"""

import logging
import re
from collections import Counter
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.schemas.analytics import AggregateStats, BreakdownItem, TrendPoint
from app.services.records import created_at, resolved_at
from app.services.status import (
    STATUS_LABELS,
    CanonicalStatus,
    StatusBucket,
    normalize_status,
    status_bucket,
)
from app.utils.date_utils import first_timestamp, trailing_months
from app.utils.formatters import DateTimeFormatter, format_percentage

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

NOT_AVAILABLE = "N/A"
TREND_MONTHS = 6
CATEGORY_LIMIT = 6

_MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                 "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_URGENT_RE = re.compile(r"urgent\s*review|priority\s*:\s*high", re.IGNORECASE)


def aggregate(records: Sequence[Record]) -> AggregateStats:
    """
    Compute headline counts for a record list.

    Every status goes through the status normalizer before it is bucketed,
    so ``"Accepted"`` counts as resolved just like ``"accepted"``. Rejected
    apologies belong to no bucket, so ``total >= resolved + pending + in_review``.
    """
    buckets = Counter(status_bucket(record.get("status")) for record in records)
    total = len(records)
    resolved = buckets[StatusBucket.RESOLVED]

    return AggregateStats(
        total=total,
        resolved=resolved,
        pending=buckets[StatusBucket.PENDING],
        in_review=buckets[StatusBucket.IN_REVIEW],
        resolution_rate=format_percentage(resolved, total),
    )


def monthly_trend(
    records: Iterable[Record],
    today: Optional[date] = None,
    months: int = TREND_MONTHS,
) -> List[TrendPoint]:
    """Dense per-month counts for the trailing ``months`` calendar months, oldest first."""
    counts: Counter = Counter()
    for record in records:
        created = created_at(record)
        if created is not None:
            counts[(created.year, created.month)] += 1

    return [
        TrendPoint(month=month, year=year, label=_MONTH_LABELS[month - 1], count=counts[(year, month)])
        for year, month in trailing_months(months, today)
    ]


def category_breakdown(records: Iterable[Record], limit: int = CATEGORY_LIMIT) -> List[BreakdownItem]:
    """Most common record types, largest first; untyped records count as ``other``."""
    counts = Counter(record.get("type") or "other" for record in records)
    return [
        BreakdownItem(key=key, label=key[:1].upper() + key[1:], value=value)
        for key, value in counts.most_common(limit)
    ]


def status_breakdown(records: Iterable[Record], open_label: Optional[str] = None) -> List[BreakdownItem]:
    """Complaint status slices; empty slices are omitted."""
    tracked = (CanonicalStatus.OPEN, CanonicalStatus.IN_PROGRESS, CanonicalStatus.RESOLVED)
    counts = Counter(normalize_status(record.get("status")) for record in records)

    items = []
    for status in tracked:
        if counts[status] <= 0:
            continue
        label = open_label if status is CanonicalStatus.OPEN and open_label else STATUS_LABELS[status]
        items.append(BreakdownItem(key=status.value, label=label, value=counts[status]))
    return items


def _average_hours(durations: List[float]) -> str:
    if not durations:
        return NOT_AVAILABLE
    return DateTimeFormatter.format_duration_hours(sum(durations) / len(durations))


def average_resolution_time(records: Iterable[Record]) -> str:
    """Mean time from creation to resolution over resolved records, e.g. ``5h`` or ``3d``."""
    durations = []
    for record in records:
        if normalize_status(record.get("status")) is not CanonicalStatus.RESOLVED:
            continue
        finished = resolved_at(record)
        started = first_timestamp(record, ("createdAt", "created_at"))
        if finished is None or started is None:
            continue
        durations.append((finished - started).total_seconds() / 3600)
    return _average_hours(durations)


def average_response_time(records: Iterable[Record]) -> str:
    """Mean time from creation to last update over records that were picked up."""
    picked_up = (CanonicalStatus.IN_PROGRESS, CanonicalStatus.RESOLVED)
    durations = []
    for record in records:
        if normalize_status(record.get("status")) not in picked_up:
            continue
        started = first_timestamp(record, ("createdAt", "created_at"))
        if started is None:
            continue
        updated = first_timestamp(record, ("updatedAt", "updated_at")) or started
        durations.append((updated - started).total_seconds() / 3600)
    return _average_hours(durations)


def infer_priority(complaint: Record, timeline: Optional[Iterable[Record]] = None) -> str:
    """
    Effective priority of a complaint.

    A timeline entry mentioning an urgent review or ``priority: high`` marks
    the complaint as high priority; otherwise its own priority is used,
    defaulting to ``medium``.
    """
    for entry in timeline or ():
        text = entry.get("message") or entry.get("content") or ""
        if _URGENT_RE.search(str(text)):
            return "high"
    return complaint.get("priority") or "medium"


__all__ = [
    "NOT_AVAILABLE",
    "aggregate",
    "monthly_trend",
    "category_breakdown",
    "status_breakdown",
    "average_resolution_time",
    "average_response_time",
    "infer_priority",
]
