"""
Display formatting utilities for the grievance portal
"""

from typing import Any, Optional
from datetime import datetime

from app.utils.date_utils import now_utc, parse_timestamp

EMPTY_PLACEHOLDER = "—"
INVALID_DATE = "Invalid date"


class DateTimeFormatter:
    """Date and time formatting utilities"""

    @classmethod
    def format_date(cls, value: Any, include_time: bool = False) -> str:
        """Format a timestamp as ``Jan 5, 2025`` (optionally with ``, 3:04 PM``)"""
        if not value:
            return EMPTY_PLACEHOLDER

        dt = parse_timestamp(value)
        if dt is None:
            return INVALID_DATE

        formatted = f"{dt:%b} {dt.day}, {dt.year}"
        if include_time:
            hour = dt.hour % 12 or 12
            suffix = "AM" if dt.hour < 12 else "PM"
            formatted += f", {hour}:{dt:%M} {suffix}"
        return formatted

    @classmethod
    def format_datetime(cls, value: Any) -> str:
        """Alias for format_date with include_time=True"""
        return cls.format_date(value, include_time=True)

    @classmethod
    def format_relative_time(cls, value: Any, now: Optional[datetime] = None) -> str:
        """Format relative time (just now, 5 minutes ago, 2 days ago)"""
        if not value:
            return EMPTY_PLACEHOLDER

        dt = parse_timestamp(value)
        if dt is None:
            return INVALID_DATE

        diff_secs = int(((now or now_utc()) - dt).total_seconds())
        diff_mins = diff_secs // 60
        diff_hours = diff_mins // 60
        diff_days = diff_hours // 24

        if diff_secs < 60:
            return "just now"
        if diff_mins < 60:
            return f"{diff_mins} minute{'s' if diff_mins != 1 else ''} ago"
        if diff_hours < 24:
            return f"{diff_hours} hour{'s' if diff_hours != 1 else ''} ago"
        if diff_days < 7:
            return f"{diff_days} day{'s' if diff_days != 1 else ''} ago"

        return cls.format_date(dt)

    @classmethod
    def format_duration_hours(cls, hours: float) -> str:
        """Format an average duration as ``5h`` below a day, ``3d`` otherwise"""
        if hours < 24:
            return f"{round_half_up(hours)}h"
        return f"{round_half_up(hours / 24)}d"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like the dashboards always did"""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def format_percentage(numerator: int, denominator: int, empty: str = f"{EMPTY_PLACEHOLDER}%") -> str:
    """Whole-number percentage with a trailing %, or ``empty`` when the denominator is 0"""
    if not denominator:
        return empty
    return f"{round_half_up(numerator / denominator * 100)}%"


format_date = DateTimeFormatter.format_date
format_datetime = DateTimeFormatter.format_datetime
format_relative_time = DateTimeFormatter.format_relative_time

__all__ = [
    "DateTimeFormatter",
    "EMPTY_PLACEHOLDER",
    "INVALID_DATE",
    "format_date",
    "format_datetime",
    "format_relative_time",
    "format_percentage",
    "round_half_up",
]
