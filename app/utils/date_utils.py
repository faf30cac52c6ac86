# app/utils/date_utils.py
from __future__ import annotations

"""
Date and time utility functions used across the project.

Notes:
- All helpers return timezone-aware datetimes in `timezone.utc`.
- Naïve inputs are assumed to already be in UTC; only tzinfo is attached.
- Parsing never raises: unparseable input yields ``None`` so callers can
  decide how bad data should be treated.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Optional, Tuple

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

UTC = timezone.utc


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Attach UTC to naïve datetimes, convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an API timestamp into an aware UTC datetime.

    Accepts datetimes, dates, ISO-8601 strings and epoch milliseconds.
    Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min).replace(tzinfo=UTC)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return to_utc(date_parser.isoparse(value.strip()))
        except (ValueError, OverflowError):
            pass
        try:
            return to_utc(date_parser.parse(value))
        except (ValueError, OverflowError):
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None
    return None


def first_timestamp(record: dict, keys: Iterable[str]) -> Optional[datetime]:
    """Parse the first truthy value found under ``keys``."""
    for key in keys:
        raw = record.get(key)
        if raw:
            return parse_timestamp(raw)
    return None


def trailing_months(count: int, today: Optional[date] = None) -> Iterable[Tuple[int, int]]:
    """Yield ``(year, month)`` for the last ``count`` months, oldest first, ending at ``today``."""
    today = today or now_utc().date()
    anchor = date(today.year, today.month, 1)
    for offset in range(count - 1, -1, -1):
        month_start = anchor - relativedelta(months=offset)
        yield month_start.year, month_start.month


__all__ = [
    "UTC",
    "now_utc",
    "to_utc",
    "parse_timestamp",
    "first_timestamp",
    "trailing_months",
]
