"""
Utility package initialization and exports
"""

# Key casing
from .key_normalizer import to_camel, normalize_keys

# DateTime utilities
from .date_utils import now_utc, parse_timestamp, trailing_months

# Formatters
from .formatters import (
    DateTimeFormatter,
    format_date,
    format_datetime,
    format_relative_time,
    format_percentage,
)

# Search
from .search import SearchHelper, fuzzy_search, highlight_text

__all__ = [
    "to_camel",
    "normalize_keys",
    "now_utc",
    "parse_timestamp",
    "trailing_months",
    "DateTimeFormatter",
    "format_date",
    "format_datetime",
    "format_relative_time",
    "format_percentage",
    "SearchHelper",
    "fuzzy_search",
    "highlight_text",
]
