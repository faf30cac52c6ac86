"""
Filter predicate composition for complaint and apology lists.

Status and category are narrowed upstream through query parameters; the
predicate built here refines that response with the advanced filter, the
date range and the free-text search. All constraints are ANDed.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from app.schemas.filters import ALL, FilterConfig
from app.services.records import RecordKind, created_at
from app.services.status import normalize_status
from app.utils.date_utils import parse_timestamp

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]

FILTER_FIELDS = ("status", "category", "priority", "date_from", "date_to")


def _never(_: Record) -> bool:
    return False


def _status_predicate(status: str, kind: RecordKind, strict_apology_status: bool) -> Predicate:
    if kind is RecordKind.APOLOGY and strict_apology_status:
        # apologies are matched on the raw backend value
        return lambda record: record.get("status") == status
    return lambda record: normalize_status(record.get("status")).value == status


def _field_predicate(field: str, expected: str) -> Predicate:
    return lambda record: record.get(field) == expected


def _date_predicate(bound: str, after: bool) -> Predicate:
    limit = parse_timestamp(bound)
    if limit is None:
        logger.warning(f"Unparseable date bound {bound!r}, no record will match")
        return _never

    def predicate(record: Record) -> bool:
        created: Optional[datetime] = created_at(record)
        if created is None:
            return False
        return created >= limit if after else created <= limit

    return predicate


def search_fields(record: Record, kind: RecordKind) -> List[str]:
    """Fields a free-text query is matched against."""
    student = record.get("student") or {}
    user = record.get("user") or {}

    if kind is RecordKind.APOLOGY:
        return [
            record.get("title") or record.get("message") or "",
            record.get("message") or record.get("description") or "",
            student.get("name") or "",
        ]

    # complaints carry the submitting user at the top level
    return [
        record.get("title") or "",
        user.get("name") or student.get("name") or "",
        str(student.get("roomNo") or ""),
    ]


def _search_predicate(query: str, kind: RecordKind) -> Predicate:
    needle = query.lower()
    return lambda record: any(needle in str(value).lower() for value in search_fields(record, kind))


def build_predicate(
    filter_config: Optional[FilterConfig] = None,
    search_query: Optional[str] = None,
    kind: Union[RecordKind, str] = RecordKind.COMPLAINT,
    strict_apology_status: bool = True,
) -> Predicate:
    """
    Compose the list predicate for one view.

    Args:
        filter_config: Advanced filter; ``None`` or ``"all"`` fields are ignored.
        search_query: Case-insensitive substring query; empty matches all.
        kind: Which field set the search uses and how status is compared.
        strict_apology_status: Compare apology status verbatim instead of
            through the status normalizer.

    Returns:
        Callable returning True for records that satisfy every constraint.
    """
    kind = RecordKind(kind)
    predicates: List[Predicate] = []

    if filter_config is not None:
        status = filter_config.constraint("status")
        if status:
            predicates.append(_status_predicate(status, kind, strict_apology_status))

        category = filter_config.constraint("category")
        if category:
            predicates.append(_field_predicate("type", category))

        priority = filter_config.constraint("priority")
        if priority:
            predicates.append(_field_predicate("priority", priority))

        # date_from later than date_to leaves nothing that satisfies both
        if filter_config.date_from:
            predicates.append(_date_predicate(filter_config.date_from, after=True))
        if filter_config.date_to:
            predicates.append(_date_predicate(filter_config.date_to, after=False))

    if search_query:
        predicates.append(_search_predicate(search_query, kind))

    def predicate(record: Record) -> bool:
        return all(check(record) for check in predicates)

    return predicate


def filter_records(
    records: Iterable[Record],
    filter_config: Optional[FilterConfig] = None,
    search_query: Optional[str] = None,
    kind: Union[RecordKind, str] = RecordKind.COMPLAINT,
    strict_apology_status: bool = True,
) -> List[Record]:
    """Return the records satisfying the composed predicate, order preserved."""
    predicate = build_predicate(filter_config, search_query, kind, strict_apology_status)
    return [record for record in records if predicate(record)]


def server_query_params(status: Optional[str] = None, category: Optional[str] = None) -> Dict[str, str]:
    """Query parameters narrowing a list request upstream."""
    params: Dict[str, str] = {}
    if status and status != ALL:
        params["status"] = status
    if category and category != ALL:
        params["type"] = category
    return params


def active_filter_count(filters: Optional[FilterConfig]) -> int:
    """Number of fields that actually constrain the list."""
    if filters is None:
        return 0
    return sum(1 for name in FILTER_FIELDS if filters.constraint(name))


__all__ = [
    "build_predicate",
    "filter_records",
    "search_fields",
    "server_query_params",
    "active_filter_count",
]
