"""
Record ingestion helpers.

After key normalization the backend still returns the owning student in
several shapes depending on the endpoint and its age. ``normalize_record``
folds them into one ``student`` mapping so the rest of the portal reads
``record["student"]["name"]`` and nothing else.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.utils.date_utils import first_timestamp

logger = logging.getLogger(__name__)

CREATED_KEYS = ("createdAt", "created_at", "date")
RESOLVED_KEYS = ("resolvedAt", "resolved_at")


class RecordKind(str, Enum):
    """The two record families shown in the portal."""

    COMPLAINT = "complaint"
    APOLOGY = "apology"

    @property
    def plural(self) -> str:
        return "complaints" if self is RecordKind.COMPLAINT else "apologies"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def normalize_student(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the canonical student reference for a record.

    Name lookup order: ``student.user.name``, ``student.name``, ``user.name``.
    Room lookup order: ``student.roomNo``, ``student.roomNumber``.
    ``room_no`` has already become ``roomNo`` during key normalization.
    """
    student = _as_dict(record.get("student"))
    student_user = _as_dict(student.get("user"))
    user = _as_dict(record.get("user"))

    room = _first(student.get("roomNo"), student.get("roomNumber"), record.get("roomNo"))

    return {
        "id": _first(student.get("id"), record.get("studentId")),
        "name": _first(student_user.get("name"), student.get("name"), user.get("name")),
        "email": _first(student_user.get("email"), student.get("email"), user.get("email")),
        "roomNo": str(room) if room is not None else None,
        "block": _first(student.get("block"), student.get("hostelBlock")),
    }


def normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy with a canonical ``student`` entry."""
    if not isinstance(record, dict):
        logger.warning(f"Skipping non-object record: {type(record).__name__}")
        return record

    normalized = dict(record)
    normalized["student"] = normalize_student(record)
    return normalized


def normalize_records(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [normalize_record(record) for record in records if isinstance(record, dict)]


def unwrap_list(payload: Any) -> List[Dict[str, Any]]:
    """Accept either ``{"data": [...]}`` or a bare list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, list):
            return data
    return []


def unwrap_item(payload: Any) -> Optional[Dict[str, Any]]:
    """Accept either ``{"data": {...}}`` or a bare object."""
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict):
            return data
        return payload
    return None


def created_at(record: Dict[str, Any]):
    """Creation timestamp of a record, ``None`` when missing or unparseable."""
    return first_timestamp(record, CREATED_KEYS)


def resolved_at(record: Dict[str, Any]):
    return first_timestamp(record, RESOLVED_KEYS)


def record_title(record: Dict[str, Any]) -> str:
    return record.get("title") or record.get("message") or ""


def student_name(record: Dict[str, Any]) -> Optional[str]:
    return _as_dict(record.get("student")).get("name") or _as_dict(record.get("user")).get("name")


def student_room(record: Dict[str, Any]) -> Optional[str]:
    student = _as_dict(record.get("student"))
    return student.get("roomNo") or student.get("roomNumber")


__all__ = [
    "RecordKind",
    "CREATED_KEYS",
    "normalize_student",
    "normalize_record",
    "normalize_records",
    "unwrap_list",
    "unwrap_item",
    "created_at",
    "resolved_at",
    "record_title",
    "student_name",
    "student_room",
]
