"""
Status vocabulary for complaints and apologies.

Complaints and apologies come from the backend with several historical
spellings (``pending``, ``in-review``, ``IN_PROGRESS`` ...). Everything is
reduced to one canonical value, and each resource type maps its canonical
values onto a shared dashboard bucket (pending / in review / resolved).
"""

from enum import Enum
from typing import Any, Dict, Optional


class CanonicalStatus(str, Enum):
    """Every status value the portal understands."""

    OPEN = "open"
    IN_PROGRESS = "inprogress"
    RESOLVED = "resolved"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    REVIEWED = "reviewed"
    SUBMITTED = "submitted"


class StatusBucket(str, Enum):
    """Dashboard bucket shared by both resource types."""

    PENDING = "pending"
    IN_REVIEW = "inReview"
    RESOLVED = "resolved"


class ComplaintStatus(str, Enum):
    """Complaint lifecycle."""

    OPEN = "open"
    IN_PROGRESS = "inprogress"
    RESOLVED = "resolved"

    @property
    def bucket(self) -> StatusBucket:
        return _COMPLAINT_BUCKETS[self]


class ApologyStatus(str, Enum):
    """Apology review lifecycle."""

    SUBMITTED = "submitted"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def bucket(self) -> Optional[StatusBucket]:
        # rejected apologies are outside all three buckets
        return _APOLOGY_BUCKETS.get(self)


_COMPLAINT_BUCKETS: Dict[ComplaintStatus, StatusBucket] = {
    ComplaintStatus.OPEN: StatusBucket.PENDING,
    ComplaintStatus.IN_PROGRESS: StatusBucket.IN_REVIEW,
    ComplaintStatus.RESOLVED: StatusBucket.RESOLVED,
}

_APOLOGY_BUCKETS: Dict[ApologyStatus, StatusBucket] = {
    ApologyStatus.SUBMITTED: StatusBucket.PENDING,
    ApologyStatus.REVIEWED: StatusBucket.IN_REVIEW,
    ApologyStatus.ACCEPTED: StatusBucket.RESOLVED,
}

_ALIASES: Dict[str, CanonicalStatus] = {
    "pending": CanonicalStatus.OPEN,
    "inreview": CanonicalStatus.IN_PROGRESS,
}

STATUS_LABELS: Dict[CanonicalStatus, str] = {
    CanonicalStatus.OPEN: "Open",
    CanonicalStatus.IN_PROGRESS: "In Progress",
    CanonicalStatus.RESOLVED: "Resolved",
    CanonicalStatus.ACCEPTED: "Accepted",
    CanonicalStatus.REJECTED: "Rejected",
    CanonicalStatus.REVIEWED: "Reviewed",
    CanonicalStatus.SUBMITTED: "Submitted",
}


def normalize_status(raw: Any) -> CanonicalStatus:
    """
    Map any backend status spelling onto a canonical status.

    Case, ``-`` and ``_`` are ignored; ``pending`` means open and
    ``in review`` means in progress. Missing or unknown input falls back
    to ``open``. Never raises.
    """
    if raw is None or raw == "":
        return CanonicalStatus.OPEN

    key = str(raw).lower().replace("-", "").replace("_", "")

    if key in _ALIASES:
        return _ALIASES[key]

    try:
        return CanonicalStatus(key)
    except ValueError:
        return CanonicalStatus.OPEN


def get_status_label(raw: Any) -> str:
    """Human-readable label for a raw status."""
    label = STATUS_LABELS.get(normalize_status(raw))
    if label:
        return label
    return str(raw) if raw else "Unknown"


def status_bucket(raw: Any) -> Optional[StatusBucket]:
    """Resolve a raw status through whichever vocabulary owns it."""
    canonical = normalize_status(raw)
    try:
        return ComplaintStatus(canonical.value).bucket
    except ValueError:
        return ApologyStatus(canonical.value).bucket


__all__ = [
    "CanonicalStatus",
    "StatusBucket",
    "ComplaintStatus",
    "ApologyStatus",
    "STATUS_LABELS",
    "normalize_status",
    "get_status_label",
    "status_bucket",
]
