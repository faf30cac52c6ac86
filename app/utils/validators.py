"""
Form validation utilities for the grievance portal.

Validation runs before anything is forwarded to the hostel API and reports
problems per field, e.g. ``{"title": ["Title is required"]}``.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.core.exceptions import create_validation_error
from app.schemas.submissions import (
    ApologyCreate,
    ApologyReview,
    ComplaintCreate,
    StatusUpdate,
    TimelineEntryCreate,
)
from app.schemas.session import LoginRequest
from app.services.status import ApologyStatus, ComplaintStatus, normalize_status

MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024
COMPLAINT_ATTACHMENT_TYPES = ("image/jpeg",)
APOLOGY_ATTACHMENT_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")


class ValidationResult:
    """Field-scoped validation result container"""

    def __init__(self):
        self.field_errors: Dict[str, List[str]] = {}

    def add_error(self, field: str, error: str):
        """Add validation error"""
        self.field_errors.setdefault(field, []).append(error)

    def require(self, field: str, value: Any, error: str):
        """Record ``error`` when ``value`` is missing or blank"""
        if value is None or (isinstance(value, str) and not value.strip()):
            self.add_error(field, error)

    @property
    def is_valid(self) -> bool:
        return not self.field_errors

    def __bool__(self):
        """Allow boolean evaluation"""
        return self.is_valid

    def raise_for_errors(self):
        """Raise a ValidationError carrying every collected field error"""
        if self.field_errors:
            raise create_validation_error(self.field_errors)


class AttachmentInfo:
    """Name, content type and size of an uploaded file"""

    def __init__(self, filename: str, content_type: Optional[str], size: int):
        self.filename = filename
        self.content_type = content_type or ""
        self.size = size


def _check_attachments(
    result: ValidationResult,
    attachments: Iterable[AttachmentInfo],
    allowed_types: Sequence[str],
    type_error: str,
):
    for attachment in attachments:
        if attachment.size > MAX_ATTACHMENT_BYTES:
            result.add_error("attachments", f"File {attachment.filename} exceeds 5MB size limit")
        elif attachment.content_type not in allowed_types:
            result.add_error("attachments", type_error.format(name=attachment.filename))


def validate_login(payload: LoginRequest) -> None:
    result = ValidationResult()
    result.require("email", payload.email, "Email is required")
    result.require("password", payload.password, "Password is required")
    result.raise_for_errors()


def validate_complaint(payload: ComplaintCreate, attachments: Iterable[AttachmentInfo] = ()) -> None:
    """Check a new complaint and its JPEG attachments."""
    result = ValidationResult()
    result.require("title", payload.title, "Title is required")
    result.require("type", payload.type, "Category is required")
    result.require("description", payload.description, "Description is required")
    result.require("priority", payload.priority, "Please select a priority")
    _check_attachments(result, attachments, COMPLAINT_ATTACHMENT_TYPES, "File {name} must be JPEG format")
    result.raise_for_errors()


def validate_apology(payload: ApologyCreate, attachments: Iterable[AttachmentInfo] = ()) -> None:
    """Check a new apology letter and its optional attachment."""
    result = ValidationResult()
    result.require("type", payload.type, "Type is required")
    result.require("message", payload.message, "Message is required")
    _check_attachments(
        result, attachments, APOLOGY_ATTACHMENT_TYPES, "Only JPG, PNG, and PDF files are allowed"
    )
    result.raise_for_errors()


def validate_status_update(payload: StatusUpdate) -> str:
    """Return the canonical complaint status to send upstream."""
    result = ValidationResult()
    result.require("status", payload.status, "Status is required")
    result.raise_for_errors()

    canonical = normalize_status(payload.status).value
    if canonical not in {status.value for status in ComplaintStatus}:
        result.add_error("status", f"Unsupported complaint status: {payload.status}")
    result.raise_for_errors()
    return canonical


def validate_review(payload: ApologyReview) -> None:
    result = ValidationResult()
    result.require("status", payload.status, "Status is required")
    if payload.status and payload.status not in {status.value for status in ApologyStatus}:
        result.add_error("status", f"Unsupported apology status: {payload.status}")
    result.raise_for_errors()


def validate_timeline_entry(payload: TimelineEntryCreate) -> None:
    result = ValidationResult()
    result.require("message", payload.message, "Message is required")
    result.raise_for_errors()


__all__ = [
    "MAX_ATTACHMENT_BYTES",
    "ValidationResult",
    "AttachmentInfo",
    "validate_login",
    "validate_complaint",
    "validate_apology",
    "validate_status_update",
    "validate_review",
    "validate_timeline_entry",
]
