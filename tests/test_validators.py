import pytest

from app.core.exceptions import ValidationError
from app.schemas.session import LoginRequest
from app.schemas.submissions import ApologyCreate, ApologyReview, ComplaintCreate, StatusUpdate
from app.utils.validators import (
    MAX_ATTACHMENT_BYTES,
    AttachmentInfo,
    validate_apology,
    validate_complaint,
    validate_login,
    validate_review,
    validate_status_update,
)


def field_errors(call, *args):
    with pytest.raises(ValidationError) as exc:
        call(*args)
    return exc.value.field_errors


def test_login_requires_both_fields():
    errors = field_errors(validate_login, LoginRequest(email=" ", password=""))
    assert errors == {"email": ["Email is required"], "password": ["Password is required"]}


def test_complaint_requires_title_and_priority():
    errors = field_errors(validate_complaint, ComplaintCreate(type="plumbing", description="Drips"))

    assert errors["title"] == ["Title is required"]
    assert errors["priority"] == ["Please select a priority"]


def test_complaint_attachments_must_be_small_jpegs():
    payload = ComplaintCreate(title="Leak", type="plumbing", description="Drips", priority="high")
    attachments = [
        AttachmentInfo("ok.jpg", "image/jpeg", 100),
        AttachmentInfo("big.jpg", "image/jpeg", MAX_ATTACHMENT_BYTES + 1),
        AttachmentInfo("shot.png", "image/png", 100),
    ]

    errors = field_errors(validate_complaint, payload, attachments)

    assert errors == {
        "attachments": [
            "File big.jpg exceeds 5MB size limit",
            "File shot.png must be JPEG format",
        ]
    }


def test_valid_complaint_passes():
    payload = ComplaintCreate(title="Leak", type="plumbing", description="Drips", priority="low")
    validate_complaint(payload, [AttachmentInfo("ok.jpg", "image/jpeg", 100)])


def test_apology_accepts_pdf_and_png_only():
    payload = ApologyCreate(type="outing", message="Sorry")
    validate_apology(payload, [AttachmentInfo("a.pdf", "application/pdf", 10)])

    errors = field_errors(validate_apology, payload, [AttachmentInfo("a.gif", "image/gif", 10)])
    assert errors == {"attachments": ["Only JPG, PNG, and PDF files are allowed"]}


def test_status_update_is_canonicalized():
    assert validate_status_update(StatusUpdate(status="In-Progress")) == "inprogress"


def test_status_update_rejects_apology_statuses():
    errors = field_errors(validate_status_update, StatusUpdate(status="accepted"))
    assert "status" in errors


def test_review_status_must_be_known():
    validate_review(ApologyReview(status="accepted"))
    assert "status" in field_errors(validate_review, ApologyReview(status="maybe"))
